"""A tree-walking interpreter for a small dynamically typed scripting language."""

from minilox.diagnostics import Diagnostic, DiagnosticEngine, Stage, format_diagnostic
from minilox.engine import CompilationArtifacts, EvaluationArtifacts, LoxEngine, RunArtifacts
from minilox.environment import Environment
from minilox.errors import EnvironmentDesync, RuntimeIssue, StepLimitExceeded
from minilox.interpreter import Interpreter
from minilox.parser import Parser
from minilox.resolver import Resolver
from minilox.runtime import stringify
from minilox.scanner import Scanner
from minilox.tokens import Token, TokenKind

__all__ = [
	"CompilationArtifacts",
	"Diagnostic",
	"DiagnosticEngine",
	"Environment",
	"EnvironmentDesync",
	"EvaluationArtifacts",
	"Interpreter",
	"LoxEngine",
	"Parser",
	"Resolver",
	"RunArtifacts",
	"RuntimeIssue",
	"Scanner",
	"Stage",
	"StepLimitExceeded",
	"Token",
	"TokenKind",
	"format_diagnostic",
	"stringify",
]
