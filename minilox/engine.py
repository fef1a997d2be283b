"""Scan -> parse -> resolve -> interpret pipeline used by the CLI and the web app."""

from __future__ import annotations

import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from minilox.diagnostics import Diagnostic, DiagnosticEngine, Stage
from minilox.errors import RuntimeIssue
from minilox.interpreter import Interpreter
from minilox.nodes import Expression, Statement
from minilox.parser import Parser
from minilox.resolver import Resolver
from minilox.scanner import Scanner
from minilox.tokens import Token

logger = logging.getLogger(__name__)

# Each call in the guest language costs about a dozen Python frames.
RECURSION_LIMIT = 10_000


@dataclass
class CompilationArtifacts:
	tokens: List[Token]
	statements: List[Statement]
	diagnostics: List[Diagnostic]
	duration_ms: float

	@property
	def has_errors(self) -> bool:
		return bool(self.diagnostics)


@dataclass
class RunArtifacts:
	compilation: CompilationArtifacts
	output: List[str] = field(default_factory=list)
	runtime_error: Optional[RuntimeIssue] = None
	steps: int = 0

	@property
	def diagnostics(self) -> List[Diagnostic]:
		return self.compilation.diagnostics

	@property
	def ok(self) -> bool:
		return not self.compilation.has_errors and self.runtime_error is None


@dataclass
class EvaluationArtifacts:
	diagnostics: List[Diagnostic]
	value: Optional[str] = None
	runtime_error: Optional[RuntimeIssue] = None


class LoxEngine:
	"""
	Owns one interpreter, so globals persist across `run` calls (REPL sessions).

	Printed lines are always captured in `RunArtifacts.output`; they are also
	forwarded to `printer` when one is given.
	"""

	def __init__(self, printer: Optional[Callable[[str], None]] = None, *, max_steps: Optional[int] = None) -> None:
		if sys.getrecursionlimit() < RECURSION_LIMIT:
			sys.setrecursionlimit(RECURSION_LIMIT)
		self._printer = printer
		self._output: List[str] = []
		self.interpreter = Interpreter(self._print, max_steps=max_steps)

	def _print(self, text: str) -> None:
		self._output.append(text)
		if self._printer is not None:
			self._printer(text)

	def compile(self, source: str) -> CompilationArtifacts:
		"""Scan, parse and (if those succeeded) resolve `source`."""
		diagnostics = DiagnosticEngine()
		start = time.perf_counter()
		tokens = Scanner(source, diagnostics.report_line).scan_tokens()
		diagnostics.stage = Stage.SYNTAX
		statements: List[Statement] = []
		try:
			statements = Parser(tokens, diagnostics.report_token).parse()
			if not diagnostics.has_errors:
				diagnostics.stage = Stage.RESOLUTION
				Resolver(diagnostics.report_token, self.interpreter.resolve).resolve(statements)
		except RecursionError:
			_report_nesting(diagnostics, tokens)
		duration_ms = (time.perf_counter() - start) * 1000
		logger.debug(
			"compiled %d tokens into %d statements with %d diagnostics in %.2f ms",
			len(tokens),
			len(statements),
			len(diagnostics.items),
			duration_ms,
		)
		return CompilationArtifacts(tokens=tokens, statements=statements, diagnostics=diagnostics.items, duration_ms=duration_ms)

	def run(self, source: str) -> RunArtifacts:
		compilation = self.compile(source)
		result = RunArtifacts(compilation=compilation)
		if compilation.has_errors:
			return result
		self._output = result.output
		steps_before = self.interpreter.steps
		self.interpreter.interpret(compilation.statements, lambda issue: setattr(result, "runtime_error", issue))
		result.steps = self.interpreter.steps - steps_before
		if result.runtime_error is not None:
			logger.debug("runtime error: %s", result.runtime_error.message)
		return result

	def evaluate(self, source: str) -> EvaluationArtifacts:
		"""Evaluate `source` as one standalone expression and stringify the value."""
		diagnostics = DiagnosticEngine()
		tokens = Scanner(source, diagnostics.report_line).scan_tokens()
		diagnostics.stage = Stage.SYNTAX
		result = EvaluationArtifacts(diagnostics=diagnostics.items)
		try:
			expr: Optional[Expression] = Parser(tokens, diagnostics.report_token).parse_expression()
			if expr is None or diagnostics.has_errors:
				return result
			diagnostics.stage = Stage.RESOLUTION
			Resolver(diagnostics.report_token, self.interpreter.resolve).resolve_expression(expr)
		except RecursionError:
			_report_nesting(diagnostics, tokens)
		if diagnostics.has_errors:
			return result
		result.value = self.interpreter.interpret_expression(expr, lambda issue: setattr(result, "runtime_error", issue))
		return result


def _report_nesting(diagnostics: DiagnosticEngine, tokens: List[Token]) -> None:
	# The parser and resolver recurse once per nesting level.
	line = tokens[0].line if tokens else 1
	diagnostics.report_line(line, "Too much nesting.")
	logger.debug("nesting exceeded the recursion limit during %s", diagnostics.stage.name.lower())
