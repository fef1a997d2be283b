"""Diagnostic collection for the scanning, parsing and resolution stages.

The core only ever *reports* through callbacks; formatting for a console or an HTTP
response is left to the host (see `format_diagnostic`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable, List

from minilox.tokens import Token, TokenKind


class Stage(Enum):
	LEXICAL = auto()
	SYNTAX = auto()
	RESOLUTION = auto()
	RUNTIME = auto()


@dataclass
class Diagnostic:
	stage: Stage
	line: int
	message: str
	where: str = ""


LineReporter = Callable[[int, str], None]
TokenReporter = Callable[[Token, str], None]


def where_of(token: Token) -> str:
	if token.kind == TokenKind.EOF:
		return " at end"
	return f" at '{token.lexeme}'"


def format_diagnostic(diagnostic: Diagnostic) -> str:
	return f"[line {diagnostic.line}] Error{diagnostic.where}: {diagnostic.message}"


class DiagnosticEngine:
	def __init__(self) -> None:
		self._items: List[Diagnostic] = []
		self.stage = Stage.LEXICAL

	@property
	def items(self) -> List[Diagnostic]:
		return self._items

	@property
	def has_errors(self) -> bool:
		return bool(self._items)

	def count(self, stage: Stage) -> int:
		return sum(1 for item in self._items if item.stage == stage)

	def report_line(self, line: int, message: str) -> None:
		self._items.append(Diagnostic(self.stage, line, message))

	def report_token(self, token: Token, message: str) -> None:
		self._items.append(Diagnostic(self.stage, token.line, message, where_of(token)))

	def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
		self._items.extend(diagnostics)

	def clear(self) -> None:
		self._items.clear()
