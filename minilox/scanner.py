from __future__ import annotations

from typing import List, Optional

from minilox.diagnostics import DiagnosticEngine, LineReporter
from minilox.tokens import KEYWORDS, SYMBOLS, Token, TokenKind


class Scanner:
	"""Turns source text into tokens, reporting lexical errors without stopping."""

	def __init__(self, source: str, report: Optional[LineReporter] = None) -> None:
		self.source = source
		self.report = report if report is not None else DiagnosticEngine().report_line
		self.length = len(source)
		self.tokens: List[Token] = []
		self.start = 0
		self.index = 0
		self.line = 1

	def scan_tokens(self) -> List[Token]:
		while not self._is_eof():
			self.start = self.index
			self._scan_token()
		self.tokens.append(Token(TokenKind.EOF, "", None, self.line))
		return self.tokens

	def _scan_token(self) -> None:
		ch = self._advance()
		if ch in " \t\r":
			return
		if ch == "\n":
			self.line += 1
		elif ch == "/" and self._match("/"):
			self._consume_comment()
		elif ch == '"':
			self._consume_string()
		elif _is_digit(ch):
			self._consume_number()
		elif _is_alpha(ch):
			self._consume_identifier()
		else:
			self._consume_symbol(ch)

	def _consume_comment(self) -> None:
		while not self._is_eof() and self._peek() != "\n":
			self._advance()

	def _consume_string(self) -> None:
		while not self._is_eof() and self._peek() != '"':
			if self._peek() == "\n":
				self.line += 1
			self._advance()
		if self._is_eof():
			self.report(self.line, "Unterminated string.")
			return
		self._advance()  # closing quote
		self._add_token(TokenKind.STRING, self.source[self.start + 1 : self.index - 1])

	def _consume_number(self) -> None:
		self._consume_while(_is_digit)
		# A trailing '.' without digits after it is not part of the number.
		if self._peek() == "." and _is_digit(self._peek_next()):
			self._advance()
			self._consume_while(_is_digit)
		self._add_token(TokenKind.NUMBER, float(self.source[self.start : self.index]))

	def _consume_identifier(self) -> None:
		self._consume_while(_is_alnum)
		lexeme = self.source[self.start : self.index]
		self._add_token(KEYWORDS.get(lexeme, TokenKind.IDENT))

	def _consume_symbol(self, ch: str) -> None:
		candidate = ch + self._peek()
		if len(candidate) == 2 and candidate in SYMBOLS:
			self._advance()
			self._add_token(SYMBOLS[candidate])
		elif ch in SYMBOLS:
			self._add_token(SYMBOLS[ch])
		else:
			self.report(self.line, "Unexpected character.")

	def _consume_while(self, predicate) -> None:
		while not self._is_eof() and predicate(self._peek()):
			self._advance()

	def _add_token(self, kind: TokenKind, value: Optional[object] = None) -> None:
		self.tokens.append(Token(kind, self.source[self.start : self.index], value, self.line))

	def _advance(self) -> str:
		ch = self.source[self.index]
		self.index += 1
		return ch

	def _match(self, expected: str) -> bool:
		if self._is_eof() or self.source[self.index] != expected:
			return False
		self.index += 1
		return True

	def _peek(self) -> str:
		if self._is_eof():
			return ""
		return self.source[self.index]

	def _peek_next(self) -> str:
		if self.index + 1 >= self.length:
			return ""
		return self.source[self.index + 1]

	def _is_eof(self) -> bool:
		return self.index >= self.length


def _is_alpha(ch: str) -> bool:
	return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_digit(ch: str) -> bool:
	return ch != "" and "0" <= ch <= "9"


def _is_alnum(ch: str) -> bool:
	return _is_alpha(ch) or _is_digit(ch)
