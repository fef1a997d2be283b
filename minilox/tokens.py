"""Token model shared by the scanner and the parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional


class TokenKind(Enum):
	# Single-character punctuation
	LPAREN = auto()
	RPAREN = auto()
	LBRACE = auto()
	RBRACE = auto()
	COMMA = auto()
	DOT = auto()
	MINUS = auto()
	PLUS = auto()
	SEMI = auto()
	SLASH = auto()
	STAR = auto()
	# One or two character operators
	BANG = auto()
	NEQ = auto()
	ASSIGN = auto()
	EQ = auto()
	GT = auto()
	GTE = auto()
	LT = auto()
	LTE = auto()
	# Literals
	IDENT = auto()
	STRING = auto()
	NUMBER = auto()
	# Keywords
	AND = auto()
	CLASS = auto()
	ELSE = auto()
	FALSE = auto()
	FUN = auto()
	FOR = auto()
	IF = auto()
	NIL = auto()
	OR = auto()
	PRINT = auto()
	RETURN = auto()
	SUPER = auto()
	THIS = auto()
	TRUE = auto()
	VAR = auto()
	WHILE = auto()
	EOF = auto()


KEYWORDS: Dict[str, TokenKind] = {
	"and": TokenKind.AND,
	"class": TokenKind.CLASS,
	"else": TokenKind.ELSE,
	"false": TokenKind.FALSE,
	"for": TokenKind.FOR,
	"fun": TokenKind.FUN,
	"if": TokenKind.IF,
	"nil": TokenKind.NIL,
	"or": TokenKind.OR,
	"print": TokenKind.PRINT,
	"return": TokenKind.RETURN,
	"super": TokenKind.SUPER,
	"this": TokenKind.THIS,
	"true": TokenKind.TRUE,
	"var": TokenKind.VAR,
	"while": TokenKind.WHILE,
}


SYMBOLS: Dict[str, TokenKind] = {
	"(": TokenKind.LPAREN,
	")": TokenKind.RPAREN,
	"{": TokenKind.LBRACE,
	"}": TokenKind.RBRACE,
	",": TokenKind.COMMA,
	".": TokenKind.DOT,
	"-": TokenKind.MINUS,
	"+": TokenKind.PLUS,
	";": TokenKind.SEMI,
	"*": TokenKind.STAR,
	"/": TokenKind.SLASH,
	"!": TokenKind.BANG,
	"!=": TokenKind.NEQ,
	"=": TokenKind.ASSIGN,
	"==": TokenKind.EQ,
	">": TokenKind.GT,
	">=": TokenKind.GTE,
	"<": TokenKind.LT,
	"<=": TokenKind.LTE,
}


# Tokens that begin a declaration or statement; the parser resynchronises on them.
STATEMENT_STARTS = frozenset({
	TokenKind.CLASS,
	TokenKind.FUN,
	TokenKind.VAR,
	TokenKind.FOR,
	TokenKind.IF,
	TokenKind.WHILE,
	TokenKind.PRINT,
	TokenKind.RETURN,
})


@dataclass(frozen=True)
class Token:
	kind: TokenKind
	lexeme: str
	value: Optional[Any]
	line: int

	def renamed(self, lexeme: str) -> "Token":
		"""Same position and kind under another name (used for the implicit `this`/`super` bindings)."""
		return Token(self.kind, lexeme, self.value, self.line)

	def __str__(self) -> str:
		return f"{self.kind.name} {self.lexeme} {self.value}"
