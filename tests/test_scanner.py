import unittest

from minilox.diagnostics import DiagnosticEngine
from minilox.scanner import Scanner
from minilox.tokens import TokenKind


def scan(source):
	errors = DiagnosticEngine()
	tokens = Scanner(source, errors.report_line).scan_tokens()
	return tokens, errors


class ScannerTestCase(unittest.TestCase):

	def test_kinds_and_trailing_eof(self):
		tokens, errors = scan("var answer = 42;")
		self.assertFalse(errors.has_errors)
		self.assertEqual(
			[t.kind for t in tokens],
			[TokenKind.VAR, TokenKind.IDENT, TokenKind.ASSIGN, TokenKind.NUMBER, TokenKind.SEMI, TokenKind.EOF],
		)
		self.assertEqual(tokens[-1].lexeme, "")

	def test_two_character_operators(self):
		tokens, _ = scan("! != = == > >= < <=")
		self.assertEqual(
			[t.kind for t in tokens[:-1]],
			[TokenKind.BANG, TokenKind.NEQ, TokenKind.ASSIGN, TokenKind.EQ, TokenKind.GT, TokenKind.GTE, TokenKind.LT, TokenKind.LTE],
		)

	def test_number_literals(self):
		tokens, _ = scan("12 3.25 7.")
		self.assertEqual(tokens[0].value, 12.0)
		self.assertEqual(tokens[1].value, 3.25)
		# The dot is not part of the number when no digit follows it.
		self.assertEqual(tokens[2].lexeme, "7")
		self.assertEqual(tokens[3].kind, TokenKind.DOT)

	def test_string_literal_drops_quotes(self):
		tokens, _ = scan('"hello"')
		self.assertEqual(tokens[0].kind, TokenKind.STRING)
		self.assertEqual(tokens[0].lexeme, '"hello"')
		self.assertEqual(tokens[0].value, "hello")

	def test_multiline_string_counts_lines(self):
		tokens, errors = scan('"one\ntwo"\nx')
		self.assertFalse(errors.has_errors)
		self.assertEqual(tokens[0].value, "one\ntwo")
		self.assertEqual(tokens[1].line, 3)

	def test_unterminated_string(self):
		_, errors = scan('print "open')
		self.assertEqual([(d.line, d.message) for d in errors.items], [(1, "Unterminated string.")])

	def test_unexpected_character_keeps_scanning(self):
		tokens, errors = scan("a @ b\n#")
		self.assertEqual(
			[(d.line, d.message) for d in errors.items],
			[(1, "Unexpected character."), (2, "Unexpected character.")],
		)
		self.assertEqual([t.lexeme for t in tokens[:-1]], ["a", "b"])

	def test_comments_are_skipped(self):
		tokens, _ = scan("// nothing here\n1 / 2 // trailing")
		self.assertEqual([t.kind for t in tokens[:-1]], [TokenKind.NUMBER, TokenKind.SLASH, TokenKind.NUMBER])
		self.assertEqual(tokens[0].line, 2)

	def test_keywords_and_identifiers(self):
		tokens, _ = scan("class classy _under this2 nil")
		self.assertEqual(
			[t.kind for t in tokens[:-1]],
			[TokenKind.CLASS, TokenKind.IDENT, TokenKind.IDENT, TokenKind.IDENT, TokenKind.NIL],
		)

	def test_literal_keywords_carry_no_value(self):
		tokens, _ = scan("true false")
		self.assertEqual([t.value for t in tokens[:-1]], [None, None])


if __name__ == '__main__':
	unittest.main()
