from __future__ import annotations

from typing import List, Optional

from minilox.diagnostics import DiagnosticEngine, TokenReporter
from minilox.nodes import (
	AssignExpression,
	BinaryExpression,
	BlockStatement,
	CallExpression,
	ClassStatement,
	Expression,
	ExpressionStatement,
	ForStatement,
	FunctionStatement,
	GroupingExpression,
	IfStatement,
	LiteralExpression,
	LogicalExpression,
	PrintStatement,
	PropertyExpression,
	ReturnStatement,
	Statement,
	SuperExpression,
	ThisExpression,
	UnaryExpression,
	VarStatement,
	VariableExpression,
	WhileStatement,
)
from minilox.tokens import STATEMENT_STARTS, Token, TokenKind

MAX_ARGUMENTS = 255


class ParseError(Exception):
	"""Unwinds to the enclosing declaration, which then resynchronises."""


class Parser:
	def __init__(self, tokens: List[Token], report: Optional[TokenReporter] = None) -> None:
		self.tokens = tokens
		self.report = report if report is not None else DiagnosticEngine().report_token
		self.index = 0
		self._function_depth = 0

	def parse(self) -> List[Statement]:
		statements: List[Statement] = []
		while not self._is_at_end():
			stmt = self._declaration()
			# A failed declaration is dropped rather than replaced with a placeholder.
			if stmt is not None:
				statements.append(stmt)
		return statements

	def parse_expression(self) -> Optional[Expression]:
		"""Parse the whole token stream as one standalone expression."""
		try:
			expr = self._expression()
		except ParseError:
			return None
		if not self._is_at_end():
			self._error(self._peek(), "Expect end of expression.")
			return None
		return expr

	# Declarations and statements ---------------------------------------------

	def _declaration(self) -> Optional[Statement]:
		try:
			if self._match(TokenKind.VAR):
				return self._var_declaration()
			if self._match(TokenKind.CLASS):
				return self._class_declaration()
			if self._match(TokenKind.FUN):
				return self._function("function")
			return self._statement()
		except ParseError:
			self._synchronize()
			return None

	def _var_declaration(self) -> Statement:
		name = self._expect(TokenKind.IDENT, "Expect variable name.")
		initializer = self._expression() if self._match(TokenKind.ASSIGN) else None
		self._expect(TokenKind.SEMI, "Expect ';' after variable declaration.")
		return VarStatement(name=name, initializer=initializer)

	def _class_declaration(self) -> Statement:
		name = self._expect(TokenKind.IDENT, "Expect class name.")
		superclass = None
		if self._match(TokenKind.LT):
			superclass = VariableExpression(self._expect(TokenKind.IDENT, "Expect superclass name."))
		self._expect(TokenKind.LBRACE, "Expect '{' before class body.")
		methods: List[FunctionStatement] = []
		while not self._check(TokenKind.RBRACE) and not self._is_at_end():
			methods.append(self._function("method"))
		self._expect(TokenKind.RBRACE, "Expect '}' after class body.")
		return ClassStatement(name=name, superclass=superclass, methods=methods)

	def _function(self, kind: str) -> FunctionStatement:
		name = self._expect(TokenKind.IDENT, f"Expect {kind} name.")
		self._expect(TokenKind.LPAREN, f"Expect '(' after {kind} name.")
		parameters: List[Token] = []
		if not self._check(TokenKind.RPAREN):
			while True:
				if len(parameters) >= MAX_ARGUMENTS:
					self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
				parameters.append(self._expect(TokenKind.IDENT, "Expect parameter name."))
				if not self._match(TokenKind.COMMA):
					break
		self._expect(TokenKind.RPAREN, "Expect ')' after parameters.")
		self._function_depth += 1
		try:
			body = self._statement()
		finally:
			self._function_depth -= 1
		return FunctionStatement(name=name, parameters=parameters, body=body)

	def _statement(self) -> Statement:
		if self._match(TokenKind.FOR):
			return self._for_statement()
		if self._match(TokenKind.WHILE):
			self._expect(TokenKind.LPAREN, "Expect '(' after 'while'.")
			condition = self._expression()
			self._expect(TokenKind.RPAREN, "Expect ')' after condition.")
			return WhileStatement(condition=condition, body=self._statement())
		if self._match(TokenKind.IF):
			self._expect(TokenKind.LPAREN, "Expect '(' after 'if'.")
			condition = self._expression()
			self._expect(TokenKind.RPAREN, "Expect ')' after if condition.")
			then_branch = self._statement()
			else_branch = self._statement() if self._match(TokenKind.ELSE) else None
			return IfStatement(condition=condition, then_branch=then_branch, else_branch=else_branch)
		if self._match(TokenKind.PRINT):
			value = self._expression()
			self._expect(TokenKind.SEMI, "Expect ';' after value.")
			return PrintStatement(expression=value)
		if self._match(TokenKind.RETURN):
			return self._return_statement()
		if self._match(TokenKind.LBRACE):
			return BlockStatement(statements=self._block())
		return self._expression_statement()

	def _for_statement(self) -> Statement:
		self._expect(TokenKind.LPAREN, "Expect '(' after 'for'.")
		if self._match(TokenKind.SEMI):
			initializer = None
		elif self._match(TokenKind.VAR):
			initializer = self._var_declaration()
		else:
			initializer = self._expression_statement()
		condition = None
		if not self._check(TokenKind.SEMI):
			condition = self._expression()
		self._expect(TokenKind.SEMI, "Expect ';' after loop condition.")
		increment = None
		if not self._check(TokenKind.RPAREN):
			increment = self._expression()
		self._expect(TokenKind.RPAREN, "Expect ')' after for clauses.")
		body = self._statement()
		return ForStatement(initializer=initializer, condition=condition, increment=increment, body=body)

	def _return_statement(self) -> Statement:
		keyword = self._previous()
		if self._function_depth < 1:
			self._error(keyword, "Can't return from top-level code.")
		value = None
		if not self._check(TokenKind.SEMI):
			value = self._expression()
		self._expect(TokenKind.SEMI, "Expect ';' after return value.")
		return ReturnStatement(keyword=keyword, value=value)

	def _block(self) -> List[Statement]:
		statements: List[Statement] = []
		while not self._check(TokenKind.RBRACE) and not self._is_at_end():
			stmt = self._declaration()
			if stmt is not None:
				statements.append(stmt)
		self._expect(TokenKind.RBRACE, "Expect '}' after block.")
		return statements

	def _expression_statement(self) -> Statement:
		expr = self._expression()
		self._expect(TokenKind.SEMI, "Expect ';' after expression.")
		return ExpressionStatement(expression=expr)

	# Expressions, lowest precedence first ------------------------------------

	def _expression(self) -> Expression:
		return self._assignment()

	def _assignment(self) -> Expression:
		expr = self._or()
		if self._match(TokenKind.ASSIGN):
			equals = self._previous()
			value = self._assignment()
			if isinstance(expr, VariableExpression):
				return AssignExpression(name=expr.name, target=expr, value=value)
			if isinstance(expr, PropertyExpression):
				return AssignExpression(name=expr.name, target=expr, value=value)
			# Reported, but not thrown: the parser is not confused, the target is just invalid.
			self._error(equals, "Invalid assignment target.")
		return expr

	def _or(self) -> Expression:
		expr = self._and()
		while self._match(TokenKind.OR):
			operator = self._previous()
			expr = LogicalExpression(left=expr, operator=operator, right=self._and())
		return expr

	def _and(self) -> Expression:
		expr = self._equality()
		while self._match(TokenKind.AND):
			operator = self._previous()
			expr = LogicalExpression(left=expr, operator=operator, right=self._equality())
		return expr

	def _equality(self) -> Expression:
		expr = self._comparison()
		while self._match(TokenKind.EQ, TokenKind.NEQ):
			operator = self._previous()
			expr = BinaryExpression(left=expr, operator=operator, right=self._comparison())
		return expr

	def _comparison(self) -> Expression:
		expr = self._additive()
		while self._match(TokenKind.GT, TokenKind.GTE, TokenKind.LT, TokenKind.LTE):
			operator = self._previous()
			expr = BinaryExpression(left=expr, operator=operator, right=self._additive())
		return expr

	def _additive(self) -> Expression:
		expr = self._term()
		while self._match(TokenKind.PLUS, TokenKind.MINUS):
			operator = self._previous()
			expr = BinaryExpression(left=expr, operator=operator, right=self._term())
		return expr

	def _term(self) -> Expression:
		expr = self._unary()
		while self._match(TokenKind.STAR, TokenKind.SLASH):
			operator = self._previous()
			expr = BinaryExpression(left=expr, operator=operator, right=self._unary())
		return expr

	def _unary(self) -> Expression:
		if self._match(TokenKind.BANG, TokenKind.MINUS):
			operator = self._previous()
			return UnaryExpression(operator=operator, operand=self._unary())
		return self._call()

	def _call(self) -> Expression:
		expr = self._primary()
		while True:
			if self._match(TokenKind.LPAREN):
				expr = self._finish_call(expr)
			elif self._match(TokenKind.DOT):
				name = self._expect(TokenKind.IDENT, "Expect property name after '.'.")
				expr = PropertyExpression(object=expr, name=name)
			else:
				break
		return expr

	def _finish_call(self, callee: Expression) -> Expression:
		args: List[Expression] = []
		if not self._check(TokenKind.RPAREN):
			while True:
				if len(args) >= MAX_ARGUMENTS:
					self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
				args.append(self._expression())
				if not self._match(TokenKind.COMMA):
					break
		paren = self._expect(TokenKind.RPAREN, "Expect ')' after arguments.")
		return CallExpression(callee=callee, paren=paren, arguments=args)

	def _primary(self) -> Expression:
		if self._match(TokenKind.FALSE):
			return LiteralExpression(False)
		if self._match(TokenKind.TRUE):
			return LiteralExpression(True)
		if self._match(TokenKind.NIL):
			return LiteralExpression(None)
		if self._match(TokenKind.NUMBER, TokenKind.STRING):
			return LiteralExpression(self._previous().value)
		if self._match(TokenKind.THIS):
			return ThisExpression(self._previous())
		if self._match(TokenKind.SUPER):
			keyword = self._previous()
			self._expect(TokenKind.DOT, "Expect '.' after 'super'.")
			method = self._expect(TokenKind.IDENT, "Expect superclass method name.")
			return SuperExpression(keyword=keyword, method=method)
		if self._match(TokenKind.IDENT):
			return VariableExpression(self._previous())
		if self._match(TokenKind.LPAREN):
			expr = self._expression()
			self._expect(TokenKind.RPAREN, "Expect ')' after expression.")
			return GroupingExpression(expr)
		raise self._error(self._peek(), "Expect expression.")

	# Utility parsing helpers -------------------------------------------------

	def _match(self, *kinds: TokenKind) -> bool:
		for kind in kinds:
			if self._check(kind):
				self._advance_token()
				return True
		return False

	def _check(self, kind: TokenKind) -> bool:
		if self._is_at_end():
			return False
		return self._peek().kind == kind

	def _advance_token(self) -> Token:
		if not self._is_at_end():
			self.index += 1
		return self._previous()

	def _expect(self, kind: TokenKind, message: str) -> Token:
		if self._check(kind):
			return self._advance_token()
		raise self._error(self._peek(), message)

	def _peek(self) -> Token:
		return self.tokens[self.index]

	def _previous(self) -> Token:
		return self.tokens[self.index - 1]

	def _is_at_end(self) -> bool:
		return self._peek().kind == TokenKind.EOF

	def _error(self, token: Token, message: str) -> ParseError:
		self.report(token, message)
		return ParseError(message)

	def _synchronize(self) -> None:
		self._advance_token()
		while not self._is_at_end():
			if self._previous().kind == TokenKind.SEMI:
				return
			if self._peek().kind in STATEMENT_STARTS:
				return
			self._advance_token()
