"""Static scope resolution.

Walks the tree once before execution and records, for every variable, `this` and
`super` reference, how many scope frames separate it from its declaration. The scopes
pushed here must line up one-for-one with the environments the interpreter creates.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Callable, Dict, List, Optional

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
from minilox.tokens import Token

DistanceSink = Callable[[Expression, int], None]


class ClassKind(Enum):
	NONE = auto()
	CLASS = auto()
	SUBCLASS = auto()


class Resolver:
	def __init__(self, report: Optional[TokenReporter], resolve_local: DistanceSink) -> None:
		self.report = report if report is not None else DiagnosticEngine().report_token
		self.resolve_local = resolve_local
		# Each frame maps name -> defined? (False while its initializer is being resolved)
		self.scopes: List[Dict[str, bool]] = []
		self.current_class = ClassKind.NONE

	def resolve(self, statements: List[Statement]) -> None:
		for stmt in statements:
			self._resolve_statement(stmt)

	def resolve_expression(self, expr: Expression) -> None:
		self._resolve_expression(expr)

	# Statements --------------------------------------------------------------

	def _resolve_statement(self, stmt: Optional[Statement]) -> None:
		if stmt is None:
			return
		if isinstance(stmt, BlockStatement):
			self._begin_scope()
			try:
				self.resolve(stmt.statements)
			finally:
				self._end_scope()
		elif isinstance(stmt, VarStatement):
			self._declare(stmt.name)
			if stmt.initializer is not None:
				self._resolve_expression(stmt.initializer)
			self._define(stmt.name)
		elif isinstance(stmt, FunctionStatement):
			# Defined before the body is resolved, so the function can recurse.
			self._declare(stmt.name)
			self._define(stmt.name)
			self._resolve_function(stmt)
		elif isinstance(stmt, ClassStatement):
			self._resolve_class(stmt)
		elif isinstance(stmt, ExpressionStatement):
			self._resolve_expression(stmt.expression)
		elif isinstance(stmt, PrintStatement):
			self._resolve_expression(stmt.expression)
		elif isinstance(stmt, IfStatement):
			self._resolve_expression(stmt.condition)
			self._resolve_statement(stmt.then_branch)
			self._resolve_statement(stmt.else_branch)
		elif isinstance(stmt, WhileStatement):
			self._resolve_expression(stmt.condition)
			self._resolve_statement(stmt.body)
		elif isinstance(stmt, ForStatement):
			self._begin_scope()
			try:
				self._resolve_statement(stmt.initializer)
				if stmt.condition is not None:
					self._resolve_expression(stmt.condition)
				self._resolve_statement(stmt.body)
				if stmt.increment is not None:
					self._resolve_expression(stmt.increment)
			finally:
				self._end_scope()
		elif isinstance(stmt, ReturnStatement):
			if stmt.value is not None:
				self._resolve_expression(stmt.value)
		else:
			raise TypeError(f"Unsupported statement: {stmt.__class__.__name__}")

	def _resolve_function(self, function: FunctionStatement) -> None:
		self._begin_scope()
		try:
			for param in function.parameters:
				self._declare(param)
				self._define(param)
			self._resolve_statement(function.body)
		finally:
			self._end_scope()

	def _resolve_class(self, stmt: ClassStatement) -> None:
		enclosing_class = self.current_class
		self.current_class = ClassKind.SUBCLASS if stmt.superclass is not None else ClassKind.CLASS
		try:
			self._resolve_class_body(stmt)
		finally:
			self.current_class = enclosing_class

	def _resolve_class_body(self, stmt: ClassStatement) -> None:
		self._declare(stmt.name)
		self._define(stmt.name)
		if stmt.superclass is not None:
			if stmt.superclass.name.lexeme == stmt.name.lexeme:
				self.report(stmt.superclass.name, "A class can't inherit from itself.")
			self._resolve_expression(stmt.superclass)
		# Two frames, always: one that may hold `super`, one that holds `this`.
		self._begin_scope()
		try:
			if stmt.superclass is not None:
				self._bind_implicit(stmt.superclass.name.renamed("super"))
			self._begin_scope()
			try:
				self._bind_implicit(stmt.name.renamed("this"))
				for method in stmt.methods:
					self._resolve_function(method)
			finally:
				self._end_scope()
		finally:
			self._end_scope()

	# Expressions -------------------------------------------------------------

	def _resolve_expression(self, expr: Expression) -> None:
		if isinstance(expr, VariableExpression):
			if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
				self.report(expr.name, "Can't read local variable in its own initializer.")
			self._resolve_local(expr, expr.name)
		elif isinstance(expr, AssignExpression):
			self._resolve_expression(expr.value)
			if isinstance(expr.target, VariableExpression):
				self._resolve_local(expr.target, expr.target.name)
			else:
				self._resolve_expression(expr.target.object)
		elif isinstance(expr, BinaryExpression):
			self._resolve_expression(expr.left)
			self._resolve_expression(expr.right)
		elif isinstance(expr, LogicalExpression):
			self._resolve_expression(expr.left)
			self._resolve_expression(expr.right)
		elif isinstance(expr, UnaryExpression):
			self._resolve_expression(expr.operand)
		elif isinstance(expr, GroupingExpression):
			self._resolve_expression(expr.expression)
		elif isinstance(expr, CallExpression):
			self._resolve_expression(expr.callee)
			for arg in expr.arguments:
				self._resolve_expression(arg)
		elif isinstance(expr, PropertyExpression):
			# Property names are looked up dynamically on the instance.
			self._resolve_expression(expr.object)
		elif isinstance(expr, ThisExpression):
			self._resolve_local(expr, expr.keyword)
		elif isinstance(expr, SuperExpression):
			# Left unresolved in a class without a superclass, even one nested in a subclass.
			if self.current_class == ClassKind.SUBCLASS:
				self._resolve_local(expr, expr.keyword)
		elif isinstance(expr, LiteralExpression):
			return
		else:
			raise TypeError(f"Unsupported expression: {expr.__class__.__name__}")

	def _resolve_local(self, expr: Expression, name: Token) -> None:
		for depth, scope in enumerate(reversed(self.scopes)):
			if name.lexeme in scope:
				self.resolve_local(expr, depth)
				return
		# Not found in any frame: left to the global lookup at run time.

	# Scope bookkeeping -------------------------------------------------------

	def _begin_scope(self) -> None:
		self.scopes.append({})

	def _end_scope(self) -> None:
		self.scopes.pop()

	def _declare(self, name: Token) -> None:
		if not self.scopes:
			return
		scope = self.scopes[-1]
		if name.lexeme in scope:
			self.report(name, "Already a variable with this name in this scope.")
		scope[name.lexeme] = False

	def _define(self, name: Token) -> None:
		if not self.scopes:
			return
		self.scopes[-1][name.lexeme] = True

	def _bind_implicit(self, name: Token) -> None:
		self.scopes[-1][name.lexeme] = True
