from __future__ import annotations

import math
from typing import Any, Callable, Dict, List, Optional

from minilox.environment import Environment
from minilox.errors import RuntimeIssue, StepLimitExceeded
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
from minilox.runtime import (
	LoxCallable,
	LoxClass,
	LoxFunction,
	LoxInstance,
	ReturnSignal,
	global_environment,
	is_equal,
	is_truthy,
	stringify,
)
from minilox.tokens import Token, TokenKind


class Interpreter:
	"""
	Tree-walking evaluator for resolved programs.

	- `printer` receives each printed value, already stringified
	- `max_steps` optionally bounds the number of executed statements
	- `locals` is the resolver's expression -> scope distance table
	"""

	def __init__(self, printer: Callable[[str], None] = print, *, max_steps: Optional[int] = None) -> None:
		self.printer = printer
		self.max_steps = max_steps
		self.steps = 0
		self.builtins = global_environment()
		# Top-level declarations live here; unresolved names are looked up from here outward.
		self.globals = Environment(self.builtins)
		self.environment = self.globals
		self.locals: Dict[Expression, int] = {}

	def resolve(self, expr: Expression, depth: int) -> None:
		self.locals[expr] = depth

	def interpret(self, statements: List[Statement], report: Callable[[RuntimeIssue], None]) -> bool:
		"""Run top-level statements, stopping at the first runtime error."""
		try:
			for stmt in statements:
				self.execute(stmt)
		except RuntimeIssue as issue:
			report(issue)
			return False
		except RecursionError:
			report(RuntimeIssue(None, "Stack overflow."))
			return False
		return True

	def interpret_expression(self, expr: Expression, report: Callable[[RuntimeIssue], None]) -> Optional[str]:
		try:
			return stringify(self.evaluate(expr))
		except RuntimeIssue as issue:
			report(issue)
		except RecursionError:
			report(RuntimeIssue(None, "Stack overflow."))
		return None

	# Statements --------------------------------------------------------------

	def execute(self, stmt: Statement) -> None:
		self._tick()

		if isinstance(stmt, ExpressionStatement):
			self.evaluate(stmt.expression)
		elif isinstance(stmt, PrintStatement):
			self.printer(stringify(self.evaluate(stmt.expression)))
		elif isinstance(stmt, VarStatement):
			value = self.evaluate(stmt.initializer) if stmt.initializer is not None else None
			self.environment.define(stmt.name.lexeme, value)
		elif isinstance(stmt, BlockStatement):
			self.execute_block(stmt.statements, Environment(self.environment))
		elif isinstance(stmt, IfStatement):
			if is_truthy(self.evaluate(stmt.condition)):
				self.execute(stmt.then_branch)
			elif stmt.else_branch is not None:
				self.execute(stmt.else_branch)
		elif isinstance(stmt, WhileStatement):
			while is_truthy(self.evaluate(stmt.condition)):
				self.execute(stmt.body)
		elif isinstance(stmt, ForStatement):
			self._execute_for(stmt)
		elif isinstance(stmt, FunctionStatement):
			self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))
		elif isinstance(stmt, ReturnStatement):
			value = self.evaluate(stmt.value) if stmt.value is not None else None
			raise ReturnSignal(value)
		elif isinstance(stmt, ClassStatement):
			self._execute_class(stmt)
		else:
			raise TypeError(f"Unsupported statement: {stmt.__class__.__name__}")

	def execute_block(self, statements: List[Statement], environment: Environment) -> None:
		previous = self.environment
		self.environment = environment
		try:
			for stmt in statements:
				self.execute(stmt)
		finally:
			self.environment = previous

	def execute_in(self, environment: Environment, stmt: Statement) -> None:
		"""Execute one statement with `environment` as the current frame (used for call bodies)."""
		previous = self.environment
		self.environment = environment
		try:
			self.execute(stmt)
		finally:
			self.environment = previous

	def _execute_for(self, stmt: ForStatement) -> None:
		previous = self.environment
		self.environment = Environment(previous)
		try:
			if stmt.initializer is not None:
				self.execute(stmt.initializer)
			while stmt.condition is None or is_truthy(self.evaluate(stmt.condition)):
				self.execute(stmt.body)
				if stmt.increment is not None:
					self.evaluate(stmt.increment)
		finally:
			self.environment = previous

	def _execute_class(self, stmt: ClassStatement) -> None:
		superclass: Optional[LoxClass] = None
		if stmt.superclass is not None:
			value = self.evaluate(stmt.superclass)
			if not isinstance(value, LoxClass):
				raise RuntimeIssue(stmt.superclass.name, "Superclass must be a class.")
			superclass = value

		# Methods close over a frame that holds `super`; the resolver always counts it.
		method_env = Environment(self.environment)
		if superclass is not None:
			method_env.define("super", superclass)
		methods = {method.name.lexeme: LoxFunction(method, method_env) for method in stmt.methods}

		self.environment.define(stmt.name.lexeme, LoxClass(stmt.name.lexeme, superclass, methods))

	def _tick(self) -> None:
		self.steps += 1
		if self.max_steps is not None and self.steps > self.max_steps:
			raise StepLimitExceeded(self.max_steps)

	# Expressions -------------------------------------------------------------

	def evaluate(self, expr: Expression) -> Any:
		if isinstance(expr, LiteralExpression):
			return expr.value
		if isinstance(expr, GroupingExpression):
			return self.evaluate(expr.expression)
		if isinstance(expr, VariableExpression):
			return self._lookup_variable(expr.name, expr)
		if isinstance(expr, AssignExpression):
			return self._evaluate_assign(expr)
		if isinstance(expr, LogicalExpression):
			left = self.evaluate(expr.left)
			if expr.operator.kind == TokenKind.OR:
				if is_truthy(left):
					return left
			elif not is_truthy(left):
				return left
			return self.evaluate(expr.right)
		if isinstance(expr, UnaryExpression):
			operand = self.evaluate(expr.operand)
			if expr.operator.kind == TokenKind.BANG:
				return not is_truthy(operand)
			if expr.operator.kind == TokenKind.MINUS:
				_check_numbers(expr.operator, operand)
				return -operand
			raise RuntimeIssue(expr.operator, f"Unsupported unary operator '{expr.operator.lexeme}'.")
		if isinstance(expr, BinaryExpression):
			return self._evaluate_binary(expr)
		if isinstance(expr, CallExpression):
			return self._evaluate_call(expr)
		if isinstance(expr, PropertyExpression):
			target = self.evaluate(expr.object)
			if not isinstance(target, LoxInstance):
				raise RuntimeIssue(expr.name, "Only instances have properties.")
			return target.get(expr.name)
		if isinstance(expr, ThisExpression):
			return self._lookup_variable(expr.keyword, expr)
		if isinstance(expr, SuperExpression):
			return self._evaluate_super(expr)
		raise TypeError(f"Unsupported expression: {expr.__class__.__name__}")

	def _lookup_variable(self, name: Token, expr: Expression) -> Any:
		distance = self.locals.get(expr)
		if distance is not None:
			return self.environment.get_at(distance, name.lexeme)
		return self.globals.get(name)

	def _evaluate_assign(self, expr: AssignExpression) -> Any:
		value = self.evaluate(expr.value)
		target = expr.target
		if isinstance(target, VariableExpression):
			distance = self.locals.get(target)
			if distance is not None:
				self.environment.assign_at(distance, expr.name.lexeme, value)
			else:
				self.globals.assign(expr.name, value)
		else:
			instance = self.evaluate(target.object)
			if not isinstance(instance, LoxInstance):
				raise RuntimeIssue(expr.name, "Only instances have fields.")
			instance.set(target.name, value)
		return value

	def _evaluate_binary(self, expr: BinaryExpression) -> Any:
		left = self.evaluate(expr.left)
		right = self.evaluate(expr.right)
		op = expr.operator
		kind = op.kind

		if kind == TokenKind.EQ:
			return is_equal(left, right)
		if kind == TokenKind.NEQ:
			return not is_equal(left, right)
		if kind == TokenKind.PLUS:
			if _is_number(left) and _is_number(right):
				return left + right
			if isinstance(left, str) and isinstance(right, str):
				return left + right
			raise RuntimeIssue(op, "Operands must be two numbers or two strings.")

		_check_numbers(op, left, right)
		if kind == TokenKind.MINUS:
			return left - right
		if kind == TokenKind.STAR:
			return left * right
		if kind == TokenKind.SLASH:
			return _divide(left, right)
		if kind == TokenKind.GT:
			return left > right
		if kind == TokenKind.GTE:
			return left >= right
		if kind == TokenKind.LT:
			return left < right
		if kind == TokenKind.LTE:
			return left <= right
		raise RuntimeIssue(op, f"Unsupported binary operator '{op.lexeme}'.")

	def _evaluate_call(self, expr: CallExpression) -> Any:
		callee = self.evaluate(expr.callee)
		args = [self.evaluate(arg) for arg in expr.arguments]
		if not isinstance(callee, LoxCallable):
			raise RuntimeIssue(expr.paren, "Can only call functions and classes.")
		if len(args) != callee.arity():
			raise RuntimeIssue(expr.paren, f"'{callee.name}' expected {callee.arity()} arguments but got {len(args)}.")
		return callee.call(self, args)

	def _evaluate_super(self, expr: SuperExpression) -> Any:
		distance = self.locals.get(expr)
		if distance is None:
			raise RuntimeIssue(expr.keyword, "Can't use 'super' in a class with no superclass.")
		superclass = self.environment.get_at(distance, "super")
		# `this` always lives in the frame just inside the one holding `super`.
		instance = self.environment.get_at(distance - 1, "this")
		method = superclass.find_method(expr.method.lexeme)
		if method is None:
			raise RuntimeIssue(expr.method, f"Undefined property '{expr.method.lexeme}'.")
		return method.bind(instance)


def _is_number(value: Any) -> bool:
	return isinstance(value, float)


def _check_numbers(operator: Token, *operands: Any) -> None:
	if all(_is_number(operand) for operand in operands):
		return
	if len(operands) == 1:
		raise RuntimeIssue(operator, "Operand must be a number.")
	raise RuntimeIssue(operator, "Operands must be numbers.")


def _divide(left: float, right: float) -> float:
	# IEEE-754 division: Python raises on zero divisors, the language does not.
	if right == 0.0:
		if left == 0.0 or math.isnan(left):
			return math.nan
		return math.copysign(math.inf, left) * math.copysign(1.0, right)
	return left / right
