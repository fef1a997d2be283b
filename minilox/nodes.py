"""AST definitions.

Expression nodes compare and hash by identity (`eq=False`): the resolver's distance
table is keyed by the node object itself, so two textually identical references on the
same line must stay distinct keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Union

from minilox.tokens import Token


class Expression:
	pass


class Statement:
	pass


@dataclass(frozen=True, eq=False)
class LiteralExpression(Expression):
	value: Any


@dataclass(frozen=True, eq=False)
class GroupingExpression(Expression):
	expression: Expression


@dataclass(frozen=True, eq=False)
class UnaryExpression(Expression):
	operator: Token
	operand: Expression


@dataclass(frozen=True, eq=False)
class BinaryExpression(Expression):
	left: Expression
	operator: Token
	right: Expression


@dataclass(frozen=True, eq=False)
class LogicalExpression(Expression):
	left: Expression
	operator: Token
	right: Expression


@dataclass(frozen=True, eq=False)
class VariableExpression(Expression):
	name: Token


@dataclass(frozen=True, eq=False)
class PropertyExpression(Expression):
	"""`object.name`; also an assignment target."""

	object: Expression
	name: Token


AssignmentTarget = Union[VariableExpression, PropertyExpression]


@dataclass(frozen=True, eq=False)
class AssignExpression(Expression):
	name: Token
	target: AssignmentTarget
	value: Expression


@dataclass(frozen=True, eq=False)
class CallExpression(Expression):
	callee: Expression
	paren: Token
	arguments: List[Expression]


@dataclass(frozen=True, eq=False)
class ThisExpression(Expression):
	keyword: Token


@dataclass(frozen=True, eq=False)
class SuperExpression(Expression):
	keyword: Token
	method: Token


@dataclass(frozen=True)
class ExpressionStatement(Statement):
	expression: Expression


@dataclass(frozen=True)
class PrintStatement(Statement):
	expression: Expression


@dataclass(frozen=True)
class VarStatement(Statement):
	name: Token
	initializer: Optional[Expression]


@dataclass(frozen=True)
class BlockStatement(Statement):
	statements: List[Statement]


@dataclass(frozen=True)
class IfStatement(Statement):
	condition: Expression
	then_branch: Statement
	else_branch: Optional[Statement]


@dataclass(frozen=True)
class WhileStatement(Statement):
	condition: Expression
	body: Statement


@dataclass(frozen=True)
class ForStatement(Statement):
	initializer: Optional[Statement]
	condition: Optional[Expression]
	increment: Optional[Expression]
	body: Statement


@dataclass(frozen=True)
class FunctionStatement(Statement):
	name: Token
	parameters: List[Token]
	body: Statement


@dataclass(frozen=True)
class ReturnStatement(Statement):
	keyword: Token
	value: Optional[Expression]


@dataclass(frozen=True)
class ClassStatement(Statement):
	name: Token
	superclass: Optional[VariableExpression]
	methods: List[FunctionStatement]
