"""Runtime object model: values, callables, classes and instances."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from minilox.environment import Environment
from minilox.errors import RuntimeIssue
from minilox.nodes import FunctionStatement
from minilox.tokens import Token

if TYPE_CHECKING:
	from minilox.interpreter import Interpreter


def is_truthy(value: Any) -> bool:
	if value is None:
		return False
	if isinstance(value, bool):
		return value
	return True


def is_equal(left: Any, right: Any) -> bool:
	# Python treats True == 1.0; the language does not.
	if isinstance(left, bool) != isinstance(right, bool):
		return False
	# Plain float comparison, so NaN != NaN.
	return left == right


def stringify(value: Any) -> str:
	if value is None:
		return "nil"
	if isinstance(value, bool):
		return "true" if value else "false"
	if isinstance(value, float):
		text = repr(value)
		if text.endswith(".0"):
			return text[:-2]
		return text
	return str(value)


class ReturnSignal(Exception):
	"""Carries a `return` value out to the nearest call boundary. Not an error."""

	def __init__(self, value: Any) -> None:
		super().__init__()
		self.value = value


class LoxCallable:
	name: str

	def arity(self) -> int:
		raise NotImplementedError

	def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
		raise NotImplementedError


class NativeFunction(LoxCallable):
	def __init__(self, name: str, arity: int, function: Callable[..., Any]) -> None:
		self.name = name
		self._arity = arity
		self._function = function

	def arity(self) -> int:
		return self._arity

	def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
		return self._function(*arguments)

	def __str__(self) -> str:
		return "<native fn>"


class LoxFunction(LoxCallable):
	def __init__(self, declaration: FunctionStatement, closure: Environment) -> None:
		self.declaration = declaration
		self.closure = closure
		self.name = declaration.name.lexeme

	def arity(self) -> int:
		return len(self.declaration.parameters)

	def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
		environment = Environment(self.closure)
		for param, arg in zip(self.declaration.parameters, arguments):
			environment.define(param.lexeme, arg)
		try:
			interpreter.execute_in(environment, self.declaration.body)
		except ReturnSignal as signal:
			return signal.value
		return None

	def bind(self, instance: "LoxInstance") -> "LoxFunction":
		"""A copy of this method whose closure has `this` bound to `instance`."""
		environment = Environment(self.closure)
		environment.define("this", instance)
		return LoxFunction(self.declaration, environment)

	def __str__(self) -> str:
		return f"<fn {self.name}>"


class LoxClass(LoxCallable):
	def __init__(self, name: str, superclass: Optional["LoxClass"], methods: Dict[str, LoxFunction]) -> None:
		self.name = name
		self.superclass = superclass
		self.methods = methods

	def find_method(self, name: str) -> Optional[LoxFunction]:
		klass: Optional[LoxClass] = self
		while klass is not None:
			if name in klass.methods:
				return klass.methods[name]
			klass = klass.superclass
		return None

	def arity(self) -> int:
		initializer = self.find_method("init")
		return initializer.arity() if initializer is not None else 0

	def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
		instance = LoxInstance(self)
		initializer = self.find_method("init")
		if initializer is not None:
			# Whatever init returns is discarded; construction yields the instance.
			initializer.bind(instance).call(interpreter, arguments)
		return instance

	def __str__(self) -> str:
		return self.name


class LoxInstance:
	def __init__(self, klass: LoxClass) -> None:
		self.klass = klass
		self.fields: Dict[str, Any] = {}

	def get(self, name: Token) -> Any:
		# Own fields shadow methods, even when the field is not callable.
		if name.lexeme in self.fields:
			return self.fields[name.lexeme]
		method = self.klass.find_method(name.lexeme)
		if method is not None:
			return method.bind(self)
		raise RuntimeIssue(name, f"Undefined property '{name.lexeme}'.")

	def set(self, name: Token, value: Any) -> None:
		self.fields[name.lexeme] = value

	def __str__(self) -> str:
		return f"{self.klass.name} instance"


def global_environment() -> Environment:
	"""The fixed outermost frame holding the built-ins."""
	environment = Environment()
	environment.define("clock", NativeFunction("clock", 0, time.time))
	environment.define("toString", NativeFunction("toString", 1, stringify))
	return environment
