from __future__ import annotations

from typing import Any, Dict, Optional

from minilox.errors import EnvironmentDesync, RuntimeIssue
from minilox.tokens import Token


class Environment:
	"""One scope frame, linked to the frame that encloses it."""

	def __init__(self, enclosing: Optional["Environment"] = None) -> None:
		self.enclosing = enclosing
		self.values: Dict[str, Any] = {}

	def define(self, name: str, value: Any) -> None:
		self.values[name] = value

	def get(self, name: Token) -> Any:
		env: Optional[Environment] = self
		while env is not None:
			if name.lexeme in env.values:
				return env.values[name.lexeme]
			env = env.enclosing
		raise _undefined(name)

	def assign(self, name: Token, value: Any) -> None:
		env: Optional[Environment] = self
		while env is not None:
			if name.lexeme in env.values:
				env.values[name.lexeme] = value
				return
			env = env.enclosing
		raise _undefined(name)

	def ancestor(self, distance: int) -> "Environment":
		env = self
		for _ in range(distance):
			if env.enclosing is None:
				raise EnvironmentDesync(f"No scope frame at distance {distance}.")
			env = env.enclosing
		return env

	def get_at(self, distance: int, name: str) -> Any:
		frame = self.ancestor(distance)
		if name not in frame.values:
			raise EnvironmentDesync(f"'{name}' is not bound at distance {distance}.")
		return frame.values[name]

	def assign_at(self, distance: int, name: str, value: Any) -> None:
		frame = self.ancestor(distance)
		if name not in frame.values:
			raise EnvironmentDesync(f"'{name}' is not bound at distance {distance}.")
		frame.values[name] = value

	def __repr__(self) -> str:
		outer = " -> ..." if self.enclosing is not None else ""
		return f"Environment({sorted(self.values)}){outer}"


def _undefined(name: Token) -> RuntimeIssue:
	return RuntimeIssue(name, f"Undefined variable '{name.lexeme}'.")
