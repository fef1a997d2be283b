"""Runtime error values raised by the interpreter and caught by the host."""

from __future__ import annotations

from typing import Optional

from minilox.tokens import Token


class RuntimeIssue(Exception):
	def __init__(self, token: Optional[Token], message: str) -> None:
		super().__init__(message)
		self.token = token
		self.message = message

	@property
	def line(self) -> Optional[int]:
		return self.token.line if self.token is not None else None

	def __str__(self) -> str:
		return self.message


class StepLimitExceeded(RuntimeIssue):
	"""The host-configured statement budget ran out."""

	def __init__(self, max_steps: int) -> None:
		super().__init__(None, f"Step limit of {max_steps} exceeded (possible infinite loop).")
		self.max_steps = max_steps


class EnvironmentDesync(Exception):
	"""A resolved distance has no matching frame or binding.

	Valid programs never trigger this; it means the resolver and the interpreter no
	longer create scopes in the same pattern.
	"""
