"""Command-line host: run a script file, check it, or start an interactive prompt."""

from __future__ import annotations

import argparse
import cmd
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from termcolor import colored

from minilox.diagnostics import Diagnostic, DiagnosticEngine, format_diagnostic
from minilox.engine import LoxEngine
from minilox.errors import RuntimeIssue
from minilox.parser import Parser
from minilox.scanner import Scanner

EXIT_USAGE = 64
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70

ERROR = "red"


def print_diagnostics(diagnostics: Iterable[Diagnostic]) -> None:
	for diagnostic in diagnostics:
		print(colored(format_diagnostic(diagnostic), ERROR), file=sys.stderr)


def print_runtime_error(issue: RuntimeIssue) -> None:
	message = colored(issue.message, ERROR, attrs=["bold"])
	if issue.line is not None:
		message += f"\n[line {issue.line}]"
	print(message, file=sys.stderr)


def run_file(path: Path, check_only: bool = False) -> int:
	source = path.read_text(encoding="utf-8")
	engine = LoxEngine(printer=print)
	if check_only:
		artifacts = engine.compile(source)
		print_diagnostics(artifacts.diagnostics)
		print(f"Tokens: {len(artifacts.tokens)} | Statements: {len(artifacts.statements)} | Time: {artifacts.duration_ms:.2f} ms")
		return EXIT_STATIC_ERROR if artifacts.has_errors else 0
	result = engine.run(source)
	if result.compilation.has_errors:
		print_diagnostics(result.diagnostics)
		return EXIT_STATIC_ERROR
	if result.runtime_error is not None:
		print_runtime_error(result.runtime_error)
		return EXIT_RUNTIME_ERROR
	return 0


def is_expression(source: str) -> bool:
	"""True when `source` parses cleanly as a single standalone expression."""
	errors = DiagnosticEngine()
	tokens = Scanner(source, errors.report_line).scan_tokens()
	try:
		expr = Parser(tokens, errors.report_token).parse_expression()
	except RecursionError:
		return False
	return expr is not None and not errors.has_errors


class Shell(cmd.Cmd):
	"""Interactive prompt. Declarations persist from one line to the next."""

	intro = "minilox :: tree-walking interpreter\nType 'exit' or press Ctrl-D to leave."
	prompt = "> "

	def __init__(self, engine: Optional[LoxEngine] = None, *args, **kwargs) -> None:
		super().__init__(*args, **kwargs)
		self.engine = engine if engine is not None else LoxEngine(printer=print)

	def onecmd(self, line: str) -> bool:
		# Only `exit` and EOF are shell commands; `help`, `?` and `!` lines are source.
		command = line.strip()
		if command in ("exit", "EOF"):
			return super().onecmd(command)
		if not command:
			return self.emptyline()
		self.default(line)
		return False

	def default(self, line: str) -> None:
		if is_expression(line):
			result = self.engine.evaluate(line)
			if result.runtime_error is not None:
				print_runtime_error(result.runtime_error)
			elif result.value is not None:
				print(result.value)
			return
		run = self.engine.run(line)
		print_diagnostics(run.diagnostics)
		if run.runtime_error is not None:
			print_runtime_error(run.runtime_error)

	def emptyline(self) -> bool:
		"""Do not repeat the previous line."""
		return False

	def do_EOF(self, arg: str) -> bool:
		print()
		return True

	def do_exit(self, arg: str) -> bool:
		return True


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(prog="minilox")
	parser.add_argument("script", nargs="?", help="script to run (if omitted, starts the interactive prompt)")
	parser.add_argument("--check", action="store_true", help="only scan, parse and resolve; report diagnostics")
	parser.add_argument("--verbose", action="store_true", help="log pipeline timings")
	args = parser.parse_args(argv)

	if args.verbose:
		logging.basicConfig(level=logging.DEBUG)

	if args.script is None:
		if args.check:
			parser.error("--check needs a script")
		Shell().cmdloop()
		return 0

	path = Path(args.script)
	if not path.exists():
		print(colored(f"No such file: {path}", ERROR), file=sys.stderr)
		return EXIT_USAGE
	return run_file(path, check_only=args.check)
