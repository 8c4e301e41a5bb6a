from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

DiagnosticCode = Literal[
	"unsupported.expression",
	"unsupported.statement",
	"unsupported.pattern",
	"unsupported.member",
	"unsupported.format",
]


class SharpJsError(Exception):
	"""Base class for all sharpjs errors."""


class ParseError(SharpJsError):
	"""Malformed C# source. The only hard failure of a compile."""

	msg: str
	line: int
	column: int

	def __init__(self, msg: str, line: int, column: int):
		self.msg = msg
		self.line = line
		self.column = column
		super().__init__(f"{msg} at line {line}, column {column}")


class ConversionError(SharpJsError):
	"""Contract violation while converting (missing required input)."""


class RegistryError(SharpJsError):
	"""A strategy registry was modified after it started serving lookups."""


@dataclass(slots=True, frozen=True)
class Diagnostic:
	"""Non-fatal conversion anomaly, reported alongside best-effort output."""

	code: DiagnosticCode
	message: str
	line: int = 0
	column: int = 0
	text: str = ""

	def format(self, path: str | None = None) -> str:
		where = f"{path}:{self.line}:{self.column}" if path else f"{self.line}:{self.column}"
		return f"{where}: {self.code}: {self.message}"
