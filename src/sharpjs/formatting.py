"""Standard .NET numeric format strings -> JavaScript number formatting."""

from __future__ import annotations

import re
from collections.abc import Sequence

from sharpjs.nodes import (
	Binary,
	Call,
	ExprNode,
	Identifier,
	Literal,
	Member,
	Number,
	Object,
)

_STANDARD_FORMAT = re.compile(r"^([CcDdEeFfNnPpXx])(\d{0,2})$")


def apply_format(expr: ExprNode, spec: str) -> ExprNode | None:
	"""Apply a standard numeric format string (`F2`, `N0`, `D4`, `X`, `P1`).

	Returns None for custom or date/time formats, which have no direct
	JavaScript equivalent.
	"""
	if not spec:
		return expr
	match = _STANDARD_FORMAT.match(spec)
	if not match:
		return None
	kind = match.group(1)
	digits = int(match.group(2)) if match.group(2) else None
	upper = kind.upper()

	if upper == "F":
		return Call(Member(expr, "toFixed"), [Number(str(2 if digits is None else digits))])
	if upper == "N":
		prec = Number(str(2 if digits is None else digits))
		options = Object(
			[("minimumFractionDigits", prec), ("maximumFractionDigits", prec)]
		)
		return Call(Member(expr, "toLocaleString"), [Identifier("undefined"), options])
	if upper == "C":
		prec = Number(str(2 if digits is None else digits))
		options = Object(
			[
				("style", Literal("currency")),
				("currency", Literal("USD")),
				("minimumFractionDigits", prec),
				("maximumFractionDigits", prec),
			]
		)
		return Call(Member(expr, "toLocaleString"), [Identifier("undefined"), options])
	if upper == "D":
		text = Call(Identifier("String"), [expr])
		if digits is None:
			return text
		return Call(Member(text, "padStart"), [Number(str(digits)), Literal("0")])
	if upper == "X":
		hex_text: ExprNode = Call(Member(expr, "toString"), [Number("16")])
		if kind == "X":
			hex_text = Call(Member(hex_text, "toUpperCase"), [])
		if digits:
			hex_text = Call(Member(hex_text, "padStart"), [Number(str(digits)), Literal("0")])
		return hex_text
	if upper == "E":
		prec = 6 if digits is None else digits
		exp: ExprNode = Call(Member(expr, "toExponential"), [Number(str(prec))])
		if kind == "E":
			exp = Call(Member(exp, "toUpperCase"), [])
		return exp
	if upper == "P":
		scaled = Binary(expr, "*", Number("100"))
		fixed = Call(Member(scaled, "toFixed"), [Number(str(2 if digits is None else digits))])
		return Binary(fixed, "+", Literal("%"))
	return None


def apply_alignment(expr: ExprNode, alignment: str) -> ExprNode:
	"""`{x,10}` pads on the left, `{x,-10}` on the right."""
	width = alignment.strip()
	text = Call(Identifier("String"), [expr])
	if width.startswith("-"):
		return Call(Member(text, "padEnd"), [Number(width[1:].strip())])
	return Call(Member(text, "padStart"), [Number(width)])


_PLACEHOLDER = re.compile(r"\{\{|\}\}|\{(\d+)(?:,\s*(-?\d+))?(?::([^}]*))?\}")


def composite_format(text: str, args: Sequence[ExprNode]) -> list[str | ExprNode] | None:
	"""Split a composite format string (`"{0} of {1:F2}"`) into template parts.

	Returns None when a placeholder refers to a missing argument or uses a
	format with no JavaScript equivalent.
	"""
	parts: list[str | ExprNode] = []
	pending: list[str] = []
	pos = 0
	for match in _PLACEHOLDER.finditer(text):
		pending.append(text[pos : match.start()])
		pos = match.end()
		token = match.group(0)
		if token in ("{{", "}}"):
			pending.append(token[0])
			continue
		index = int(match.group(1))
		if index >= len(args):
			return None
		value = args[index]
		if match.group(3):
			formatted = apply_format(value, match.group(3))
			if formatted is None:
				return None
			value = formatted
		if match.group(2):
			value = apply_alignment(value, match.group(2))
		parts.append("".join(pending))
		parts.append(value)
		pending = []
	pending.append(text[pos:])
	parts.append("".join(pending))
	return parts


def is_standard_format(spec: str) -> bool:
	return _STANDARD_FORMAT.match(spec) is not None
