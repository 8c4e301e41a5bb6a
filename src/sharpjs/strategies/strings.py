"""`string` members and statics -> JavaScript string methods."""

from __future__ import annotations

from typing import ClassVar, cast, override

from sharpjs.context import ConversionContext
from sharpjs.formatting import composite_format
from sharpjs.nodes import (
	Array,
	Binary,
	ExprNode,
	Literal,
	Template,
	Unary,
)
from sharpjs.registry import ExpressionStrategy
from sharpjs.semantic import STRING, is_string_type
from sharpjs.strategies.helpers import (
	CallParts,
	accepts_arity,
	call_parts,
	method,
	public_methods,
	snake_name,
	static_type,
)
from sharpjs.syntax import Expression, Invocation, Literal as LiteralNode, MemberAccess


class StringMethods:
	"""Instance methods of `string`. Arguments arrive as syntax."""

	def __init__(self, this: ExprNode, ctx: ConversionContext) -> None:
		self.this = this
		self._ctx = ctx

	def _expr(self, node: Expression) -> ExprNode:
		return self._ctx.expr(node)

	def to_upper(self) -> ExprNode:
		return method(self.this, "toUpperCase")

	def to_upper_invariant(self) -> ExprNode:
		return method(self.this, "toUpperCase")

	def to_lower(self) -> ExprNode:
		return method(self.this, "toLowerCase")

	def to_lower_invariant(self) -> ExprNode:
		return method(self.this, "toLowerCase")

	def trim(self) -> ExprNode:
		return method(self.this, "trim")

	def trim_start(self) -> ExprNode:
		return method(self.this, "trimStart")

	def trim_end(self) -> ExprNode:
		return method(self.this, "trimEnd")

	def contains(self, value: Expression, comparison: Expression | None = None) -> ExprNode:
		return method(self.this, "includes", [self._expr(value)])

	def starts_with(self, value: Expression, comparison: Expression | None = None) -> ExprNode:
		return method(self.this, "startsWith", [self._expr(value)])

	def ends_with(self, value: Expression, comparison: Expression | None = None) -> ExprNode:
		return method(self.this, "endsWith", [self._expr(value)])

	def index_of(self, value: Expression, start: Expression | None = None) -> ExprNode:
		args = [self._expr(value)]
		if start is not None:
			args.append(self._expr(start))
		return method(self.this, "indexOf", args)

	def last_index_of(self, value: Expression) -> ExprNode:
		return method(self.this, "lastIndexOf", [self._expr(value)])

	def replace(self, old: Expression, new: Expression) -> ExprNode:
		"""s.Replace(a, b) -> s.replaceAll(a, b)"""
		return method(self.this, "replaceAll", [self._expr(old), self._expr(new)])

	def split(self, separator: Expression, options: Expression | None = None) -> ExprNode:
		return method(self.this, "split", [self._expr(separator)])

	def substring(self, start: Expression, length: Expression | None = None) -> ExprNode:
		"""s.Substring(i, n) -> s.substring(i, i + n)"""
		begin = self._expr(start)
		if length is None:
			return method(self.this, "substring", [begin])
		return method(self.this, "substring", [begin, Binary(self._expr(start), "+", self._expr(length))])

	def pad_left(self, width: Expression, fill: Expression | None = None) -> ExprNode:
		args = [self._expr(width)]
		if fill is not None:
			args.append(self._expr(fill))
		return method(self.this, "padStart", args)

	def pad_right(self, width: Expression, fill: Expression | None = None) -> ExprNode:
		args = [self._expr(width)]
		if fill is not None:
			args.append(self._expr(fill))
		return method(self.this, "padEnd", args)

	def equals(self, other: Expression) -> ExprNode:
		return Binary(self.this, "===", self._expr(other))


STRING_METHODS = public_methods(StringMethods)
# Names that read as string operations even on an unresolved receiver
STRING_ONLY = frozenset(
	{
		"ToUpper",
		"ToLower",
		"ToUpperInvariant",
		"ToLowerInvariant",
		"Trim",
		"TrimStart",
		"TrimEnd",
		"StartsWith",
		"EndsWith",
		"Substring",
		"PadLeft",
		"PadRight",
		"Replace",
		"Split",
		"LastIndexOf",
	}
)


def _string_method(node: Invocation, ctx: ConversionContext) -> str | None:
	parts = call_parts(node)
	if parts is None or parts.receiver is None:
		return None
	name = snake_name(parts.name)
	if name not in STRING_METHODS:
		return None
	if not accepts_arity(getattr(StringMethods, name), len(parts.args) + 1):
		return None
	if ctx.semantic.is_string_call(node):
		return name
	if ctx.semantic.declaring_type(node) is not None:
		return None
	receiver_type = ctx.semantic.type_of(parts.receiver)
	if receiver_type is not None:
		return name if is_string_type(receiver_type) else None
	return name if parts.name in STRING_ONLY else None


class StringMethodStrategy(ExpressionStrategy[Invocation]):
	"""`s.ToUpper()` -> `s.toUpperCase()`, `s.Replace(a, b)` -> `s.replaceAll(a, b)`."""

	name: ClassVar[str] = "string-method"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		return _string_method(node, ctx) is not None

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		name = cast(str, _string_method(node, ctx))
		parts = cast(CallParts, call_parts(node))
		methods = StringMethods(ctx.expr(cast(Expression, parts.receiver)), ctx)
		return getattr(methods, name)(*parts.arg_exprs)


class StringStatics:
	"""`string.X(...)` helpers. Arguments arrive converted, except `format`."""

	@staticmethod
	def is_null_or_empty(value: ExprNode) -> ExprNode:
		"""string.IsNullOrEmpty(s) -> !s"""
		return Unary("!", value)

	@staticmethod
	def is_null_or_white_space(value: ExprNode) -> ExprNode:
		"""string.IsNullOrWhiteSpace(s) -> !s?.trim()"""
		return Unary("!", method(value, "trim", optional=True))

	@staticmethod
	def join(separator: ExprNode, *values: ExprNode) -> ExprNode:
		"""string.Join(sep, xs) -> xs.join(sep)"""
		items = values[0] if len(values) == 1 else Array(list(values))
		return method(items, "join", [separator])

	@staticmethod
	def concat(*values: ExprNode) -> ExprNode:
		"""string.Concat(a, b) -> [a, b].join("")"""
		return method(Array(list(values)), "join", [Literal("")])

	@staticmethod
	def equals(left: ExprNode, right: ExprNode) -> ExprNode:
		return Binary(left, "===", right)

	@staticmethod
	def compare(left: ExprNode, right: ExprNode) -> ExprNode:
		return method(left, "localeCompare", [right])


STRING_STATICS = public_methods(StringStatics)


def _static_method(node: Invocation, ctx: ConversionContext) -> str | None:
	parts = call_parts(node)
	if parts is None or parts.receiver is None:
		return None
	if static_type(parts.receiver, ctx) != STRING:
		return None
	name = snake_name(parts.name)
	if name == "format":
		return name if _format_literal(parts.arg_exprs) is not None else None
	if name not in STRING_STATICS:
		return None
	if not accepts_arity(getattr(StringStatics, name), len(parts.args)):
		return None
	return name


def _format_literal(args: list[Expression]) -> str | None:
	if args and isinstance(args[0], LiteralNode) and args[0].literal_kind == "string":
		return str(args[0].value)
	return None


class StringStaticStrategy(ExpressionStrategy[Invocation]):
	"""`string.IsNullOrEmpty(s)` -> `!s`; `string.Format` -> template literal."""

	name: ClassVar[str] = "string-static"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		return _static_method(node, ctx) is not None

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		name = cast(str, _static_method(node, ctx))
		args = ctx.converter.arguments(node.arguments, ctx)
		if name == "format":
			text = cast(str, _format_literal([a.expression for a in node.arguments]))
			parts = composite_format(text, args[1:])
			if parts is None:
				return ctx.unsupported(node, f"format string {text!r}", "unsupported.format")
			return Template(parts)
		return getattr(StringStatics, name)(*args)


class StringEmptyStrategy(ExpressionStrategy[MemberAccess]):
	"""`string.Empty` -> `""`"""

	name: ClassVar[str] = "string-empty"
	node_types: ClassVar[tuple[type, ...]] = (MemberAccess,)

	@override
	def matches(self, node: MemberAccess, ctx: ConversionContext) -> bool:
		return node.name == "Empty" and static_type(node.target, ctx) == STRING

	@override
	def convert(self, node: MemberAccess, ctx: ConversionContext) -> ExprNode:
		return Literal("")
