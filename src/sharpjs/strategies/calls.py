"""
Framework calls -> JavaScript globals.

Console output, stringification, `Math`, numeric parsing and constants,
`Guid`/`DateTime` statics and service lookup. Each strategy matches by the
resolved declaring type when the semantic model knows it and by the
receiver's spelling otherwise.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import ClassVar, cast, override

from sharpjs.context import ConversionContext
from sharpjs.formatting import apply_format, composite_format, is_standard_format
from sharpjs.naming import simple_type_name, to_camel_case
from sharpjs.nodes import (
	Array as JsArray,
	Arrow,
	Assign,
	Binary,
	Call,
	ExprNode,
	Identifier,
	Literal,
	Member,
	New,
	Number,
	Template,
	Ternary,
	Unary,
)
from sharpjs.registry import ExpressionStrategy
from sharpjs.semantic import DATE_TYPES, TEXT_WRITER
from sharpjs.strategies.helpers import (
	CallParts,
	call_parts,
	global_call,
	method,
	public_methods,
	receiver_text,
	snake_name,
	static_type,
)
from sharpjs.syntax import (
	Expression,
	Invocation,
	Literal as LiteralNode,
	MemberAccess,
	TypeOf,
	TypeRef,
)

# =============================================================================
# Console
# =============================================================================

CONSOLE_RECEIVERS: dict[str, str] = {
	"Console": "log",
	"System.Console": "log",
	"Console.Out": "log",
	"Console.Error": "error",
	"Debug": "debug",
	"System.Diagnostics.Debug": "debug",
	"Trace": "debug",
	"System.Diagnostics.Trace": "debug",
}
CONSOLE_TYPES: dict[str, str] = {
	"System.Console": "log",
	"System.Diagnostics.Debug": "debug",
	"System.Diagnostics.Trace": "debug",
}
CONSOLE_METHODS = ("WriteLine", "Write")


def _console_method(node: Invocation, ctx: ConversionContext) -> str | None:
	parts = call_parts(node)
	if parts is None or parts.name not in CONSOLE_METHODS:
		return None
	text = receiver_text(parts.receiver)
	if ctx.semantic.is_console_call(node):
		declaring = ctx.semantic.declaring_type(node)
		if declaring == TEXT_WRITER:
			return "error" if text is not None and text.endswith("Error") else "log"
		return CONSOLE_TYPES[cast(str, declaring)]
	if ctx.semantic.declaring_type(node) is not None or text is None:
		return None
	if ctx.is_bound(text.split(".", 1)[0]):
		return None
	return CONSOLE_RECEIVERS.get(text)


class ConsoleStrategy(ExpressionStrategy[Invocation]):
	"""`Console.WriteLine(args)` -> `console.log(args)`.

	A composite format string (`"{0} items"`) with arguments becomes a
	template literal.
	"""

	name: ClassVar[str] = "console"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		return _console_method(node, ctx) is not None

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		target = cast(str, _console_method(node, ctx))
		args = ctx.converter.arguments(node.arguments, ctx)
		first = node.arguments[0].expression if node.arguments else None
		if len(args) > 1 and isinstance(first, LiteralNode) and first.literal_kind == "string":
			parts = composite_format(str(first.value), args[1:])
			if parts is not None:
				args = [Template(parts)]
		return global_call(f"console.{target}", args)


# =============================================================================
# Stringification
# =============================================================================


class ToStringStrategy(ExpressionStrategy[Invocation]):
	"""`x.ToString()` -> `String(x)`, safe on null receivers.

	A standard numeric format argument (`x.ToString("F2")`) maps to the
	matching number formatting call.
	"""

	name: ClassVar[str] = "to-string"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		parts = call_parts(node)
		if parts is None or parts.receiver is None or parts.name != "ToString":
			return False
		if not parts.args:
			return True
		arg = parts.args[0].expression
		return (
			len(parts.args) == 1
			and isinstance(arg, LiteralNode)
			and arg.literal_kind == "string"
			and is_standard_format(str(arg.value))
		)

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		parts = cast(CallParts, call_parts(node))
		value = ctx.expr(cast(Expression, parts.receiver))
		if parts.args:
			arg = cast(LiteralNode, parts.args[0].expression)
			formatted = apply_format(value, str(arg.value))
			if formatted is not None:
				return formatted
		return Call(Identifier("String"), [value])


# =============================================================================
# Static call tables
# =============================================================================

StaticCall = Callable[[list[ExprNode]], ExprNode | None]


class MathMethods:
	"""`Math` members whose JavaScript spelling is not plain camel case.

	Anything not listed here maps to `Math.<camelCase>` with the arguments
	converted.
	"""

	@staticmethod
	def clamp(args: list[ExprNode]) -> ExprNode | None:
		"""Math.Clamp(v, lo, hi) -> Math.min(Math.max(v, lo), hi)"""
		if len(args) != 3:
			return None
		value, low, high = args
		return global_call("Math.min", [global_call("Math.max", [value, low]), high])

	@staticmethod
	def ceiling(args: list[ExprNode]) -> ExprNode | None:
		return global_call("Math.ceil", args)

	@staticmethod
	def truncate(args: list[ExprNode]) -> ExprNode | None:
		return global_call("Math.trunc", args)

	@staticmethod
	def round(args: list[ExprNode]) -> ExprNode | None:
		"""Math.Round(x, d) -> Number(x.toFixed(d))"""
		if len(args) == 2:
			return Call(Identifier("Number"), [method(args[0], "toFixed", [args[1]])])
		return global_call("Math.round", args)

	@staticmethod
	def log(args: list[ExprNode]) -> ExprNode | None:
		"""Math.Log(x, b) -> Math.log(x) / Math.log(b)"""
		if len(args) == 2:
			return Binary(global_call("Math.log", args[:1]), "/", global_call("Math.log", args[1:]))
		return global_call("Math.log", args)


MATH_METHODS = public_methods(MathMethods)
# Tuple results have no single-expression equivalent
MATH_UNSUPPORTED = frozenset({"DivRem", "BigMul"})


def _math_call(name: str, args: list[ExprNode]) -> ExprNode | None:
	if snake_name(name) in MATH_METHODS:
		return getattr(MathMethods, snake_name(name))(args)
	return global_call(f"Math.{to_camel_case(name)}", args)


def _parse_int(args: list[ExprNode]) -> ExprNode | None:
	return Call(Identifier("parseInt"), args[:1]) if args else None


def _parse_float(args: list[ExprNode]) -> ExprNode | None:
	return Call(Identifier("parseFloat"), args[:1]) if args else None


def _try_parse(parse: str) -> StaticCall:
	"""int.TryParse(s, out n) -> !Number.isNaN(n = parseInt(s))"""

	def convert(args: list[ExprNode]) -> ExprNode | None:
		if len(args) != 2:
			return None
		text, out = args
		parsed = Assign(out, "=", Call(Identifier(parse), [text]))
		return Unary("!", global_call("Number.isNaN", [parsed]))

	return convert


def _is_nan(args: list[ExprNode]) -> ExprNode | None:
	return global_call("Number.isNaN", args)


def _is_finite(args: list[ExprNode]) -> ExprNode | None:
	return global_call("Number.isFinite", args)


def _is_infinity(args: list[ExprNode]) -> ExprNode | None:
	return Binary(global_call("Math.abs", args), "===", Identifier("Infinity"))


def _new_guid(args: list[ExprNode]) -> ExprNode | None:
	return global_call("crypto.randomUUID", [])


class ArrayStatics:
	"""`Array.X(array, ...)` helpers -> methods of the array itself."""

	@staticmethod
	def empty(args: list[ExprNode]) -> ExprNode | None:
		return JsArray([])

	@staticmethod
	def sort(args: list[ExprNode]) -> ExprNode | None:
		"""Array.Sort(a) -> a.sort(($a, $b) => ...); JS sorts as strings by default"""
		if len(args) == 2:
			return method(args[0], "sort", args[1:])
		if len(args) != 1:
			return None
		a, b = Identifier("$a"), Identifier("$b")
		order = Ternary(
			Binary(a, "<", b),
			Unary("-", Number("1")),
			Ternary(Binary(a, ">", b), Number("1"), Number("0")),
		)
		return method(args[0], "sort", [Arrow(["$a", "$b"], order)])

	@staticmethod
	def reverse(args: list[ExprNode]) -> ExprNode | None:
		return method(args[0], "reverse") if len(args) == 1 else None

	@staticmethod
	def resize(args: list[ExprNode]) -> ExprNode | None:
		"""Array.Resize(ref a, n) -> a.length = n"""
		if len(args) != 2:
			return None
		return Assign(Member(args[0], "length"), "=", args[1])


def _array_method(name: str) -> StaticCall:
	"""Array.Find(a, p) -> a.find(p), for statics that take one more argument."""

	def convert(args: list[ExprNode]) -> ExprNode | None:
		return method(args[0], name, args[1:]) if len(args) == 2 else None

	return convert


ARRAY_METHODS: dict[str, str] = {
	"Find": "find",
	"FindIndex": "findIndex",
	"FindLast": "findLast",
	"FindAll": "filter",
	"IndexOf": "indexOf",
	"LastIndexOf": "lastIndexOf",
	"Exists": "some",
	"TrueForAll": "every",
}

INT_TYPES = ("System.Int32", "System.Int64", "System.Int16", "System.Byte")
FLOAT_TYPES = ("System.Double", "System.Single", "System.Decimal")

STATIC_CALLS: dict[str, dict[str, StaticCall]] = {
	**{t: {"Parse": _parse_int, "TryParse": _try_parse("parseInt")} for t in INT_TYPES},
	**{
		t: {
			"Parse": _parse_float,
			"TryParse": _try_parse("parseFloat"),
			"IsNaN": _is_nan,
			"IsFinite": _is_finite,
			"IsInfinity": _is_infinity,
		}
		for t in FLOAT_TYPES
	},
	"System.Guid": {"NewGuid": _new_guid},
	"System.Convert": {
		"ToInt32": lambda args: global_call("Math.trunc", [global_call("Number", args[:1])]),
		"ToDouble": lambda args: global_call("Number", args[:1]),
		"ToString": lambda args: global_call("String", args[:1]),
		"ToBoolean": lambda args: global_call("Boolean", args[:1]),
	},
	"System.Array": {
		**{k: _array_method(v) for k, v in ARRAY_METHODS.items()},
		"Empty": ArrayStatics.empty,
		"Sort": ArrayStatics.sort,
		"Reverse": ArrayStatics.reverse,
		"Resize": ArrayStatics.resize,
	},
}


class MathStrategy(ExpressionStrategy[Invocation]):
	"""`Math.Abs(x)` -> `Math.abs(x)`; `Math.Clamp` expands to min/max."""

	name: ClassVar[str] = "math"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		parts = call_parts(node)
		if parts is None or parts.receiver is None or parts.name in MATH_UNSUPPORTED:
			return False
		if ctx.semantic.is_math_call(node):
			return True
		return static_type(parts.receiver, ctx) in ("System.Math", "System.MathF")

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		parts = cast(CallParts, call_parts(node))
		args = ctx.converter.arguments(node.arguments, ctx)
		result = _math_call(parts.name, args)
		if result is None:
			return ctx.unsupported(node, f"Math.{parts.name} with {len(args)} argument(s)")
		return result


class StaticCallStrategy(ExpressionStrategy[Invocation]):
	"""Numeric parsing and tests, `Guid.NewGuid()` and `Convert.ToX`."""

	name: ClassVar[str] = "static-call"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	def _lookup(self, node: Invocation, ctx: ConversionContext) -> StaticCall | None:
		parts = call_parts(node)
		if parts is None or parts.receiver is None:
			return None
		owner = static_type(parts.receiver, ctx)
		if owner is None:
			return None
		return STATIC_CALLS.get(owner, {}).get(parts.name)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		return self._lookup(node, ctx) is not None

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		fn = cast(StaticCall, self._lookup(node, ctx))
		result = fn(ctx.converter.arguments(node.arguments, ctx))
		if result is None:
			return ctx.unsupported(node)
		return result


# =============================================================================
# Static members
# =============================================================================

MAX_VALUE = Member(Identifier("Number"), "MAX_VALUE")


def _today() -> ExprNode:
	"""DateTime.Today -> new Date(new Date().setHours(0, 0, 0, 0))"""
	midnight = method(New(Identifier("Date"), []), "setHours", [Number("0")] * 4)
	return New(Identifier("Date"), [midnight])


STATIC_MEMBERS: dict[str, dict[str, Callable[[], ExprNode]]] = {
	"System.Math": {
		"PI": lambda: Member(Identifier("Math"), "PI"),
		"E": lambda: Member(Identifier("Math"), "E"),
		"Tau": lambda: Binary(Number("2"), "*", Member(Identifier("Math"), "PI")),
	},
	"System.Int32": {
		"MaxValue": lambda: Number("2147483647"),
		"MinValue": lambda: Unary("-", Number("2147483648")),
	},
	"System.Int64": {
		"MaxValue": lambda: Member(Identifier("Number"), "MAX_SAFE_INTEGER"),
		"MinValue": lambda: Member(Identifier("Number"), "MIN_SAFE_INTEGER"),
	},
	"System.Double": {
		"MaxValue": lambda: MAX_VALUE,
		"MinValue": lambda: Unary("-", MAX_VALUE),
		"Epsilon": lambda: Member(Identifier("Number"), "MIN_VALUE"),
		"NaN": lambda: Identifier("NaN"),
		"PositiveInfinity": lambda: Identifier("Infinity"),
		"NegativeInfinity": lambda: Unary("-", Identifier("Infinity")),
	},
	"System.Guid": {
		"Empty": lambda: Literal("00000000-0000-0000-0000-000000000000"),
	},
	"System.DateTime": {
		"Now": lambda: New(Identifier("Date"), []),
		"UtcNow": lambda: New(Identifier("Date"), []),
		"Today": _today,
	},
}
STATIC_MEMBERS["System.MathF"] = STATIC_MEMBERS["System.Math"]
STATIC_MEMBERS["System.Single"] = STATIC_MEMBERS["System.Double"]
STATIC_MEMBERS["System.DateTimeOffset"] = STATIC_MEMBERS["System.DateTime"]


class StaticMemberStrategy(ExpressionStrategy[MemberAccess]):
	"""Constants and clock reads: `Math.PI`, `int.MaxValue`, `DateTime.Now`."""

	name: ClassVar[str] = "static-member"
	node_types: ClassVar[tuple[type, ...]] = (MemberAccess,)

	def _lookup(self, node: MemberAccess, ctx: ConversionContext) -> Callable[[], ExprNode] | None:
		owner = static_type(node.target, ctx)
		if owner is None:
			return None
		return STATIC_MEMBERS.get(owner, {}).get(node.name)

	@override
	def matches(self, node: MemberAccess, ctx: ConversionContext) -> bool:
		return self._lookup(node, ctx) is not None

	@override
	def convert(self, node: MemberAccess, ctx: ConversionContext) -> ExprNode:
		build = cast(Callable[[], ExprNode], self._lookup(node, ctx))
		return build()


# Component getters of a JS Date; months are zero-based there
DATE_PARTS: dict[str, str] = {
	"Year": "getFullYear",
	"Month": "getMonth",
	"Day": "getDate",
	"Hour": "getHours",
	"Minute": "getMinutes",
	"Second": "getSeconds",
	"Millisecond": "getMilliseconds",
	"DayOfWeek": "getDay",
}


def _is_date(node: Expression, ctx: ConversionContext) -> bool:
	"""Whether `node` is a date: typed so, or a clock read like `DateTime.Now`."""
	type_text = ctx.semantic.type_of(node)
	if type_text is not None:
		return simple_type_name(type_text) in ("DateTime", "DateTimeOffset")
	return (
		isinstance(node, MemberAccess)
		and node.name in STATIC_MEMBERS["System.DateTime"]
		and static_type(node.target, ctx) in DATE_TYPES
	)


class DatePartStrategy(ExpressionStrategy[MemberAccess]):
	"""`date.Year` -> `date.getFullYear()`; `date.Month` -> `date.getMonth() + 1`."""

	name: ClassVar[str] = "date-part"
	node_types: ClassVar[tuple[type, ...]] = (MemberAccess,)

	@override
	def matches(self, node: MemberAccess, ctx: ConversionContext) -> bool:
		return node.name in DATE_PARTS and _is_date(node.target, ctx)

	@override
	def convert(self, node: MemberAccess, ctx: ConversionContext) -> ExprNode:
		part = method(ctx.expr(node.target), DATE_PARTS[node.name], optional=node.conditional)
		if node.name == "Month":
			return Binary(part, "+", Number("1"))
		return part


# =============================================================================
# Service lookup
# =============================================================================

SERVICE_METHODS = ("GetService", "GetRequiredService")


def _service_key(type_args: Sequence[TypeRef], args: Sequence[Expression]) -> str | None:
	if type_args:
		return type_args[0].base_name
	if len(args) == 1 and isinstance(args[0], TypeOf):
		return args[0].type.base_name
	return None


class ServiceLookupStrategy(ExpressionStrategy[Invocation]):
	"""`sp.GetRequiredService<T>()` -> `sp.getService("T")`.

	Both variants resolve through the same runtime lookup; a missing required
	service yields undefined rather than throwing.
	"""

	name: ClassVar[str] = "service-lookup"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		parts = call_parts(node)
		if parts is None or parts.name not in SERVICE_METHODS:
			return False
		if _service_key(parts.type_args, parts.arg_exprs) is None:
			return False
		if ctx.semantic.is_service_call(node):
			return True
		declaring = ctx.semantic.declaring_type(node)
		# User classes may define their own GetService
		return declaring is None or "." in declaring

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		parts = cast(CallParts, call_parts(node))
		key = cast(str, _service_key(parts.type_args, parts.arg_exprs))
		provider = ctx.expr(parts.receiver) if parts.receiver is not None else Identifier("this")
		return method(provider, "getService", [Literal(key)], parts.conditional)
