"""C# patterns -> JavaScript boolean tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sharpjs.naming import to_camel_case
from sharpjs.nodes import (
	Binary,
	Call,
	ExprNode,
	Identifier,
	Literal,
	Member,
	Unary,
)
from sharpjs.semantic import is_sequence_type
from sharpjs.syntax import (
	BinaryPattern,
	ConstantPattern,
	DeclarationPattern,
	DiscardPattern,
	Expression,
	Identifier as IdentifierNode,
	Literal as LiteralNode,
	NotPattern,
	Pattern,
	PropertyPattern,
	RelationalPattern,
	TypePattern,
	TypeRef,
	VarPattern,
)

if TYPE_CHECKING:
	from sharpjs.context import ConversionContext

Bindings = list[tuple[str, ExprNode]]

TYPEOF_NAMES: dict[str, str] = {
	"string": "string",
	"String": "string",
	"char": "string",
	"bool": "boolean",
	"Boolean": "boolean",
	"int": "number",
	"uint": "number",
	"long": "number",
	"ulong": "number",
	"short": "number",
	"ushort": "number",
	"byte": "number",
	"sbyte": "number",
	"float": "number",
	"double": "number",
	"decimal": "number",
	"Int32": "number",
	"Int64": "number",
	"Double": "number",
	"Single": "number",
	"Decimal": "number",
}


def is_true(node: ExprNode) -> bool:
	return isinstance(node, Literal) and node.value is True


def conjoin(*tests: ExprNode) -> ExprNode:
	"""`a && b && ...`, dropping literal `true` terms."""
	terms = [t for t in tests if not is_true(t)]
	if not terms:
		return Literal(True)
	result = terms[0]
	for t in terms[1:]:
		result = Binary(result, "&&", t)
	return result


def names_type(expr: Expression, ctx: ConversionContext) -> bool:
	"""Whether a constant pattern operand is really a type: `x is Circle`.

	The parser cannot tell `Circle` from a constant, so resolved names use
	their symbol kind and unresolved ones go by capitalization.
	"""
	if not isinstance(expr, IdentifierNode) or ctx.is_bound(expr.name):
		return False
	symbol = ctx.semantic.symbol(expr)
	if symbol is not None:
		return symbol.kind == "type"
	return expr.name[:1].isupper()


def type_test(subject: ExprNode, type_: TypeRef) -> ExprNode:
	"""Runtime check that `subject` is an instance of `type_`."""
	name = type_.base_name
	if type_.rank or is_sequence_type(str(type_)):
		return Call(Member(Identifier("Array"), "isArray"), [subject])
	js_type = TYPEOF_NAMES.get(name)
	if js_type is not None:
		return Binary(Unary("typeof", subject), "===", Literal(js_type))
	if name in ("object", "Object"):
		return Binary(subject, "!=", Literal(None))
	if name.endswith("Exception"):
		return Binary(subject, "instanceof", Identifier("Error"))
	return Binary(subject, "instanceof", Identifier(name))


def pattern_test(
	subject: ExprNode,
	pattern: Pattern,
	ctx: ConversionContext,
	bindings: Bindings | None = None,
) -> ExprNode:
	"""Boolean expression that is true when `subject` matches `pattern`.

	Designations (`Circle c`, `var x`, `{ } p`) are appended to `bindings` as
	(name, value) pairs for the caller to declare. When `bindings` is None
	designations are unsupported and reported as such.
	"""
	if isinstance(pattern, ConstantPattern):
		expr = pattern.expression
		if isinstance(expr, LiteralNode) and expr.literal_kind == "null":
			return Binary(subject, "==", Literal(None))
		if names_type(expr, ctx):
			named = cast(IdentifierNode, expr)
			return type_test(subject, TypeRef(named.name, named.type_args))
		return Binary(subject, "===", ctx.expr(expr))
	if isinstance(pattern, DiscardPattern):
		return Literal(True)
	if isinstance(pattern, VarPattern):
		if bindings is None:
			return ctx.unsupported(pattern, "pattern designation", "unsupported.pattern")
		bindings.append((pattern.name, subject))
		return Literal(True)
	if isinstance(pattern, TypePattern):
		return type_test(subject, pattern.type)
	if isinstance(pattern, DeclarationPattern):
		if bindings is None:
			return ctx.unsupported(pattern, "pattern designation", "unsupported.pattern")
		bindings.append((pattern.name, subject))
		return type_test(subject, pattern.type)
	if isinstance(pattern, RelationalPattern):
		return Binary(subject, pattern.op, ctx.expr(pattern.expression))
	if isinstance(pattern, NotPattern):
		inner = pattern.pattern
		if (
			isinstance(inner, ConstantPattern)
			and isinstance(inner.expression, LiteralNode)
			and inner.expression.literal_kind == "null"
		):
			return Binary(subject, "!=", Literal(None))
		return Unary("!", pattern_test(subject, inner, ctx, bindings))
	if isinstance(pattern, BinaryPattern):
		left = pattern_test(subject, pattern.left, ctx, bindings)
		right = pattern_test(subject, pattern.right, ctx, bindings)
		if pattern.op == "and":
			return conjoin(left, right)
		return Binary(left, "||", right)
	if isinstance(pattern, PropertyPattern):
		return _property_test(subject, pattern, ctx, bindings)
	return ctx.unsupported(pattern, f"no conversion rule for {pattern.kind}", "unsupported.pattern")


def _property_test(
	subject: ExprNode,
	pattern: PropertyPattern,
	ctx: ConversionContext,
	bindings: Bindings | None,
) -> ExprNode:
	# A property pattern never matches null; `instanceof` already rejects it
	tests: list[ExprNode] = []
	if pattern.type is not None:
		tests.append(type_test(subject, pattern.type))
	else:
		tests.append(Binary(subject, "!=", Literal(None)))
	for sub in pattern.subpatterns:
		target: ExprNode = subject
		parts = sub.name.split(".")
		for i, part in enumerate(parts):
			target = Member(target, _property_name(part))
			if i < len(parts) - 1:
				# { A.B: x } requires A to be non-null as well
				tests.append(Binary(target, "!=", Literal(None)))
		tests.append(pattern_test(target, sub.pattern, ctx, bindings))
	if pattern.designation:
		if bindings is None:
			return ctx.unsupported(pattern, "pattern designation", "unsupported.pattern")
		bindings.append((pattern.designation, subject))
	return conjoin(*tests)


def _property_name(name: str) -> str:
	if name in ("Length", "Count"):
		return "length"
	return to_camel_case(name)
