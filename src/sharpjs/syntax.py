"""
Immutable C# syntax tree.

Nodes are produced by `sharpjs.parser` and consumed read-only by the binder
and the converter. Every node remembers the exact source text it was parsed
from (used for verbatim fallback and diagnostics) and its starting position.
Nodes compare and hash by identity so they can key semantic tables.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from typing import Literal as Lit
from typing import TypeAlias


@dataclass(slots=True, frozen=True, eq=False, kw_only=True)
class SyntaxNode:
	"""Base class for all C# syntax nodes."""

	text: str = field(default="", repr=False)
	line: int = field(default=0, repr=False)
	column: int = field(default=0, repr=False)

	@property
	def kind(self) -> str:
		return type(self).__name__


class Expression(SyntaxNode):
	__slots__: tuple[str, ...] = ()


class Statement(SyntaxNode):
	__slots__: tuple[str, ...] = ()


class Pattern(SyntaxNode):
	__slots__: tuple[str, ...] = ()


class MemberDeclaration(SyntaxNode):
	__slots__: tuple[str, ...] = ()


# =============================================================================
# Types
# =============================================================================

PREDEFINED_TYPES: frozenset[str] = frozenset(
	{
		"bool",
		"byte",
		"char",
		"decimal",
		"double",
		"dynamic",
		"float",
		"int",
		"long",
		"nint",
		"nuint",
		"object",
		"sbyte",
		"short",
		"string",
		"uint",
		"ulong",
		"ushort",
		"void",
	}
)


@dataclass(slots=True, frozen=True, eq=False)
class TypeRef(SyntaxNode):
	"""A type as written: `List<User>`, `int?`, `string[]`, `(int, string)`.

	Tuple types use the name "ValueTuple" with the element types as args.
	"""

	name: str
	args: tuple[TypeRef, ...] = ()
	nullable: bool = False
	rank: int = 0

	@property
	def base_name(self) -> str:
		"""Unqualified name without generic arguments: `Dictionary`."""
		return self.name.rsplit(".", 1)[-1]

	@property
	def is_var(self) -> bool:
		return self.name == "var" and not self.args

	def __str__(self) -> str:
		if self.name == "ValueTuple" and self.args:
			out = "(" + ", ".join(str(a) for a in self.args) + ")"
		elif self.args:
			out = f"{self.name}<{', '.join(str(a) for a in self.args)}>"
		else:
			out = self.name
		if self.nullable:
			out += "?"
		return out + "[]" * self.rank


# =============================================================================
# Expressions
# =============================================================================


@dataclass(slots=True, frozen=True, eq=False)
class Identifier(Expression):
	"""Simple name, optionally generic: `count`, `GetService<IFoo>`."""

	name: str
	type_args: tuple[TypeRef, ...] = ()


LiteralKind: TypeAlias = Lit["string", "char", "number", "bool", "null"]


@dataclass(slots=True, frozen=True, eq=False)
class Literal(Expression):
	"""Literal value. Numbers keep their source spelling without suffixes."""

	value: str | bool | None
	literal_kind: LiteralKind


@dataclass(slots=True, frozen=True, eq=False)
class Interpolation(SyntaxNode):
	"""A `{expr,alignment:format}` hole in an interpolated string."""

	expression: Expression
	alignment: str | None = None
	format: str | None = None


@dataclass(slots=True, frozen=True, eq=False)
class InterpolatedString(Expression):
	parts: tuple[str | Interpolation, ...]


@dataclass(slots=True, frozen=True, eq=False)
class This(Expression):
	pass


@dataclass(slots=True, frozen=True, eq=False)
class Base(Expression):
	pass


@dataclass(slots=True, frozen=True, eq=False)
class MemberAccess(Expression):
	"""`target.Name`, `target?.Name` or `target.Name<T>`."""

	target: Expression
	name: str
	type_args: tuple[TypeRef, ...] = ()
	conditional: bool = False


@dataclass(slots=True, frozen=True, eq=False)
class Argument(SyntaxNode):
	"""Call argument with optional `out`/`ref`/`in` modifier or name."""

	expression: Expression
	modifier: str | None = None
	name: str | None = None


@dataclass(slots=True, frozen=True, eq=False)
class ElementAccess(Expression):
	target: Expression
	arguments: tuple[Argument, ...]
	conditional: bool = False


@dataclass(slots=True, frozen=True, eq=False)
class Invocation(Expression):
	target: Expression
	arguments: tuple[Argument, ...]


@dataclass(slots=True, frozen=True, eq=False)
class DeclarationExpression(Expression):
	"""Inline declaration in an argument: `out var value`."""

	type: TypeRef | None
	name: str


@dataclass(slots=True, frozen=True, eq=False)
class Binary(Expression):
	left: Expression
	op: str
	right: Expression


@dataclass(slots=True, frozen=True, eq=False)
class Unary(Expression):
	"""Prefix operator: `-x`, `!x`, `++x`, `~x`."""

	op: str
	operand: Expression


@dataclass(slots=True, frozen=True, eq=False)
class Postfix(Expression):
	"""Postfix operator: `x++`, `x--`, `x!` (null-forgiving)."""

	op: str
	operand: Expression


@dataclass(slots=True, frozen=True, eq=False)
class Assignment(Expression):
	target: Expression
	op: str
	value: Expression


@dataclass(slots=True, frozen=True, eq=False)
class Conditional(Expression):
	condition: Expression
	when_true: Expression
	when_false: Expression


@dataclass(slots=True, frozen=True, eq=False)
class Parameter(SyntaxNode):
	name: str
	type: TypeRef | None = None
	modifier: str | None = None
	default: Expression | None = None


@dataclass(slots=True, frozen=True, eq=False)
class Lambda(Expression):
	parameters: tuple[Parameter, ...]
	body: Expression | Block
	is_async: bool = False


@dataclass(slots=True, frozen=True, eq=False)
class MemberInit(SyntaxNode):
	"""`Name = value` inside an object initializer."""

	name: str
	value: Expression | Initializer


@dataclass(slots=True, frozen=True, eq=False)
class IndexInit(SyntaxNode):
	"""`[key] = value` inside an object initializer."""

	key: Expression
	value: Expression | Initializer


InitElement: TypeAlias = "Expression | MemberInit | IndexInit | Initializer"


@dataclass(slots=True, frozen=True, eq=False)
class Initializer(SyntaxNode):
	"""Brace initializer. `{ a, b }` is a collection, `{ X = 1 }` an object.

	Nested braces (`{ { "k", 1 } }`) appear as Initializer elements.
	"""

	elements: tuple[InitElement, ...]

	@property
	def is_object(self) -> bool:
		return any(isinstance(e, (MemberInit, IndexInit)) for e in self.elements)


@dataclass(slots=True, frozen=True, eq=False)
class ObjectCreation(Expression):
	"""`new T(args) { init }`; `type` is None for target-typed `new()`."""

	type: TypeRef | None
	arguments: tuple[Argument, ...] = ()
	initializer: Initializer | None = None


@dataclass(slots=True, frozen=True, eq=False)
class AnonymousObject(Expression):
	"""`new { Name = x, y }`; bare expressions keep their own name."""

	members: tuple[MemberInit, ...]


@dataclass(slots=True, frozen=True, eq=False)
class ArrayCreation(Expression):
	"""`new int[3]`, `new[] { 1, 2 }`, `new string[] { "a" }`."""

	element_type: TypeRef | None
	size: Expression | None = None
	initializer: Initializer | None = None


@dataclass(slots=True, frozen=True, eq=False)
class CollectionExpression(Expression):
	"""`[a, b, ..rest]`; spread elements are wrapped in `Spread`."""

	elements: tuple[Expression, ...]


@dataclass(slots=True, frozen=True, eq=False)
class Spread(Expression):
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class TupleExpression(Expression):
	elements: tuple[Expression, ...]


@dataclass(slots=True, frozen=True, eq=False)
class Parenthesized(Expression):
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class Await(Expression):
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class Cast(Expression):
	type: TypeRef
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class As(Expression):
	expression: Expression
	type: TypeRef


@dataclass(slots=True, frozen=True, eq=False)
class IsPattern(Expression):
	expression: Expression
	pattern: Pattern


@dataclass(slots=True, frozen=True, eq=False)
class TypeOf(Expression):
	type: TypeRef


@dataclass(slots=True, frozen=True, eq=False)
class DefaultValue(Expression):
	"""`default` or `default(T)`."""

	type: TypeRef | None = None


@dataclass(slots=True, frozen=True, eq=False)
class ThrowExpression(Expression):
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class SwitchArm(SyntaxNode):
	pattern: Pattern
	guard: Expression | None
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class SwitchExpression(Expression):
	governing: Expression
	arms: tuple[SwitchArm, ...]


@dataclass(slots=True, frozen=True, eq=False)
class WithExpression(Expression):
	"""Non-destructive mutation: `record with { X = 1 }`."""

	expression: Expression
	initializer: Initializer


@dataclass(slots=True, frozen=True, eq=False)
class RangeExpression(Expression):
	start: Expression | None
	end: Expression | None


@dataclass(slots=True, frozen=True, eq=False)
class SizeOf(Expression):
	type: TypeRef


# =============================================================================
# Patterns
# =============================================================================


@dataclass(slots=True, frozen=True, eq=False)
class ConstantPattern(Pattern):
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class DiscardPattern(Pattern):
	pass


@dataclass(slots=True, frozen=True, eq=False)
class VarPattern(Pattern):
	name: str


@dataclass(slots=True, frozen=True, eq=False)
class TypePattern(Pattern):
	type: TypeRef


@dataclass(slots=True, frozen=True, eq=False)
class DeclarationPattern(Pattern):
	type: TypeRef
	name: str


@dataclass(slots=True, frozen=True, eq=False)
class RelationalPattern(Pattern):
	op: str
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class NotPattern(Pattern):
	pattern: Pattern


@dataclass(slots=True, frozen=True, eq=False)
class BinaryPattern(Pattern):
	op: Lit["and", "or"]
	left: Pattern
	right: Pattern


@dataclass(slots=True, frozen=True, eq=False)
class Subpattern(SyntaxNode):
	"""`Name: pattern`; extended property patterns keep the dotted path."""

	name: str
	pattern: Pattern


@dataclass(slots=True, frozen=True, eq=False)
class PropertyPattern(Pattern):
	type: TypeRef | None
	subpatterns: tuple[Subpattern, ...]
	designation: str | None = None


@dataclass(slots=True, frozen=True, eq=False)
class ListPattern(Pattern):
	patterns: tuple[Pattern, ...]


# =============================================================================
# Statements
# =============================================================================


@dataclass(slots=True, frozen=True, eq=False)
class Block(Statement):
	statements: tuple[Statement, ...]


@dataclass(slots=True, frozen=True, eq=False)
class VariableDeclarator(SyntaxNode):
	name: str
	initializer: Expression | None = None


@dataclass(slots=True, frozen=True, eq=False)
class LocalDeclaration(Statement):
	"""`var x = 1;`, `const int n = 2;`, `using var r = Open();`.

	`type` is None for `var`.
	"""

	type: TypeRef | None
	declarators: tuple[VariableDeclarator, ...]
	is_const: bool = False
	is_using: bool = False
	is_await: bool = False


@dataclass(slots=True, frozen=True, eq=False)
class ExpressionStatement(Statement):
	expression: Expression


@dataclass(slots=True, frozen=True, eq=False)
class If(Statement):
	condition: Expression
	then: Statement
	else_: Statement | None = None


@dataclass(slots=True, frozen=True, eq=False)
class While(Statement):
	condition: Expression
	body: Statement


@dataclass(slots=True, frozen=True, eq=False)
class DoWhile(Statement):
	body: Statement
	condition: Expression


@dataclass(slots=True, frozen=True, eq=False)
class For(Statement):
	declaration: LocalDeclaration | None
	initializers: tuple[Expression, ...]
	condition: Expression | None
	incrementors: tuple[Expression, ...]
	body: Statement


@dataclass(slots=True, frozen=True, eq=False)
class ForEach(Statement):
	"""`foreach (var x in xs)`; `variable` is a tuple for deconstruction."""

	type: TypeRef | None
	variable: str | tuple[str, ...]
	expression: Expression
	body: Statement
	is_await: bool = False


@dataclass(slots=True, frozen=True, eq=False)
class Return(Statement):
	expression: Expression | None = None


@dataclass(slots=True, frozen=True, eq=False)
class YieldStatement(Statement):
	"""`yield return x;` or, with no expression, `yield break;`."""

	expression: Expression | None = None


@dataclass(slots=True, frozen=True, eq=False)
class Break(Statement):
	pass


@dataclass(slots=True, frozen=True, eq=False)
class Continue(Statement):
	pass


@dataclass(slots=True, frozen=True, eq=False)
class Throw(Statement):
	expression: Expression | None = None


@dataclass(slots=True, frozen=True, eq=False)
class CaseLabel(SyntaxNode):
	"""`case pattern when guard:`; pattern is None for `default:`."""

	pattern: Pattern | None
	guard: Expression | None = None


@dataclass(slots=True, frozen=True, eq=False)
class SwitchSection(SyntaxNode):
	labels: tuple[CaseLabel, ...]
	statements: tuple[Statement, ...]


@dataclass(slots=True, frozen=True, eq=False)
class SwitchStatement(Statement):
	governing: Expression
	sections: tuple[SwitchSection, ...]


@dataclass(slots=True, frozen=True, eq=False)
class CatchClause(SyntaxNode):
	type: TypeRef | None
	name: str | None
	filter: Expression | None
	block: Block


@dataclass(slots=True, frozen=True, eq=False)
class Try(Statement):
	block: Block
	catches: tuple[CatchClause, ...] = ()
	finally_: Block | None = None


@dataclass(slots=True, frozen=True, eq=False)
class Using(Statement):
	"""`using (var r = ...) body` or `using (expr) body`."""

	declaration: LocalDeclaration | None
	expression: Expression | None
	body: Statement
	is_await: bool = False


@dataclass(slots=True, frozen=True, eq=False)
class Lock(Statement):
	expression: Expression
	body: Statement


@dataclass(slots=True, frozen=True, eq=False)
class LocalFunction(Statement):
	name: str
	parameters: tuple[Parameter, ...]
	body: Block | Expression
	return_type: TypeRef | None = None
	is_async: bool = False


@dataclass(slots=True, frozen=True, eq=False)
class Empty(Statement):
	pass


@dataclass(slots=True, frozen=True, eq=False)
class UnparsedStatement(Statement):
	"""Statement form the front end recognizes but does not model
	(`goto`, `unsafe`, `fixed`, `checked` blocks, labels)."""

	keyword: str


# =============================================================================
# Declarations
# =============================================================================


@dataclass(slots=True, frozen=True, eq=False)
class Attribute(SyntaxNode):
	name: str
	arguments: tuple[Argument, ...] = ()


@dataclass(slots=True, frozen=True, eq=False)
class FieldDeclaration(MemberDeclaration):
	type: TypeRef
	declarators: tuple[VariableDeclarator, ...]
	modifiers: tuple[str, ...] = ()
	attributes: tuple[Attribute, ...] = ()


@dataclass(slots=True, frozen=True, eq=False)
class PropertyDeclaration(MemberDeclaration):
	"""Auto, expression-bodied or accessor-bodied property."""

	type: TypeRef
	name: str
	modifiers: tuple[str, ...] = ()
	attributes: tuple[Attribute, ...] = ()
	getter: Block | Expression | None = None
	setter: Block | Expression | None = None
	initializer: Expression | None = None
	is_auto: bool = False


@dataclass(slots=True, frozen=True, eq=False)
class MethodDeclaration(MemberDeclaration):
	name: str
	return_type: TypeRef
	parameters: tuple[Parameter, ...]
	body: Block | Expression | None
	modifiers: tuple[str, ...] = ()
	attributes: tuple[Attribute, ...] = ()
	type_parameters: tuple[str, ...] = ()

	@property
	def is_async(self) -> bool:
		return "async" in self.modifiers


@dataclass(slots=True, frozen=True, eq=False)
class ConstructorDeclaration(MemberDeclaration):
	name: str
	parameters: tuple[Parameter, ...]
	body: Block | Expression | None
	modifiers: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True, eq=False)
class EnumMember(SyntaxNode):
	name: str
	value: Expression | None = None


@dataclass(slots=True, frozen=True, eq=False)
class EnumDeclaration(MemberDeclaration):
	name: str
	members: tuple[EnumMember, ...]
	modifiers: tuple[str, ...] = ()
	namespace: str | None = None


@dataclass(slots=True, frozen=True, eq=False)
class ClassDeclaration(MemberDeclaration):
	"""Class, record, struct or interface declaration."""

	name: str
	members: tuple[MemberDeclaration, ...]
	base_types: tuple[TypeRef, ...] = ()
	modifiers: tuple[str, ...] = ()
	attributes: tuple[Attribute, ...] = ()
	type_parameters: tuple[str, ...] = ()
	keyword: str = "class"
	namespace: str | None = None
	primary_parameters: tuple[Parameter, ...] = ()

	def attribute(self, name: str) -> Attribute | None:
		for attr in self.attributes:
			if attr.name in (name, f"{name}Attribute"):
				return attr
		return None


@dataclass(slots=True, frozen=True, eq=False)
class CompilationUnit(SyntaxNode):
	usings: tuple[str, ...]
	namespace: str | None
	types: tuple[ClassDeclaration | EnumDeclaration, ...]


# =============================================================================
# Traversal
# =============================================================================


def iter_children(node: SyntaxNode) -> Iterator[SyntaxNode]:
	"""Yield the direct child nodes of `node` in source order."""
	for f in fields(node):
		if f.name in ("text", "line", "column"):
			continue
		value = getattr(node, f.name)
		if isinstance(value, SyntaxNode):
			yield value
		elif isinstance(value, tuple):
			for item in value:  # pyright: ignore[reportUnknownVariableType]
				if isinstance(item, SyntaxNode):
					yield item


def walk(node: SyntaxNode, *, into_lambdas: bool = True) -> Iterator[SyntaxNode]:
	"""Depth-first pre-order traversal."""
	yield node
	for child in iter_children(node):
		if not into_lambdas and isinstance(child, (Lambda, LocalFunction)):
			continue
		yield from walk(child, into_lambdas=into_lambdas)


def is_iterator(body: SyntaxNode) -> bool:
	"""Whether a body uses `yield` and so converts to a generator."""
	return any(isinstance(n, YieldStatement) for n in walk(body, into_lambdas=False))
