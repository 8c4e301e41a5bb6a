"""
Sequence queries (System.Linq) -> JavaScript array methods.

Each query operator is a method of `SequenceMethods`, named after the C#
operator in snake case. Methods receive the raw argument syntax so selectors
can be inlined (comparators, projections), and return the converted node.
"""

from __future__ import annotations

from functools import cached_property
from typing import ClassVar, cast, override

from sharpjs.context import ConversionContext
from sharpjs.nodes import (
	Array,
	Arrow,
	Binary,
	ExprNode,
	Identifier,
	Literal,
	Member,
	New,
	Number,
	Object,
	Spread,
	Subscript,
	Ternary,
	Unary,
)
from sharpjs.patterns import type_test
from sharpjs.registry import ExpressionStrategy
from sharpjs.semantic import is_map_type, is_sequence_type, is_set_type
from sharpjs.strategies.helpers import (
	CallParts,
	accepts_arity,
	call_parts,
	evaluate_once,
	global_call,
	inline_lambda,
	method,
	public_methods,
	snake_name,
)
from sharpjs.syntax import Expression, Invocation


def _or_null(value: ExprNode, default: ExprNode | None = None) -> ExprNode:
	return Binary(value, "??", default if default is not None else Literal(None))


def _compare(
	left: ExprNode, right: ExprNode, descending: bool, ctx: ConversionContext
) -> ExprNode:
	"""`l < r ? -1 : l > r ? 1 : 0` (signs swapped when descending).

	Keys that are not plain reads are computed once per side.
	"""
	before, after = (Number("1"), Number("-1")) if descending else (Number("-1"), Number("1"))

	def build(keys: list[ExprNode]) -> ExprNode:
		first, second = keys
		later = Ternary(Binary(first, ">", second), after, Number("0"))
		return Ternary(Binary(first, "<", second), before, later)

	return evaluate_once(ctx, [left, right], [True, True], build)


def _ordering_call(node: Expression | None) -> CallParts | None:
	"""Parts of an `OrderBy`/`ThenBy` call a `ThenBy` can extend."""
	if not isinstance(node, Invocation):
		return None
	parts = call_parts(node)
	if parts is None or parts.receiver is None or len(parts.args) != 1:
		return None
	if not parts.name.startswith(("OrderBy", "ThenBy")):
		return None
	return parts


class SequenceMethods:
	"""Query operators over a converted receiver.

	`this` is the receiver as a JS array. Dictionaries are viewed as their
	entry arrays and sets as spread arrays, matching how C# enumerates them.
	"""

	def __init__(
		self, node: Invocation, parts: CallParts, receiver: Expression, ctx: ConversionContext
	) -> None:
		self._node = node
		self._parts = parts
		self._ctx = ctx
		self._receiver = receiver

	@cached_property
	def this(self) -> ExprNode:
		return self._source(self._receiver)

	def _source(self, receiver: Expression) -> ExprNode:
		converted = self._ctx.expr(receiver)
		receiver_type = self._ctx.semantic.type_of(receiver)
		if is_map_type(receiver_type):
			return global_call("Object.entries", [converted])
		if is_set_type(receiver_type):
			return Array([Spread(converted)])
		return converted

	def _fn(self, fn: Expression) -> ExprNode:
		return self._ctx.expr(fn)

	def _apply(self, fn: Expression, *args: ExprNode) -> ExprNode:
		return inline_lambda(fn, args, self._ctx)

	# --- Projection and filtering --------------------------------------------

	def select(self, selector: Expression) -> ExprNode:
		"""xs.Select(f) -> xs.map(f)"""
		return method(self.this, "map", [self._fn(selector)])

	def where(self, predicate: Expression) -> ExprNode:
		"""xs.Where(p) -> xs.filter(p)"""
		return method(self.this, "filter", [self._fn(predicate)])

	def select_many(self, selector: Expression) -> ExprNode:
		"""xs.SelectMany(f) -> xs.flatMap(f)"""
		return method(self.this, "flatMap", [self._fn(selector)])

	def of_type(self) -> ExprNode:
		"""xs.OfType<T>() -> xs.filter(($x) => $x instanceof T)"""
		if not self._parts.type_args:
			return self.this
		with self._ctx.params("x") as (x,):
			test = type_test(Identifier(x), self._parts.type_args[0])
		return method(self.this, "filter", [Arrow([x], test)])

	def cast(self) -> ExprNode:
		"""xs.Cast<T>() -> xs: the elements are already what they are"""
		return self.this

	# --- Quantifiers -------------------------------------------------------

	def any(self, predicate: Expression | None = None) -> ExprNode:
		"""xs.Any() -> xs.length > 0; xs.Any(p) -> xs.some(p)"""
		if predicate is None:
			return Binary(Member(self.this, "length"), ">", Number("0"))
		return method(self.this, "some", [self._fn(predicate)])

	def all(self, predicate: Expression) -> ExprNode:
		"""xs.All(p) -> xs.every(p)"""
		return method(self.this, "every", [self._fn(predicate)])

	def contains(self, value: Expression) -> ExprNode:
		"""xs.Contains(v) -> xs.includes(v)"""
		return method(self.this, "includes", [self._ctx.expr(value)])

	# --- Element access ------------------------------------------------------

	def first(self, predicate: Expression | None = None) -> ExprNode:
		"""xs.First() -> xs[0]; xs.First(p) -> xs.find(p)"""
		if predicate is None:
			return Subscript(self.this, Number("0"))
		return method(self.this, "find", [self._fn(predicate)])

	def first_or_default(
		self, predicate: Expression | None = None, default: Expression | None = None
	) -> ExprNode:
		default_node = self._ctx.expr(default) if default is not None else None
		return _or_null(self.first(predicate), default_node)

	def single(self, predicate: Expression | None = None) -> ExprNode:
		return self.first(predicate)

	def single_or_default(self, predicate: Expression | None = None) -> ExprNode:
		return _or_null(self.first(predicate))

	def last(self, predicate: Expression | None = None) -> ExprNode:
		"""xs.Last() -> xs.at(-1); xs.Last(p) -> xs.findLast(p)"""
		if predicate is None:
			return method(self.this, "at", [Unary("-", Number("1"))])
		return method(self.this, "findLast", [self._fn(predicate)])

	def last_or_default(self, predicate: Expression | None = None) -> ExprNode:
		return _or_null(self.last(predicate))

	def element_at(self, index: Expression) -> ExprNode:
		return Subscript(self.this, self._ctx.expr(index))

	def element_at_or_default(self, index: Expression) -> ExprNode:
		return _or_null(self.element_at(index))

	# --- Aggregation -----------------------------------------------------------

	def count(self, predicate: Expression | None = None) -> ExprNode:
		"""xs.Count() -> xs.length; xs.Count(p) -> xs.filter(p).length"""
		if predicate is None:
			return Member(self.this, "length")
		return Member(method(self.this, "filter", [self._fn(predicate)]), "length")

	def sum(self, selector: Expression | None = None) -> ExprNode:
		"""xs.Sum() -> xs.reduce(($a, $b) => $a + $b, 0)"""
		return self._sum_of(self.this, selector)

	def _sum_of(self, items: ExprNode, selector: Expression | None) -> ExprNode:
		with self._ctx.params("a", "b") as (a, b):
			item: ExprNode = Identifier(b)
			if selector is not None:
				item = self._apply(selector, item)
			body = Binary(Identifier(a), "+", item)
		return method(items, "reduce", [Arrow([a, b], body), Number("0")])

	def average(self, selector: Expression | None = None) -> ExprNode:
		"""xs.Average() -> xs.reduce(...) / xs.length"""

		def build(items: list[ExprNode]) -> ExprNode:
			return Binary(self._sum_of(items[0], selector), "/", Member(items[0], "length"))

		return evaluate_once(self._ctx, [self.this], [True], build)

	def min(self, selector: Expression | None = None) -> ExprNode:
		"""xs.Min() -> Math.min(...xs)"""
		return global_call("Math.min", [Spread(self._projected(selector))])

	def max(self, selector: Expression | None = None) -> ExprNode:
		"""xs.Max() -> Math.max(...xs)"""
		return global_call("Math.max", [Spread(self._projected(selector))])

	def _projected(self, selector: Expression | None) -> ExprNode:
		if selector is None:
			return self.this
		return method(self.this, "map", [self._fn(selector)])

	def aggregate(
		self,
		first: Expression,
		second: Expression | None = None,
		result: Expression | None = None,
	) -> ExprNode:
		"""xs.Aggregate(seed, f) -> xs.reduce(f, seed)"""
		if second is None:
			return method(self.this, "reduce", [self._fn(first)])
		reduced = method(self.this, "reduce", [self._fn(second), self._ctx.expr(first)])
		if result is None:
			return reduced
		return self._apply(result, reduced)

	# --- Partitioning and set operations ---------------------------------------

	def skip(self, count: Expression) -> ExprNode:
		"""xs.Skip(n) -> xs.slice(n)"""
		return method(self.this, "slice", [self._ctx.expr(count)])

	def take(self, count: Expression) -> ExprNode:
		"""xs.Take(n) -> xs.slice(0, n)"""
		return method(self.this, "slice", [Number("0"), self._ctx.expr(count)])

	def distinct(self) -> ExprNode:
		"""xs.Distinct() -> [...new Set(xs)]"""
		return Array([Spread(New(Identifier("Set"), [self.this]))])

	def reverse(self) -> ExprNode:
		"""xs.Reverse() -> [...xs].reverse()"""
		return method(Array([Spread(self.this)]), "reverse")

	def concat(self, other: Expression) -> ExprNode:
		return method(self.this, "concat", [self._ctx.expr(other)])

	def union(self, other: Expression) -> ExprNode:
		"""xs.Union(ys) -> [...new Set([...xs, ...ys])]"""
		merged = Array([Spread(self.this), Spread(self._ctx.expr(other))])
		return Array([Spread(New(Identifier("Set"), [merged]))])

	def intersect(self, other: Expression) -> ExprNode:
		"""xs.Intersect(ys) -> [...new Set(xs)].filter(($x) => ys.includes($x))"""
		return self._membership(other, keep=True)

	def except_(self, other: Expression) -> ExprNode:
		"""xs.Except(ys) -> [...new Set(xs)].filter(($x) => !ys.includes($x))"""
		return self._membership(other, keep=False)

	def _membership(self, other: Expression, keep: bool) -> ExprNode:
		# `ys` is read once per element, so anything but a plain read is bound first
		def build(sources: list[ExprNode]) -> ExprNode:
			with self._ctx.params("x") as (x,):
				test: ExprNode = method(sources[1], "includes", [Identifier(x)])
			if not keep:
				test = Unary("!", test)
			return method(sources[0], "filter", [Arrow([x], test)])

		values = [self.distinct(), self._ctx.expr(other)]
		return evaluate_once(self._ctx, values, [False, True], build)

	def zip(self, other: Expression, selector: Expression | None = None) -> ExprNode:
		"""xs.Zip(ys, f) -> xs.map(($x, $i) => f($x, ys[$i]))"""

		def build(sources: list[ExprNode]) -> ExprNode:
			with self._ctx.params("x", "i") as (x, i):
				paired = Subscript(sources[1], Identifier(i))
				body = (
					Array([Identifier(x), paired])
					if selector is None
					else self._apply(selector, Identifier(x), paired)
				)
			return method(sources[0], "map", [Arrow([x, i], body)])

		values = [self.this, self._ctx.expr(other)]
		return evaluate_once(self._ctx, values, [False, True], build)

	# --- Ordering and grouping --------------------------------------------------

	def order_by(self, key: Expression) -> ExprNode:
		return self._sorted()

	def order_by_descending(self, key: Expression) -> ExprNode:
		return self._sorted()

	def then_by(self, key: Expression) -> ExprNode:
		return self._sorted()

	def then_by_descending(self, key: Expression) -> ExprNode:
		return self._sorted()

	def _sorted(self) -> ExprNode:
		"""[...xs].sort(($a, $b) => ...) with one comparison per key.

		ThenBy calls walk back to their OrderBy so the whole chain becomes a
		single sort with a multi-key comparator. Sorting a copy keeps the
		source sequence unchanged.
		"""
		keys: list[tuple[Expression, bool]] = []
		parts = self._parts
		source = self._receiver
		while True:
			keys.insert(0, (parts.args[0].expression, parts.name.endswith("Descending")))
			source = cast(Expression, parts.receiver)
			inner = None if parts.name.startswith("OrderBy") else _ordering_call(source)
			if inner is None:
				break
			parts = inner
		items = self.this if source is self._receiver else self._source(source)
		with self._ctx.params("a", "b") as (a, b):
			tests = [
				_compare(
					self._apply(key, Identifier(a)),
					self._apply(key, Identifier(b)),
					descending,
					self._ctx,
				)
				for key, descending in keys
			]
		comparison = tests[0]
		for test in tests[1:]:
			comparison = Binary(comparison, "||", test)
		return method(Array([Spread(items)]), "sort", [Arrow([a, b], comparison)])

	def group_by(self, key: Expression) -> ExprNode:
		"""xs.GroupBy(k) -> arrays of items carrying a `key` property.

		Groups stay arrays so `g.Count()` and further queries keep working,
		and `g.Key` reads the attached key.
		"""
		grouped = global_call("Map.groupBy", [self.this, self._fn(key)])
		attach = global_call(
			"Object.assign", [Identifier("items"), Object([("key", Identifier("key"))])]
		)
		return method(Array([Spread(grouped)]), "map", [Arrow(["[key, items]"], attach)])


SEQUENCE_METHODS = public_methods(SequenceMethods) - {"this"}


class MaterializationMethods:
	"""Forcing a lazy sequence: arrays need no such step."""

	def __init__(self, this: ExprNode, ctx: ConversionContext) -> None:
		self.this = this
		self._ctx = ctx

	def to_list(self) -> ExprNode:
		return self.this

	def to_array(self) -> ExprNode:
		return self.this

	def as_enumerable(self) -> ExprNode:
		return self.this

	def to_hash_set(self) -> ExprNode:
		"""xs.ToHashSet() -> new Set(xs)"""
		return New(Identifier("Set"), [self.this])

	def to_dictionary(self, key: Expression, value: Expression | None = None) -> ExprNode:
		"""xs.ToDictionary(k, v) -> Object.fromEntries(xs.map(($x) => [k, v]))"""
		with self._ctx.params("x") as (x,):
			item = Identifier(x)
			entry_value = inline_lambda(value, [item], self._ctx) if value is not None else item
			entry = Array([inline_lambda(key, [item], self._ctx), entry_value])
		return global_call("Object.fromEntries", [method(self.this, "map", [Arrow([x], entry)])])


MATERIALIZATION_METHODS = public_methods(MaterializationMethods)


def _query_call(node: Invocation, ctx: ConversionContext, names: set[str]) -> CallParts | None:
	"""Parts of `node` when it is a sequence query named in `names`."""
	parts = call_parts(node)
	if parts is None or parts.receiver is None:
		return None
	if snake_name(parts.name) not in names:
		return None
	if ctx.semantic.is_linq_call(node):
		return parts
	if ctx.semantic.declaring_type(node) is not None:
		return None
	receiver_type = ctx.semantic.type_of(parts.receiver)
	if receiver_type is not None and not (
		is_sequence_type(receiver_type) or is_set_type(receiver_type) or is_map_type(receiver_type)
	):
		return None
	return parts


class LinqStrategy(ExpressionStrategy[Invocation]):
	"""Query operators, by declaring type when resolved and by name otherwise."""

	name: ClassVar[str] = "linq"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		parts = _query_call(node, ctx, SEQUENCE_METHODS)
		if parts is None:
			return False
		fn = getattr(SequenceMethods, snake_name(parts.name))
		# Unbound: the first parameter is `self`
		return accepts_arity(fn, len(parts.args) + 1)

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		parts = cast(CallParts, call_parts(node))
		methods = SequenceMethods(node, parts, cast(Expression, parts.receiver), ctx)
		return getattr(methods, snake_name(parts.name))(*parts.arg_exprs)


class MaterializationStrategy(ExpressionStrategy[Invocation]):
	"""`ToList()`, `ToArray()`, `AsEnumerable()` pass the receiver through."""

	name: ClassVar[str] = "materialization"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		parts = _query_call(node, ctx, MATERIALIZATION_METHODS)
		if parts is None:
			return False
		fn = getattr(MaterializationMethods, snake_name(parts.name))
		return accepts_arity(fn, len(parts.args) + 1)

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		parts = cast(CallParts, call_parts(node))
		methods = MaterializationMethods(ctx.expr(cast(Expression, parts.receiver)), ctx)
		return getattr(methods, snake_name(parts.name))(*parts.arg_exprs)
