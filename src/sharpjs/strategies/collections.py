"""
Dictionary, list and set members -> plain objects, arrays and `Set`.

Dictionaries convert to object literals, so lookups become subscripts and
membership becomes `in`. Lists are arrays. `HashSet<T>` becomes `Set`.
"""

from __future__ import annotations

from typing import ClassVar, cast, override

from sharpjs.context import ConversionContext
from sharpjs.naming import simple_type_name
from sharpjs.nodes import (
	UNDEFINED,
	Arrow,
	Assign,
	Binary,
	Call,
	ExprNode,
	Identifier,
	Literal,
	Member,
	Number,
	Spread,
	Subscript,
	Unary,
)
from sharpjs.registry import STRUCTURAL, ExpressionStrategy
from sharpjs.semantic import (
	DICTIONARY,
	HASHSET,
	MUTABLE_LISTS,
	is_map_type,
	is_set_type,
)
from sharpjs.strategies.helpers import (
	CallParts,
	accepts_arity,
	call_parts,
	global_call,
	method,
	public_methods,
	snake_name,
)
from sharpjs.syntax import Expression, Invocation, MemberAccess


class _Methods:
	"""Receiver and context shared by the method tables below."""

	def __init__(self, this: ExprNode, ctx: ConversionContext) -> None:
		self._this = this
		self._ctx = ctx

	def _expr(self, node: Expression) -> ExprNode:
		return self._ctx.expr(node)


def _dispatch(
	table: type[_Methods], names: set[str], parts: CallParts | None
) -> str | None:
	"""Method of `table` handling `parts`, when one exists for its arity."""
	if parts is None or parts.receiver is None:
		return None
	name = snake_name(parts.name)
	if name not in names:
		return None
	if not accepts_arity(getattr(table, name), len(parts.args) + 1):
		return None
	return name


# =============================================================================
# Dictionaries
# =============================================================================


class DictionaryMethods(_Methods):
	def contains_key(self, key: Expression) -> ExprNode:
		"""d.ContainsKey(k) -> k in d"""
		return Binary(self._expr(key), "in", self._this)

	def try_get_value(self, key: Expression, out: Expression) -> ExprNode:
		"""d.TryGetValue(k, out v) -> (v = d[k]) !== undefined"""
		lookup = Subscript(self._this, self._expr(key))
		return Binary(Assign(self._expr(out), "=", lookup), "!==", UNDEFINED)

	def get_value_or_default(self, key: Expression, default: Expression | None = None) -> ExprNode:
		"""d.GetValueOrDefault(k, v) -> d[k] ?? v"""
		fallback = self._expr(default) if default is not None else Literal(None)
		return Binary(Subscript(self._this, self._expr(key)), "??", fallback)

	def add(self, key: Expression, value: Expression) -> ExprNode:
		"""d.Add(k, v) -> d[k] = v"""
		return Assign(Subscript(self._this, self._expr(key)), "=", self._expr(value))

	def remove(self, key: Expression) -> ExprNode:
		"""d.Remove(k) -> delete d[k]"""
		return Unary("delete", Subscript(self._this, self._expr(key)))

	def contains_value(self, value: Expression) -> ExprNode:
		"""d.ContainsValue(v) -> Object.values(d).includes(v)"""
		return method(global_call("Object.values", [self._this]), "includes", [self._expr(value)])

	def clear(self) -> ExprNode:
		"""d.Clear() -> Object.keys(d).forEach(($k) => delete d[$k])"""
		with self._ctx.params("k") as (k,):
			remove = Unary("delete", Subscript(self._this, Identifier(k)))
		return method(global_call("Object.keys", [self._this]), "forEach", [Arrow([k], remove)])


DICTIONARY_METHODS = public_methods(DictionaryMethods)
# Names no other receiver shape uses: matched even without type information
DICTIONARY_ONLY = frozenset({"ContainsKey", "TryGetValue", "GetValueOrDefault", "ContainsValue"})


def _dictionary_method(node: Invocation, ctx: ConversionContext) -> str | None:
	parts = call_parts(node)
	name = _dispatch(DictionaryMethods, DICTIONARY_METHODS, parts)
	if name is None or parts is None or parts.receiver is None:
		return None
	if ctx.semantic.is_dictionary_call(node):
		return name
	if ctx.semantic.declaring_type(node) is not None:
		return None
	receiver_type = ctx.semantic.type_of(parts.receiver)
	if receiver_type is not None:
		return name if is_map_type(receiver_type) else None
	if parts.name in DICTIONARY_ONLY or (parts.name == "Add" and len(parts.args) == 2):
		return name
	return None


class DictionaryStrategy(ExpressionStrategy[Invocation]):
	"""Dictionary calls; `ContainsKey(k)` -> `k in d`."""

	name: ClassVar[str] = "dictionary"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		return _dictionary_method(node, ctx) is not None

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		name = cast(str, _dictionary_method(node, ctx))
		parts = cast(CallParts, call_parts(node))
		methods = DictionaryMethods(ctx.expr(cast(Expression, parts.receiver)), ctx)
		return getattr(methods, name)(*parts.arg_exprs)


class MapMemberStrategy(ExpressionStrategy[MemberAccess]):
	"""`d.Keys` / `d.Values` / `d.Count` on dictionaries, `s.Count` on sets."""

	name: ClassVar[str] = "map-member"
	node_types: ClassVar[tuple[type, ...]] = (MemberAccess,)

	@override
	def matches(self, node: MemberAccess, ctx: ConversionContext) -> bool:
		if node.name not in ("Keys", "Values", "Count"):
			return False
		receiver_type = ctx.semantic.type_of(node.target)
		if is_map_type(receiver_type):
			return True
		if is_set_type(receiver_type):
			return node.name == "Count"
		declaring = ctx.semantic.declaring_type(node)
		return declaring == DICTIONARY or (
			declaring is None and receiver_type is None and node.name in ("Keys", "Values")
		)

	@override
	def convert(self, node: MemberAccess, ctx: ConversionContext) -> ExprNode:
		obj = ctx.expr(node.target)
		if is_set_type(ctx.semantic.type_of(node.target)):
			return Member(obj, "size", node.conditional)
		if node.name == "Keys":
			return global_call("Object.keys", [obj])
		if node.name == "Values":
			return global_call("Object.values", [obj])
		return Member(global_call("Object.keys", [obj]), "length")


class KeyValuePairStrategy(ExpressionStrategy[MemberAccess]):
	"""`kv.Key` / `kv.Value` -> `kv[0]` / `kv[1]` on `Object.entries` pairs."""

	name: ClassVar[str] = "key-value-pair"
	node_types: ClassVar[tuple[type, ...]] = (MemberAccess,)

	@override
	def matches(self, node: MemberAccess, ctx: ConversionContext) -> bool:
		if node.name not in ("Key", "Value"):
			return False
		receiver_type = ctx.semantic.type_of(node.target)
		return receiver_type is not None and simple_type_name(receiver_type) == "KeyValuePair"

	@override
	def convert(self, node: MemberAccess, ctx: ConversionContext) -> ExprNode:
		index = Number("0" if node.name == "Key" else "1")
		return Subscript(ctx.expr(node.target), index, node.conditional)


# =============================================================================
# Lists
# =============================================================================


class ListMethods(_Methods):
	def add(self, item: Expression) -> ExprNode:
		"""l.Add(x) -> l.push(x)"""
		return method(self._this, "push", [self._expr(item)])

	def add_range(self, items: Expression) -> ExprNode:
		"""l.AddRange(xs) -> l.push(...xs)"""
		return method(self._this, "push", [Spread(self._expr(items))])

	def insert(self, index: Expression, item: Expression) -> ExprNode:
		"""l.Insert(i, x) -> l.splice(i, 0, x)"""
		return method(self._this, "splice", [self._expr(index), Number("0"), self._expr(item)])

	def remove_at(self, index: Expression) -> ExprNode:
		"""l.RemoveAt(i) -> l.splice(i, 1)"""
		return method(self._this, "splice", [self._expr(index), Number("1")])

	def remove(self, item: Expression) -> ExprNode:
		"""l.Remove(x) -> (($i) => $i >= 0 && l.splice($i, 1).length > 0)(l.indexOf(x))"""
		found = method(self._this, "indexOf", [self._expr(item)])
		with self._ctx.params("i") as (i,):
			index = Identifier(i)
			removed = Member(method(self._this, "splice", [index, Number("1")]), "length")
			body = Binary(Binary(index, ">=", Number("0")), "&&", Binary(removed, ">", Number("0")))
		return Call(Arrow([i], body), [found])

	def clear(self) -> ExprNode:
		"""l.Clear() -> l.length = 0"""
		return Assign(Member(self._this, "length"), "=", Number("0"))


LIST_METHODS = public_methods(ListMethods)
LIST_ONLY = frozenset({"AddRange", "RemoveAt"})


def _list_method(node: Invocation, ctx: ConversionContext, *, loose: bool) -> str | None:
	"""List method for `node`. `loose` also accepts an untyped `x.Add(item)`."""
	parts = call_parts(node)
	name = _dispatch(ListMethods, LIST_METHODS, parts)
	if name is None or parts is None or parts.receiver is None:
		return None
	if ctx.semantic.is_list_call(node):
		return name
	if ctx.semantic.declaring_type(node) is not None:
		return None
	receiver_type = ctx.semantic.type_of(parts.receiver)
	if receiver_type is not None:
		if receiver_type.endswith("[]") or simple_type_name(receiver_type) in MUTABLE_LISTS:
			return name
		return None
	if parts.name in LIST_ONLY:
		return name
	if loose and parts.name == "Add" and len(parts.args) == 1:
		return name
	return None


class _ListStrategyBase(ExpressionStrategy[Invocation]):
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)
	loose: ClassVar[bool] = False

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		return _list_method(node, ctx, loose=self.loose) is not None

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		name = cast(str, _list_method(node, ctx, loose=self.loose))
		parts = cast(CallParts, call_parts(node))
		methods = ListMethods(ctx.expr(cast(Expression, parts.receiver)), ctx)
		return getattr(methods, name)(*parts.arg_exprs)


class ListStrategy(_ListStrategyBase):
	"""`List<T>` mutation: `Add` -> `push`, `RemoveAt` -> `splice`."""

	name: ClassVar[str] = "list"


class UntypedAddStrategy(_ListStrategyBase):
	"""`x.Add(item)` on an unresolved receiver is most often a list."""

	name: ClassVar[str] = "untyped-add"
	priority: ClassVar[int] = STRUCTURAL
	loose: ClassVar[bool] = True


# =============================================================================
# Sets
# =============================================================================

SET_METHODS: dict[str, str] = {
	"Add": "add",
	"Remove": "delete",
	"Contains": "has",
	"Clear": "clear",
}


class SetStrategy(ExpressionStrategy[Invocation]):
	"""`HashSet<T>` -> `Set`: `Contains` -> `has`, `Remove` -> `delete`."""

	name: ClassVar[str] = "set"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		parts = call_parts(node)
		if parts is None or parts.receiver is None or parts.name not in SET_METHODS:
			return False
		declaring = ctx.semantic.declaring_type(node)
		if declaring is not None:
			return declaring == HASHSET
		return is_set_type(ctx.semantic.type_of(parts.receiver))

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		parts = cast(CallParts, call_parts(node))
		args = ctx.converter.arguments(node.arguments, ctx)
		receiver = ctx.expr(cast(Expression, parts.receiver))
		return method(receiver, SET_METHODS[parts.name], args, parts.conditional)

