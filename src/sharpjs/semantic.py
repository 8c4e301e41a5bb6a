"""
Semantic layer: symbols, a declaration-based binder and the query helper
used by conversion strategies.

The binder is deliberately shallow. It knows locals, parameters, lambda
parameters, the members of the classes declared in the compilation unit, a
table of well-known framework types, and the declaring type of well-known
calls (sequence queries, dictionary and list methods, service lookups).
Everything it cannot resolve is simply absent; strategies fall back to
textual checks in that case.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal, Protocol, TypeAlias

from sharpjs.naming import simple_type_name, split_generic
from sharpjs.syntax import (
	As,
	Assignment,
	Await,
	Binary,
	Block,
	Cast,
	CatchClause,
	ClassDeclaration,
	CompilationUnit,
	Conditional,
	ConstructorDeclaration,
	DeclarationExpression,
	DeclarationPattern,
	ElementAccess,
	EnumDeclaration,
	Expression,
	FieldDeclaration,
	For,
	ForEach,
	Identifier,
	Interpolation,
	Invocation,
	IsPattern,
	Lambda,
	Literal as LiteralNode,
	LocalDeclaration,
	LocalFunction,
	MemberAccess,
	MethodDeclaration,
	ObjectCreation,
	Parameter,
	Parenthesized,
	PropertyDeclaration,
	PropertyPattern,
	Statement,
	SwitchExpression,
	SwitchStatement,
	SyntaxNode,
	This,
	Try,
	Using,
	VarPattern,
	iter_children,
)

logger = logging.getLogger(__name__)

SymbolKind: TypeAlias = Literal[
	"local", "parameter", "field", "property", "method", "type", "namespace"
]


@dataclass(slots=True, frozen=True)
class Symbol:
	"""A resolved name.

	`type` is the declared type text (`List<User>`) for variables and
	members, or the return type for methods. `containing_type` is the fully
	qualified declaring type for members and the qualified name itself for
	types.
	"""

	name: str
	kind: SymbolKind
	type: str | None = None
	containing_type: str | None = None
	is_static: bool = False

	@property
	def is_member(self) -> bool:
		return self.kind in ("field", "property", "method")


class SemanticModel(Protocol):
	"""What the converter needs from a semantic model."""

	def symbol_of(self, node: SyntaxNode) -> Symbol | None: ...

	def type_of(self, node: SyntaxNode) -> str | None: ...


class SymbolTable:
	"""Semantic model backed by per-node tables, filled in by the Binder."""

	symbols: dict[SyntaxNode, Symbol]
	types: dict[SyntaxNode, str]

	def __init__(self) -> None:
		self.symbols = {}
		self.types = {}

	def symbol_of(self, node: SyntaxNode) -> Symbol | None:
		return self.symbols.get(node)

	def type_of(self, node: SyntaxNode) -> str | None:
		t = self.types.get(node)
		if t is not None:
			return t
		sym = self.symbols.get(node)
		if sym is not None and sym.kind != "method":
			return sym.type
		return None

	def record(
		self, node: SyntaxNode, symbol: Symbol | None = None, type_: str | None = None
	) -> None:
		if symbol is not None:
			self.symbols[node] = symbol
		if type_ is not None:
			self.types[node] = type_

	def __len__(self) -> int:
		return len(self.symbols)


# =============================================================================
# Well-known types
# =============================================================================

ENUMERABLE = "System.Linq.Enumerable"
DICTIONARY = "System.Collections.Generic.Dictionary"
LIST = "System.Collections.Generic.List"
HASHSET = "System.Collections.Generic.HashSet"
STRING = "System.String"
TASK = "System.Threading.Tasks.Task"
SERVICE_PROVIDER = "System.IServiceProvider"
TEXT_WRITER = "System.IO.TextWriter"
DATE_TYPES = ("System.DateTime", "System.DateTimeOffset")

KNOWN_TYPES: dict[str, str] = {
	"Console": "System.Console",
	"Math": "System.Math",
	"MathF": "System.MathF",
	"Task": TASK,
	"ValueTask": "System.Threading.Tasks.ValueTask",
	"Enumerable": ENUMERABLE,
	"Debug": "System.Diagnostics.Debug",
	"Trace": "System.Diagnostics.Trace",
	"string": STRING,
	"String": STRING,
	"int": "System.Int32",
	"Int32": "System.Int32",
	"long": "System.Int64",
	"double": "System.Double",
	"Double": "System.Double",
	"float": "System.Single",
	"decimal": "System.Decimal",
	"bool": "System.Boolean",
	"Guid": "System.Guid",
	"DateTime": "System.DateTime",
	"DateTimeOffset": "System.DateTimeOffset",
	"TimeSpan": "System.TimeSpan",
	"Convert": "System.Convert",
	"Array": "System.Array",
	"List": LIST,
	"Dictionary": DICTIONARY,
	"HashSet": HASHSET,
	"IServiceProvider": SERVICE_PROVIDER,
	"ServiceProviderServiceExtensions": "Microsoft.Extensions.DependencyInjection.ServiceProviderServiceExtensions",
}

SEQUENCE_TYPES: frozenset[str] = frozenset(
	{
		"IEnumerable",
		"IList",
		"ICollection",
		"IReadOnlyList",
		"IReadOnlyCollection",
		"IAsyncEnumerable",
		"List",
		"Collection",
		"ObservableCollection",
		"ReadOnlyCollection",
		"ImmutableArray",
		"ImmutableList",
		"IQueryable",
		"IOrderedEnumerable",
		"Array",
	}
)
MAP_TYPES: frozenset[str] = frozenset(
	{
		"Dictionary",
		"IDictionary",
		"IReadOnlyDictionary",
		"ConcurrentDictionary",
		"SortedDictionary",
		"ImmutableDictionary",
	}
)
SET_TYPES: frozenset[str] = frozenset({"HashSet", "ISet", "SortedSet", "IReadOnlySet"})
TASK_TYPES: frozenset[str] = frozenset({"Task", "ValueTask"})
SERVICE_PROVIDER_TYPES: frozenset[str] = frozenset({"IServiceProvider", "ServiceProvider"})

LINQ_METHODS: frozenset[str] = frozenset(
	{
		"Select",
		"Where",
		"SelectMany",
		"Any",
		"All",
		"First",
		"FirstOrDefault",
		"Last",
		"LastOrDefault",
		"Single",
		"SingleOrDefault",
		"ElementAt",
		"ElementAtOrDefault",
		"Count",
		"Sum",
		"Average",
		"Min",
		"Max",
		"Skip",
		"Take",
		"Distinct",
		"Contains",
		"Reverse",
		"Concat",
		"Aggregate",
		"OrderBy",
		"OrderByDescending",
		"ThenBy",
		"ThenByDescending",
		"GroupBy",
		"Except",
		"Intersect",
		"Union",
		"Zip",
		"OfType",
		"Cast",
		"ToList",
		"ToArray",
		"ToHashSet",
		"ToDictionary",
		"AsEnumerable",
	}
)

# Query operators whose result is itself a sequence
_SEQUENCE_RESULT: frozenset[str] = frozenset(
	{
		"Select",
		"Where",
		"SelectMany",
		"Skip",
		"Take",
		"Distinct",
		"Reverse",
		"Concat",
		"OrderBy",
		"OrderByDescending",
		"ThenBy",
		"ThenByDescending",
		"GroupBy",
		"Except",
		"Intersect",
		"Union",
		"Zip",
		"OfType",
		"Cast",
		"AsEnumerable",
	}
)
_ELEMENT_RESULT: frozenset[str] = frozenset(
	{
		"First",
		"FirstOrDefault",
		"Last",
		"LastOrDefault",
		"Single",
		"SingleOrDefault",
		"ElementAt",
		"ElementAtOrDefault",
	}
)

DICTIONARY_METHODS: frozenset[str] = frozenset(
	{"ContainsKey", "TryGetValue", "Add", "Remove", "Clear", "GetValueOrDefault", "ContainsValue"}
)
LIST_METHODS: frozenset[str] = frozenset(
	{"Add", "AddRange", "Insert", "Remove", "RemoveAt", "Clear", "IndexOf", "Contains", "Sort"}
)
SERVICE_METHODS: frozenset[str] = frozenset({"GetService", "GetRequiredService"})
MUTABLE_LISTS: frozenset[str] = frozenset(
	{"List", "IList", "ICollection", "Collection", "ObservableCollection"}
)

# Members every component state inherits from the runtime base classes
COMPONENT_BASES: dict[str, dict[str, Symbol]] = {
	"ComponentState": {
		"SetState": Symbol("SetState", "method", "void", "ComponentState"),
		"Component": Symbol("Component", "property", None, "ComponentState"),
		"OnMount": Symbol("OnMount", "method", "void", "ComponentState"),
		"OnUnmount": Symbol("OnUnmount", "method", "void", "ComponentState"),
		"Build": Symbol("Build", "method", "IComponent", "ComponentState"),
	},
	"StatefulComponent": {
		"CreateState": Symbol("CreateState", "method", "ComponentState", "StatefulComponent"),
	},
	"StatelessComponent": {
		"Build": Symbol("Build", "method", "IComponent", "StatelessComponent"),
	},
}


def _is_array(type_text: str) -> bool:
	return type_text.rstrip("?").endswith("[]")


def is_sequence_type(type_text: str | None) -> bool:
	if not type_text:
		return False
	return _is_array(type_text) or simple_type_name(type_text) in SEQUENCE_TYPES


def is_map_type(type_text: str | None) -> bool:
	return bool(type_text) and simple_type_name(type_text or "") in MAP_TYPES


def is_set_type(type_text: str | None) -> bool:
	return bool(type_text) and simple_type_name(type_text or "") in SET_TYPES


def is_list_type(type_text: str | None) -> bool:
	"""Sequence types that convert to JS arrays (everything but maps and sets)."""
	return is_sequence_type(type_text)


def is_task_type(type_text: str | None) -> bool:
	return bool(type_text) and simple_type_name(type_text or "") in TASK_TYPES


def is_string_type(type_text: str | None) -> bool:
	return bool(type_text) and simple_type_name(type_text or "") in ("string", "String")


def element_type(type_text: str | None) -> str | None:
	"""Element type of a sequence or map type, when it is written out."""
	if not type_text:
		return None
	text = type_text.rstrip("?")
	if text.endswith("[]"):
		return text[:-2]
	name, args = split_generic(text)
	base = name.rsplit(".", 1)[-1]
	if base in MAP_TYPES and len(args) == 2:
		return f"KeyValuePair<{args[0]}, {args[1]}>"
	if len(args) == 1 and (base in SEQUENCE_TYPES or base in SET_TYPES):
		return args[0]
	return None


def awaited_type(type_text: str | None) -> str | None:
	if not type_text:
		return None
	name, args = split_generic(type_text)
	if name.rsplit(".", 1)[-1] in TASK_TYPES:
		return args[0] if args else "void"
	return type_text


# =============================================================================
# Semantic helper
# =============================================================================


class SemanticHelper:
	"""Query layer over an optional semantic model.

	Every predicate answers False when the model cannot resolve the node, so
	callers combine them with textual checks.
	"""

	model: SemanticModel | None

	def __init__(self, model: SemanticModel | None = None) -> None:
		self.model = model

	def symbol(self, node: SyntaxNode) -> Symbol | None:
		if self.model is None:
			return None
		return self.model.symbol_of(node)

	def type_of(self, node: SyntaxNode) -> str | None:
		if self.model is None:
			return None
		return self.model.type_of(node)

	def declaring_type(self, node: SyntaxNode) -> str | None:
		sym = self.symbol(node)
		return sym.containing_type if sym is not None else None

	def _declared_in(self, node: SyntaxNode, *types: str) -> bool:
		declaring = self.declaring_type(node)
		return declaring is not None and declaring in types

	def is_console_call(self, node: Invocation) -> bool:
		return self._declared_in(
			node,
			"System.Console",
			"System.Diagnostics.Debug",
			"System.Diagnostics.Trace",
			TEXT_WRITER,
		)

	def is_linq_call(self, node: Invocation) -> bool:
		return self._declared_in(node, ENUMERABLE, "System.Linq.Queryable")

	def is_math_call(self, node: SyntaxNode) -> bool:
		return self._declared_in(node, "System.Math", "System.MathF")

	def is_task_call(self, node: SyntaxNode) -> bool:
		return self._declared_in(node, TASK, "System.Threading.Tasks.ValueTask")

	def is_dictionary_call(self, node: Invocation) -> bool:
		return self._declared_in(node, DICTIONARY)

	def is_list_call(self, node: Invocation) -> bool:
		return self._declared_in(node, LIST)

	def is_string_call(self, node: Invocation) -> bool:
		return self._declared_in(node, STRING)

	def is_service_call(self, node: Invocation) -> bool:
		declaring = self.declaring_type(node)
		return declaring is not None and (
			declaring == SERVICE_PROVIDER or declaring.endswith("ServiceProviderServiceExtensions")
		)

	def is_map_like(self, node: SyntaxNode) -> bool:
		return is_map_type(self.type_of(node))

	def is_sequence(self, node: SyntaxNode) -> bool:
		return is_sequence_type(self.type_of(node))

	def is_set_like(self, node: SyntaxNode) -> bool:
		return is_set_type(self.type_of(node))

	def is_string(self, node: SyntaxNode) -> bool:
		return is_string_type(self.type_of(node))

	def is_task_like(self, node: SyntaxNode) -> bool:
		return is_task_type(self.type_of(node))

	def is_type_name(self, node: SyntaxNode) -> bool:
		sym = self.symbol(node)
		return sym is not None and sym.kind == "type"


# =============================================================================
# Binder
# =============================================================================


class _Scope:
	__slots__: tuple[str, ...] = ("names",)

	def __init__(self) -> None:
		self.names: dict[str, Symbol] = {}


class Binder:
	"""Builds a SymbolTable for one class or for a free-standing snippet.

	Usage:
		table = Binder(unit).bind_class(cls)
		table = Binder().bind_statements(stmts, parameters)
	"""

	unit: CompilationUnit | None
	known_types: Mapping[str, str]

	def __init__(
		self,
		unit: CompilationUnit | None = None,
		known_types: Mapping[str, str] | None = None,
	) -> None:
		self.unit = unit
		self.known_types = dict(KNOWN_TYPES if known_types is None else known_types)
		self._classes: dict[str, ClassDeclaration] = {}
		self._enums: dict[str, EnumDeclaration] = {}
		if unit is not None:
			self._index_types(unit.types)
		self._table = SymbolTable()
		self._scopes: list[_Scope] = []
		self._members: dict[str, Symbol] = {}
		self._class_name: str | None = None

	def _index_types(self, types: Iterable[SyntaxNode]) -> None:
		for t in types:
			if isinstance(t, ClassDeclaration):
				self._classes[t.name] = t
				self._index_types(m for m in t.members if isinstance(m, (ClassDeclaration, EnumDeclaration)))
			elif isinstance(t, EnumDeclaration):
				self._enums[t.name] = t

	# -- Entry points -------------------------------------------------------------

	def bind_class(self, cls: ClassDeclaration) -> SymbolTable:
		"""Bind every member body of `cls`."""
		self._index_types([cls])
		self._class_name = cls.name
		self._members = self.members_of(cls)
		logger.debug("Binding %s (%d members)", cls.name, len(self._members))
		for member in cls.members:
			if isinstance(member, FieldDeclaration):
				for d in member.declarators:
					if d.initializer is not None:
						self._expr(d.initializer)
			elif isinstance(member, PropertyDeclaration):
				for part in (member.getter, member.setter):
					if part is not None:
						self._with_scope(part, (), extra={"value": member.type})
				if member.initializer is not None:
					self._expr(member.initializer)
			elif isinstance(member, (MethodDeclaration, ConstructorDeclaration)):
				if member.body is not None:
					self._with_scope(member.body, member.parameters)
		return self._table

	def bind_statements(
		self,
		statements: Sequence[Statement],
		parameters: Sequence[Parameter] = (),
		cls: ClassDeclaration | None = None,
	) -> SymbolTable:
		"""Bind a free-standing statement list, optionally inside `cls`."""
		if cls is not None:
			self._index_types([cls])
			self._class_name = cls.name
			self._members = self.members_of(cls)
		self._push()
		self._declare_params(parameters)
		self._statements(statements)
		self._pop()
		return self._table

	def bind_expression(self, expression: Expression) -> SymbolTable:
		self._push()
		self._expr(expression)
		self._pop()
		return self._table

	def members_of(self, cls: ClassDeclaration) -> dict[str, Symbol]:
		"""Own members of `cls` plus the members inherited from known bases."""
		members: dict[str, Symbol] = {}
		for base in cls.base_types:
			base_name = base.base_name
			inherited = COMPONENT_BASES.get(base_name)
			if inherited:
				for name, sym in inherited.items():
					if name == "Component" and base.args:
						sym = Symbol(name, "property", str(base.args[0]), sym.containing_type)
					members[name] = sym
			elif base_name in self._classes and base_name != cls.name:
				members.update(self.members_of(self._classes[base_name]))
		for member in cls.members:
			for sym in _member_symbols(member, cls.name):
				members[sym.name] = sym
		for param in cls.primary_parameters:
			members.setdefault(
				param.name,
				Symbol(param.name, "property", str(param.type) if param.type else None, cls.name),
			)
		return members

	# -- Scopes --------------------------------------------------------------------

	def _push(self) -> None:
		self._scopes.append(_Scope())

	def _pop(self) -> None:
		self._scopes.pop()

	def _declare(self, name: str, kind: SymbolKind, type_: str | None) -> Symbol:
		sym = Symbol(name, kind, type_)
		self._scopes[-1].names[name] = sym
		return sym

	def _declare_params(self, parameters: Sequence[Parameter]) -> None:
		for p in parameters:
			self._declare(p.name, "parameter", str(p.type) if p.type else None)
			if p.default is not None:
				self._expr(p.default)

	def _with_scope(
		self,
		node: SyntaxNode,
		parameters: Sequence[Parameter],
		extra: Mapping[str, object] | None = None,
	) -> None:
		self._push()
		self._declare_params(parameters)
		for name, t in (extra or {}).items():
			self._declare(name, "parameter", str(t) if t is not None else None)
		self._body(node)
		self._pop()

	def _lookup(self, name: str) -> Symbol | None:
		for scope in reversed(self._scopes):
			sym = scope.names.get(name)
			if sym is not None:
				return sym
		return None

	def _resolve_name(self, name: str) -> Symbol | None:
		sym = self._lookup(name)
		if sym is not None:
			return sym
		sym = self._members.get(name)
		if sym is not None:
			return sym
		if name in self._classes or name in self._enums:
			return Symbol(name, "type", name, name)
		qualified = self.known_types.get(name)
		if qualified is not None:
			return Symbol(name, "type", qualified, qualified)
		return None

	# -- Statements ---------------------------------------------------------------

	def _body(self, node: SyntaxNode) -> None:
		if isinstance(node, Block):
			self._statements(node.statements)
		elif isinstance(node, Expression):
			self._expr(node)
		elif isinstance(node, Statement):
			self._stmt(node)

	def _statements(self, statements: Sequence[Statement]) -> None:
		# Local functions are visible throughout their block
		for s in statements:
			if isinstance(s, LocalFunction):
				self._declare(s.name, "local", str(s.return_type) if s.return_type else None)
		for s in statements:
			self._stmt(s)

	def _stmt(self, node: Statement) -> None:
		if isinstance(node, Block):
			self._push()
			self._statements(node.statements)
			self._pop()
		elif isinstance(node, LocalDeclaration):
			self._local_declaration(node)
		elif isinstance(node, For):
			self._push()
			if node.declaration is not None:
				self._local_declaration(node.declaration)
			for e in node.initializers:
				self._expr(e)
			if node.condition is not None:
				self._expr(node.condition)
			for e in node.incrementors:
				self._expr(e)
			self._stmt(node.body)
			self._pop()
		elif isinstance(node, ForEach):
			self._expr(node.expression)
			source_type = self._table.type_of(node.expression)
			elem = str(node.type) if node.type is not None else element_type(source_type)
			self._push()
			if isinstance(node.variable, str):
				self._declare(node.variable, "local", elem)
			else:
				_, parts = split_generic(elem or "")
				for i, name in enumerate(node.variable):
					self._declare(name, "local", parts[i] if i < len(parts) else None)
			self._stmt(node.body)
			self._pop()
		elif isinstance(node, Using):
			self._push()
			if node.declaration is not None:
				self._local_declaration(node.declaration)
			if node.expression is not None:
				self._expr(node.expression)
			self._stmt(node.body)
			self._pop()
		elif isinstance(node, Try):
			self._stmt(node.block)
			for c in node.catches:
				self._catch(c)
			if node.finally_ is not None:
				self._stmt(node.finally_)
		elif isinstance(node, SwitchStatement):
			self._expr(node.governing)
			self._push()
			for section in node.sections:
				for label in section.labels:
					if label.pattern is not None:
						self._pattern(label.pattern, self._table.type_of(node.governing))
					if label.guard is not None:
						self._expr(label.guard)
				self._statements(section.statements)
			self._pop()
		elif isinstance(node, LocalFunction):
			self._push()
			self._declare_params(node.parameters)
			self._body(node.body)
			self._pop()
		else:
			self._children(node)

	def _catch(self, clause: CatchClause) -> None:
		self._push()
		if clause.name:
			self._declare(clause.name, "local", str(clause.type) if clause.type else "Exception")
		if clause.filter is not None:
			self._expr(clause.filter)
		self._stmt(clause.block)
		self._pop()

	def _local_declaration(self, node: LocalDeclaration) -> None:
		declared = str(node.type) if node.type is not None else None
		for d in node.declarators:
			inferred = declared
			if d.initializer is not None:
				self._expr(d.initializer, expected=declared)
				if inferred is None:
					inferred = self._table.type_of(d.initializer)
			sym = self._declare(d.name, "local", inferred)
			self._table.record(d, sym)

	def _children(self, node: SyntaxNode) -> None:
		for child in iter_children(node):
			if isinstance(child, Statement):
				self._stmt(child)
			elif isinstance(child, Expression):
				self._expr(child)
			else:
				self._children(child)

	# -- Expressions ------------------------------------------------------------------

	def _expr(self, node: SyntaxNode, expected: str | None = None) -> None:
		table = self._table
		if isinstance(node, Identifier):
			sym = self._resolve_name(node.name)
			if sym is not None:
				table.record(node, sym)
		elif isinstance(node, This):
			if self._class_name:
				table.record(node, type_=self._class_name)
		elif isinstance(node, LiteralNode):
			t = {"string": "string", "char": "char", "bool": "bool"}.get(node.literal_kind)
			if node.literal_kind == "number":
				t = "double" if "." in str(node.value) else "int"
			if t is not None:
				table.record(node, type_=t)
		elif isinstance(node, MemberAccess):
			self._member_access(node)
		elif isinstance(node, Invocation):
			self._invocation(node)
		elif isinstance(node, Lambda):
			self._lambda(node, None)
		elif isinstance(node, ObjectCreation):
			for child in iter_children(node):
				self._expr(child)
			t = str(node.type) if node.type is not None else expected
			if t is not None:
				table.record(node, type_=t)
		elif isinstance(node, (Cast, As)):
			self._expr(node.expression)
			table.record(node, type_=str(node.type))
		elif isinstance(node, Await):
			self._expr(node.expression)
			t = awaited_type(table.type_of(node.expression))
			if t is not None:
				table.record(node, type_=t)
		elif isinstance(node, Parenthesized):
			self._expr(node.expression)
			t = table.type_of(node.expression)
			if t is not None:
				table.record(node, type_=t)
		elif isinstance(node, Conditional):
			self._children(node)
			t = table.type_of(node.when_true) or table.type_of(node.when_false)
			if t is not None:
				table.record(node, type_=t)
		elif isinstance(node, Binary):
			self._children(node)
			if node.op in ("==", "!=", "<", ">", "<=", ">=", "&&", "||"):
				table.record(node, type_="bool")
			elif node.op == "??":
				t = table.type_of(node.left) or table.type_of(node.right)
				if t is not None:
					table.record(node, type_=t.rstrip("?"))
			elif node.op == "+" and (
				is_string_type(table.type_of(node.left)) or is_string_type(table.type_of(node.right))
			):
				table.record(node, type_="string")
		elif isinstance(node, Assignment):
			self._expr(node.target)
			self._expr(node.value, expected=table.type_of(node.target))
		elif isinstance(node, DeclarationExpression):
			sym = self._declare(node.name, "local", str(node.type) if node.type else None)
			table.record(node, sym)
		elif isinstance(node, IsPattern):
			self._expr(node.expression)
			self._pattern(node.pattern, table.type_of(node.expression))
			table.record(node, type_="bool")
		elif isinstance(node, SwitchExpression):
			self._expr(node.governing)
			governing_type = table.type_of(node.governing)
			for arm in node.arms:
				self._push()
				self._pattern(arm.pattern, governing_type)
				if arm.guard is not None:
					self._expr(arm.guard)
				self._expr(arm.expression)
				self._pop()
		elif isinstance(node, ElementAccess):
			self._children(node)
			target_type = table.type_of(node.target)
			if is_map_type(target_type):
				_, args = split_generic(target_type or "")
				if len(args) == 2:
					table.record(node, type_=args[1])
			else:
				elem = element_type(target_type)
				if elem is not None:
					table.record(node, type_=elem)
		elif isinstance(node, Interpolation):
			self._expr(node.expression)
		elif isinstance(node, (Statement,)):
			self._stmt(node)
		else:
			self._children(node)

	def _pattern(self, pattern: SyntaxNode, subject_type: str | None) -> None:
		if isinstance(pattern, DeclarationPattern):
			self._declare(pattern.name, "local", str(pattern.type))
			return
		if isinstance(pattern, VarPattern):
			self._declare(pattern.name, "local", subject_type)
			return
		if isinstance(pattern, PropertyPattern) and pattern.designation:
			t = str(pattern.type) if pattern.type is not None else subject_type
			self._declare(pattern.designation, "local", t)
		for child in iter_children(pattern):
			if isinstance(child, Expression):
				self._expr(child)
			else:
				self._pattern(child, None)

	def _lambda(self, node: Lambda, param_types: Sequence[str | None] | None) -> None:
		self._push()
		for i, p in enumerate(node.parameters):
			t = str(p.type) if p.type is not None else None
			if t is None and param_types is not None and i < len(param_types):
				t = param_types[i]
			self._declare(p.name, "parameter", t)
		self._body(node.body)
		self._pop()

	def _member_access(self, node: MemberAccess) -> None:
		table = self._table
		target = node.target
		self._expr(target)
		target_sym = table.symbol_of(target)
		if target_sym is not None and target_sym.kind == "type":
			qualified = target_sym.containing_type or target_sym.name
			# Console.Error / Console.Out
			if qualified == "System.Console" and node.name in ("Error", "Out"):
				table.record(node, Symbol(node.name, "property", TEXT_WRITER, qualified, True))
				return
			member = self._class_member(target_sym.name, node.name)
			if member is not None:
				table.record(node, member)
			elif qualified in DATE_TYPES and node.name in ("Now", "UtcNow", "Today"):
				table.record(node, Symbol(node.name, "property", simple_type_name(qualified), qualified, True))
			else:
				table.record(node, Symbol(node.name, "property", None, qualified, True))
			return
		if target_sym is None and isinstance(target, Identifier) and target.name[:1].isupper():
			# Unresolved capitalized receiver: treat as a type name
			table.record(target, Symbol(target.name, "type", target.name, target.name))
			table.record(node, Symbol(node.name, "property", None, target.name, True))
			return
		target_type = table.type_of(target)
		if target_type is None:
			return
		if is_map_type(target_type) and node.name in ("Keys", "Values"):
			_, args = split_generic(target_type)
			idx = 0 if node.name == "Keys" else 1
			elem = args[idx] if len(args) == 2 else None
			t = f"IEnumerable<{elem}>" if elem else "IEnumerable"
			table.record(node, Symbol(node.name, "property", t, DICTIONARY))
			return
		if node.name in ("Count", "Length") and (
			is_sequence_type(target_type)
			or is_map_type(target_type)
			or is_set_type(target_type)
			or is_string_type(target_type)
		):
			table.record(node, Symbol(node.name, "property", "int", _container_of(target_type)))
			return
		member = self._class_member(simple_type_name(target_type), node.name)
		if member is not None:
			table.record(node, member)

	def _class_member(self, type_name: str, member: str) -> Symbol | None:
		cls = self._classes.get(type_name)
		if cls is None:
			return None
		if cls.name == self._class_name:
			return self._members.get(member)
		for m in cls.members:
			for sym in _member_symbols(m, cls.name):
				if sym.name == member:
					return sym
		return None

	def _invocation(self, node: Invocation) -> None:
		table = self._table
		target = node.target
		symbol: Symbol | None = None
		result_type: str | None = None
		lambda_types: Sequence[str | None] | None = None

		if isinstance(target, MemberAccess):
			self._member_access(target)
			receiver = target.target
			name = target.name
			receiver_sym = table.symbol_of(receiver)
			receiver_type = table.type_of(receiver)
			if receiver_sym is not None and receiver_sym.kind == "type":
				qualified = receiver_sym.containing_type or receiver_sym.name
				member = self._class_member(receiver_sym.name, name)
				symbol = member or Symbol(name, "method", None, qualified, True)
				if qualified == TASK and name in ("FromResult", "Run", "WhenAll", "WhenAny", "Delay"):
					result_type = "Task"
				elif qualified == STRING:
					result_type = "bool" if name.startswith("IsNullOrEmpty") or name.startswith("IsNullOrWhiteSpace") else "string"
				elif member is not None:
					result_type = member.type
			else:
				member_sym = table.symbol_of(target)
				if member_sym is not None and member_sym.kind == "method":
					symbol = member_sym
					result_type = member_sym.type
				elif receiver_type is not None:
					symbol, result_type, lambda_types = self._library_call(name, receiver_type)
				elif name in SERVICE_METHODS:
					symbol = Symbol(name, "method", None, SERVICE_PROVIDER)
		elif isinstance(target, Identifier):
			sym = self._resolve_name(target.name)
			if sym is not None:
				table.record(target, sym)
				symbol = sym
				result_type = sym.type
		else:
			self._expr(target)

		if symbol is not None:
			table.record(node, symbol)
		for arg in node.arguments:
			expr = arg.expression
			if isinstance(expr, Lambda):
				self._lambda(expr, lambda_types)
			else:
				self._expr(expr)
		if result_type is not None:
			table.record(node, type_=result_type)

	def _library_call(
		self, name: str, receiver_type: str
	) -> tuple[Symbol | None, str | None, Sequence[str | None] | None]:
		"""Declaring type, result type and lambda parameter types of a call on a
		receiver of a well-known library type."""
		elem = element_type(receiver_type)
		if is_map_type(receiver_type):
			if name in DICTIONARY_METHODS:
				result = "bool" if name in ("ContainsKey", "TryGetValue", "Remove", "ContainsValue") else None
				if name == "GetValueOrDefault":
					_, args = split_generic(receiver_type)
					result = args[1] if len(args) == 2 else None
				return Symbol(name, "method", result, DICTIONARY), result, None
			if name in LINQ_METHODS:
				return self._linq_symbol(name, elem), _linq_result(name, elem), (elem,)
		if is_sequence_type(receiver_type) or is_set_type(receiver_type):
			if name in LIST_METHODS and name != "Contains" and simple_type_name(receiver_type) in MUTABLE_LISTS:
				return Symbol(name, "method", None, LIST), None, None
			if is_set_type(receiver_type) and name in ("Add", "Remove", "Contains", "Clear"):
				return Symbol(name, "method", None, HASHSET), None, None
			if name in LINQ_METHODS:
				return self._linq_symbol(name, elem), _linq_result(name, elem), (elem, elem)
		if is_string_type(receiver_type):
			result = "bool" if name in ("StartsWith", "EndsWith", "Contains") else "string"
			if name in ("IndexOf", "LastIndexOf"):
				result = "int"
			if name == "Split":
				result = "string[]"
			return Symbol(name, "method", result, STRING), result, None
		if simple_type_name(receiver_type) in SERVICE_PROVIDER_TYPES and name in SERVICE_METHODS:
			return Symbol(name, "method", None, SERVICE_PROVIDER), None, None
		if receiver_type == TEXT_WRITER and name in ("WriteLine", "Write"):
			return Symbol(name, "method", None, TEXT_WRITER), None, None
		if is_task_type(receiver_type) and name == "ConfigureAwait":
			return Symbol(name, "method", receiver_type, TASK), receiver_type, None
		if name == "ToString":
			return Symbol(name, "method", "string", "System.Object"), "string", None
		return None, None, None

	def _linq_symbol(self, name: str, elem: str | None) -> Symbol:
		return Symbol(name, "method", _linq_result(name, elem), ENUMERABLE, True)


def _linq_result(name: str, elem: str | None) -> str | None:
	if name in _SEQUENCE_RESULT:
		if name in ("Select", "SelectMany", "GroupBy", "Zip", "OfType"):
			return "IEnumerable"
		return f"IEnumerable<{elem}>" if elem else "IEnumerable"
	if name in _ELEMENT_RESULT:
		return elem
	if name == "ToList":
		return f"List<{elem}>" if elem else "List"
	if name == "ToArray":
		return f"{elem}[]" if elem else "Array"
	if name == "ToHashSet":
		return f"HashSet<{elem}>" if elem else "HashSet"
	if name == "ToDictionary":
		return "Dictionary"
	if name in ("Any", "All", "Contains"):
		return "bool"
	if name == "Count":
		return "int"
	return None


def _container_of(type_text: str) -> str:
	if is_map_type(type_text):
		return DICTIONARY
	if is_set_type(type_text):
		return HASHSET
	if is_string_type(type_text):
		return STRING
	return LIST


def _member_symbols(member: SyntaxNode, class_name: str) -> list[Symbol]:
	if isinstance(member, FieldDeclaration):
		is_static = "static" in member.modifiers or "const" in member.modifiers
		return [
			Symbol(d.name, "field", str(member.type), class_name, is_static)
			for d in member.declarators
		]
	if isinstance(member, PropertyDeclaration):
		return [
			Symbol(member.name, "property", str(member.type), class_name, "static" in member.modifiers)
		]
	if isinstance(member, MethodDeclaration):
		return [
			Symbol(
				member.name, "method", str(member.return_type), class_name, "static" in member.modifiers
			)
		]
	if isinstance(member, (ClassDeclaration, EnumDeclaration)):
		return [Symbol(member.name, "type", member.name, member.name)]
	return []
