"""Component model extracted from a parsed compilation unit.

A component is a class deriving from `StatefulComponent` or
`StatelessComponent`. Stateful components pair with a state class deriving
from `ComponentState<T>`; the state class holds the fields and methods that
end up in the emitted JavaScript state class.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sharpjs.syntax import (
	Assignment,
	Attribute,
	Block,
	ClassDeclaration,
	CompilationUnit,
	ConstructorDeclaration,
	EnumDeclaration,
	Expression,
	FieldDeclaration,
	Identifier,
	Literal,
	MethodDeclaration,
	ObjectCreation,
	PropertyDeclaration,
	Return,
	TypeRef,
)

logger = logging.getLogger(__name__)

STATEFUL_BASE = "StatefulComponent"
STATELESS_BASE = "StatelessComponent"
STATE_BASE = "ComponentState"

# Members the emitted state class provides itself
RUNTIME_MEMBERS = frozenset({"CreateState", "SetState"})


@dataclass(slots=True)
class PageRoute:
	"""`[Page("/route", Title = "...")]`"""

	route: str
	title: str | None = None


@dataclass(slots=True)
class ServerAction:
	"""A `[ServerAction]` method, called remotely instead of converted."""

	name: str
	action_id: str
	parameters: tuple[str, ...]
	return_type: str
	is_async: bool


@dataclass(slots=True)
class StateField:
	name: str
	type: TypeRef
	initializer: Expression | None = None
	is_static: bool = False


@dataclass(slots=True)
class ComponentDefinition:
	"""Everything the emitter needs to know about one component class."""

	name: str
	"""Class name of the component."""

	declaration: ClassDeclaration
	"""The component class itself."""

	namespace: str | None = None
	"""Namespace the component is declared in."""

	is_stateful: bool = False
	"""Whether the component derives from `StatefulComponent`."""

	state: ClassDeclaration | None = None
	"""State class of a stateful component, when found in the same unit."""

	page_routes: list[PageRoute] = field(default_factory=list)
	"""Routes from `[Page]` / `[Route]` attributes."""

	server_actions: list[ServerAction] = field(default_factory=list)
	"""Methods marked `[ServerAction]` on the component class."""

	source_path: str | None = None
	"""Path of the `.cs` file, for diagnostics."""

	@property
	def state_class_name(self) -> str | None:
		if not self.is_stateful:
			return None
		return self.state.name if self.state is not None else f"{self.name}State"

	@property
	def body_class(self) -> ClassDeclaration:
		"""Class whose members become JavaScript members: the state class
		for stateful components, the component itself otherwise."""
		if self.is_stateful and self.state is not None:
			return self.state
		return self.declaration

	@property
	def fields(self) -> list[StateField]:
		return fields_of(self.body_class)

	@property
	def properties(self) -> list[PropertyDeclaration]:
		return properties_of(self.body_class)

	@property
	def methods(self) -> list[MethodDeclaration]:
		"""Converted methods of the body class."""
		return methods_of(self.body_class)


@dataclass(slots=True)
class ModuleDefinition:
	"""Components and enums of one source file."""

	unit: CompilationUnit
	components: list[ComponentDefinition] = field(default_factory=list)
	enums: list[EnumDeclaration] = field(default_factory=list)
	source_path: str | None = None


# =============================================================================
# Class members
# =============================================================================


def fields_of(cls: ClassDeclaration) -> list[StateField]:
	"""Fields of `cls` in declaration order; `const` fields count as static."""
	out: list[StateField] = []
	for member in cls.members:
		if isinstance(member, FieldDeclaration):
			is_static = "static" in member.modifiers or "const" in member.modifiers
			for d in member.declarators:
				out.append(StateField(d.name, member.type, d.initializer, is_static))
	return out


def properties_of(cls: ClassDeclaration) -> list[PropertyDeclaration]:
	return [m for m in cls.members if isinstance(m, PropertyDeclaration)]


def methods_of(cls: ClassDeclaration) -> list[MethodDeclaration]:
	"""Methods with a body, minus runtime plumbing and server actions."""
	return [
		m
		for m in cls.members
		if isinstance(m, MethodDeclaration)
		and m.body is not None
		and m.name not in RUNTIME_MEMBERS
		and not _is_server_action(m)
	]


def constructor_of(cls: ClassDeclaration) -> ConstructorDeclaration | None:
	for member in cls.members:
		if isinstance(member, ConstructorDeclaration) and "static" not in member.modifiers:
			return member
	return None


# =============================================================================
# Extraction
# =============================================================================


def _base(cls: ClassDeclaration) -> TypeRef | None:
	for base in cls.base_types:
		if base.base_name in (STATEFUL_BASE, STATELESS_BASE, STATE_BASE):
			return base
	return None


def _string_argument(attr: Attribute, name: str | None = None) -> str | None:
	"""First positional string argument of `attr`, or the named one.

	Named attribute arguments (`Title = "..."`) parse as assignments.
	"""
	for arg in attr.arguments:
		expr = arg.expression
		if isinstance(expr, Assignment):
			if not (isinstance(expr.target, Identifier) and expr.target.name == name):
				continue
			expr = expr.value
		elif name is not None:
			continue
		if isinstance(expr, Literal) and expr.literal_kind == "string":
			return str(expr.value)
		return None
	return None


def _page_routes(cls: ClassDeclaration) -> list[PageRoute]:
	routes: list[PageRoute] = []
	for attr in cls.attributes:
		if attr.name.removesuffix("Attribute") not in ("Page", "Route"):
			continue
		route = _string_argument(attr)
		if route is None:
			logger.warning("Ignoring [%s] on %s without a literal route", attr.name, cls.name)
			continue
		routes.append(PageRoute(route, _string_argument(attr, "Title")))
	return routes


def _is_server_action(method: MethodDeclaration) -> bool:
	return any(a.name.removesuffix("Attribute") == "ServerAction" for a in method.attributes)


def _server_actions(cls: ClassDeclaration) -> list[ServerAction]:
	actions: list[ServerAction] = []
	for member in cls.members:
		if isinstance(member, MethodDeclaration) and _is_server_action(member):
			actions.append(
				ServerAction(
					name=member.name,
					action_id=f"{cls.name}/{member.name}",
					parameters=tuple(p.name for p in member.parameters),
					return_type=str(member.return_type),
					is_async=member.is_async,
				)
			)
	return actions


def _created_state(cls: ClassDeclaration) -> str | None:
	"""Type name instantiated by `CreateState()`."""
	for member in cls.members:
		if not isinstance(member, MethodDeclaration) or member.name != "CreateState":
			continue
		body = member.body
		if isinstance(body, Block):
			returns = [s.expression for s in body.statements if isinstance(s, Return)]
			body = returns[0] if returns else None
		if isinstance(body, ObjectCreation) and body.type is not None:
			return body.type.base_name
	return None


def _find_state(cls: ClassDeclaration, classes: list[ClassDeclaration]) -> ClassDeclaration | None:
	by_name = {c.name: c for c in classes}
	created = _created_state(cls)
	if created is not None and created in by_name:
		return by_name[created]
	for candidate in classes:
		base = _base(candidate)
		if base is None or base.base_name != STATE_BASE:
			continue
		if base.args and base.args[0].base_name == cls.name:
			return candidate
	return by_name.get(f"{cls.name}State")


def _all_types(
	types: tuple[ClassDeclaration | EnumDeclaration, ...],
) -> tuple[list[ClassDeclaration], list[EnumDeclaration]]:
	"""Top-level and nested declarations, in source order."""
	classes: list[ClassDeclaration] = []
	enums: list[EnumDeclaration] = []
	pending: list[ClassDeclaration | EnumDeclaration] = list(types)
	while pending:
		decl = pending.pop(0)
		if isinstance(decl, EnumDeclaration):
			enums.append(decl)
			continue
		classes.append(decl)
		pending.extend(m for m in decl.members if isinstance(m, (ClassDeclaration, EnumDeclaration)))
	return classes, enums


def extract_components(unit: CompilationUnit, path: str | None = None) -> ModuleDefinition:
	"""Find the components, their state classes and the enums in `unit`."""
	classes, enums = _all_types(unit.types)
	module = ModuleDefinition(unit, enums=enums, source_path=path)
	for cls in classes:
		base = _base(cls)
		if base is None or base.base_name == STATE_BASE:
			continue
		stateful = base.base_name == STATEFUL_BASE
		state = _find_state(cls, classes) if stateful else None
		if stateful and state is None:
			logger.warning("No state class found for stateful component %s", cls.name)
		module.components.append(
			ComponentDefinition(
				name=cls.name,
				declaration=cls,
				namespace=cls.namespace or unit.namespace,
				is_stateful=stateful,
				state=state,
				page_routes=_page_routes(cls),
				server_actions=_server_actions(cls),
				source_path=path,
			)
		)
	logger.debug(
		"Extracted %d component(s) and %d enum(s) from %s",
		len(module.components),
		len(module.enums),
		path or "<source>",
	)
	return module
