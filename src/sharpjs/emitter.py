"""
Module emission: wraps converted member bodies in the class boilerplate the
runtime expects.

Each component becomes an exported class. Stateful components return a new
instance of their state class from `createState()`; the state class carries
the fields, properties and methods of the C# state class plus the runtime
plumbing (`constructor(component)`, `component`, `setState(fn)`).
"""

from __future__ import annotations

import logging
import textwrap
from dataclasses import dataclass, field
from typing import cast

from sharpjs.component import (
	ComponentDefinition,
	ModuleDefinition,
	ServerAction,
	constructor_of,
	fields_of,
	methods_of,
	properties_of,
)
from sharpjs.config import DEFAULT_RUNTIME
from sharpjs.converter import ConversionResult, Converter, default_value, member_name
from sharpjs.errors import Diagnostic
from sharpjs.nodes import (
	Array,
	Binary,
	Call,
	ExprNode,
	Identifier,
	Literal,
	Number,
	Return,
	Unary,
	emit,
)
from sharpjs.registry import ExpressionRegistry, StatementRegistry
from sharpjs.semantic import KNOWN_TYPES, Binder
from sharpjs.strategies import default_expression_registry, default_statement_registry
from sharpjs.syntax import (
	Block,
	ClassDeclaration,
	EnumDeclaration,
	Expression,
	MethodDeclaration,
	ObjectCreation,
	Parameter,
	PropertyDeclaration,
	is_iterator,
	walk,
)
from sharpjs.templates import (
	CLASS_TEMPLATE,
	ENUM_TEMPLATE,
	METHOD_TEMPLATE,
	MODULE_TEMPLATE,
	STATE_RUNTIME_TEMPLATE,
)

logger = logging.getLogger(__name__)

INDENT = "  "
SERVER_ACTION_CALL = "callServerAction"


@dataclass(slots=True)
class EmitResult:
	"""Emitted module text plus the diagnostics of every converted member."""

	code: str
	diagnostics: list[Diagnostic] = field(default_factory=list)


def _indent(code: str) -> str:
	return textwrap.indent(code, INDENT)


def _method(signature: str, body: str) -> str:
	return str(METHOD_TEMPLATE.render_unicode(signature=signature, body=_indent(body) if body else ""))


def _class(name: str, members: list[str], base: str | None = None, exported: bool = False) -> str:
	return str(
		CLASS_TEMPLATE.render_unicode(
			name=name,
			base=base,
			exported=exported,
			members=[_indent(m) for m in members],
		)
	)


class ModuleEmitter:
	"""Emits one JavaScript module for a `ModuleDefinition`.

	Every class is bound on its own, and every member body is converted
	under its own conversion context. The registries are shared.
	"""

	module: ModuleDefinition
	runtime: str
	diagnostics: list[Diagnostic]

	def __init__(
		self,
		module: ModuleDefinition,
		runtime: str = DEFAULT_RUNTIME,
		*,
		expression_registry: ExpressionRegistry | None = None,
		statement_registry: StatementRegistry | None = None,
	) -> None:
		self.module = module
		self.runtime = runtime
		self.diagnostics = []
		self._expression_registry = (
			expression_registry if expression_registry is not None else default_expression_registry()
		)
		self._statement_registry = (
			statement_registry if statement_registry is not None else default_statement_registry()
		)
		self._binder = Binder(module.unit)
		self._local_types = {
			node.name for node in walk(module.unit) if isinstance(node, (ClassDeclaration, EnumDeclaration))
		}
		self._imports: list[str] = []

	def emit(self) -> EmitResult:
		classes: list[str] = []
		for component in self.module.components:
			classes.extend(self._component(component))
		enums = [self._enum(e) for e in self.module.enums]
		code = MODULE_TEMPLATE.render_unicode(
			source=self.module.source_path or "<source>",
			imports=sorted(self._imports),
			runtime=self.runtime,
			enums=enums,
			classes=classes,
		)
		return EmitResult(str(code), self.diagnostics)

	# --- Helpers ---------------------------------------------------------------

	def _import(self, name: str) -> None:
		if name not in self._imports:
			self._imports.append(name)

	def _converter(self, cls: ClassDeclaration) -> Converter:
		table = self._binder.bind_class(cls)
		return Converter(
			table,
			expression_registry=self._expression_registry,
			statement_registry=self._statement_registry,
		)

	def _collect(self, result: ConversionResult) -> str:
		self.diagnostics.extend(result.diagnostics)
		return result.code

	def _runtime_types(self, cls: ClassDeclaration) -> None:
		"""Import the widget types `cls` instantiates from the runtime."""
		for node in walk(cls):
			if not isinstance(node, ObjectCreation) or node.type is None:
				continue
			name = node.type.base_name
			if name in self._local_types or name in KNOWN_TYPES or name.endswith("Exception"):
				continue
			self._import(name)

	# --- Components ----------------------------------------------------------------

	def _component(self, component: ComponentDefinition) -> list[str]:
		logger.debug("Emitting component %s", component.name)
		cls = component.declaration
		base = "StatefulComponent" if component.is_stateful else "StatelessComponent"
		self._import(base)
		self._runtime_types(cls)
		converter = self._converter(cls)
		members: list[str] = []
		state_name = component.state_class_name
		if state_name is not None:
			members.append(_method("createState()", f"return new {state_name}(this);"))
		members.extend(self._members(cls, converter, needs_build=not component.is_stateful))
		members.extend(self._server_action(a) for a in component.server_actions)
		out = [_class(component.name, members, base, exported=True)]
		if component.state is not None:
			out.append(self._state_class(component.state))
		return out

	def _state_class(self, cls: ClassDeclaration) -> str:
		self._runtime_types(cls)
		converter = self._converter(cls)
		setup = ["this._component = component;", "this._needsRender = false;"]
		user = constructor_of(cls)
		if user is not None and user.body is not None:
			if user.parameters:
				logger.warning("Constructor parameters of %s are ignored", cls.name)
			setup.append(self._collect(converter.convert_body(user.body, user.parameters)))
		members = [
			*self._fields(cls, converter),
			_method("constructor(component)", "\n".join(setup)),
			str(STATE_RUNTIME_TEMPLATE.render_unicode()),
			*self._accessors(cls, converter),
			*self._methods(cls, converter, needs_build=True),
		]
		return _class(cls.name, members)

	def _members(self, cls: ClassDeclaration, converter: Converter, needs_build: bool) -> list[str]:
		return [
			*self._fields(cls, converter),
			*self._accessors(cls, converter),
			*self._methods(cls, converter, needs_build),
		]

	def _server_action(self, action: ServerAction) -> str:
		"""`[ServerAction]` method -> remote call through the runtime."""
		self._import(SERVER_ACTION_CALL)
		params = [Identifier(p) for p in action.parameters]
		call = Call(Identifier(SERVER_ACTION_CALL), [Literal(action.action_id), Array(params)])
		body = emit(Return(Unary("await", call)))
		signature = f"async {member_name(action.name)}({', '.join(action.parameters)})"
		return _method(signature, body)

	# --- Members -------------------------------------------------------------------

	def _fields(self, cls: ClassDeclaration, converter: Converter) -> list[str]:
		lines: list[str] = []
		for f in fields_of(cls):
			if f.initializer is not None:
				value = self._collect(converter.convert_value(f.initializer, str(f.type)))
			else:
				value = emit(default_value(str(f.type)))
			prefix = "static " if f.is_static else ""
			lines.append(f"{prefix}{member_name(f.name)} = {value};")
		for p in properties_of(cls):
			if not p.is_auto:
				continue
			if p.initializer is not None:
				value = self._collect(converter.convert_value(p.initializer, str(p.type)))
			else:
				value = emit(default_value(str(p.type)))
			prefix = "static " if "static" in p.modifiers else ""
			lines.append(f"{prefix}{member_name(p.name)} = {value};")
		return ["\n".join(lines)] if lines else []

	def _accessors(self, cls: ClassDeclaration, converter: Converter) -> list[str]:
		out: list[str] = []
		for p in properties_of(cls):
			if p.is_auto:
				continue
			out.extend(self._property(p, converter))
		return out

	def _property(self, prop: PropertyDeclaration, converter: Converter) -> list[str]:
		name = member_name(prop.name)
		prefix = "static " if "static" in prop.modifiers else ""
		type_text = str(prop.type)
		out: list[str] = []
		if prop.getter is not None:
			body = self._collect(converter.convert_body(prop.getter, return_type=type_text))
			out.append(_method(f"{prefix}get {name}()", body))
		if prop.setter is not None:
			value = Parameter("value", prop.type, text="value")
			body = self._collect(converter.convert_body(prop.setter, [value]))
			out.append(_method(f"{prefix}set {name}(value)", body))
		return out

	def _methods(self, cls: ClassDeclaration, converter: Converter, needs_build: bool = False) -> list[str]:
		methods = methods_of(cls)
		out = [self._method(m, converter) for m in methods]
		if needs_build and not any(m.name == "Build" for m in methods):
			out.append(_method("build(context)", "return null;"))
		return out

	def _method(self, method: MethodDeclaration, converter: Converter) -> str:
		method_body = cast(Block | Expression, method.body)
		params: list[str] = []
		for p in method.parameters:
			if p.modifier == "params":
				params.append(f"...{p.name}")
			elif p.default is not None:
				default = self._collect(converter.convert_value(p.default, str(p.type) if p.type else None))
				params.append(f"{p.name} = {default}")
			else:
				params.append(p.name)
		modifiers = ""
		if "static" in method.modifiers:
			modifiers += "static "
		if method.is_async:
			modifiers += "async "
		if is_iterator(method_body):
			modifiers += "*"
		body = self._collect(
			converter.convert_body(method_body, method.parameters, return_type=str(method.return_type))
		)
		return _method(f"{modifiers}{member_name(method.name)}({', '.join(params)})", body)

	# --- Enums -----------------------------------------------------------------------

	def _enum(self, decl: EnumDeclaration) -> str:
		"""`enum Color { Red, Green = 5 }` -> frozen object with camelCase keys.

		Implicit values continue from the previous member; explicit values
		may refer to earlier members by name.
		"""
		converter = Converter(
			expression_registry=self._expression_registry,
			statement_registry=self._statement_registry,
		)
		ctx = converter.context()
		members: list[tuple[str, str]] = []
		previous: ExprNode | None = None
		for member in decl.members:
			if member.value is not None:
				value = converter.expr(member.value, ctx)
			elif previous is None:
				value = Number("0")
			else:
				value = _next_value(previous)
			members.append((member_name(member.name), emit(value)))
			previous = value
			ctx.bind(member.name, value)
		self.diagnostics.extend(ctx.diagnostics)
		return str(ENUM_TEMPLATE.render_unicode(name=decl.name, members=members))


def _next_value(previous: ExprNode) -> ExprNode:
	if isinstance(previous, Number):
		try:
			return Number(str(int(previous.text, 0) + 1))
		except ValueError:
			pass
	return Binary(previous, "+", Number("1"))


def emit_module(
	module: ModuleDefinition,
	runtime: str = DEFAULT_RUNTIME,
	*,
	expression_registry: ExpressionRegistry | None = None,
	statement_registry: StatementRegistry | None = None,
) -> EmitResult:
	"""Emit the JavaScript module for the components and enums of one file."""
	return ModuleEmitter(
		module,
		runtime,
		expression_registry=expression_registry,
		statement_registry=statement_registry,
	).emit()
