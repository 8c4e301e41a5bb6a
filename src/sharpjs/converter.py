"""
C# syntax -> JavaScript nodes.

The Converter walks statements and expressions recursively. Every node is
first offered to the matching strategy registry; when no strategy claims it
the built-in default handling below applies, and anything without a default
rule is emitted verbatim as an `Unsupported` node with a diagnostic.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from sharpjs.context import ConversionContext
from sharpjs.errors import ConversionError, Diagnostic
from sharpjs.formatting import apply_alignment, apply_format
from sharpjs.naming import simple_type_name, to_camel_case
from sharpjs.nodes import (
	Array,
	Arrow,
	Assign,
	Binary,
	Block,
	Break,
	Call,
	Continue,
	Declare,
	DoWhile,
	Empty,
	ExprNode,
	ExprStmt,
	For,
	Identifier,
	If,
	Literal,
	Member,
	New,
	Number,
	Object,
	Return,
	Spread,
	StmtNode,
	Subscript,
	Template,
	Ternary,
	Throw,
	Try,
	Unary,
	Update,
	While,
	Yield,
	emit,
	format_js,
)
from sharpjs.patterns import Bindings, conjoin, is_true, pattern_test, type_test
from sharpjs.registry import ExpressionRegistry, StatementRegistry
from sharpjs.semantic import (
	KNOWN_TYPES,
	SemanticHelper,
	SemanticModel,
	awaited_type,
	element_type,
	is_map_type,
	is_sequence_type,
	is_set_type,
)
from sharpjs.strategies import default_expression_registry, default_statement_registry
from sharpjs.strategies.helpers import dispose_guard, is_simple
from sharpjs.syntax import (
	AnonymousObject,
	Argument,
	ArrayCreation,
	As,
	Assignment,
	Await,
	Base,
	Binary as BinaryNode,
	Block as BlockNode,
	Break as BreakNode,
	Cast,
	CatchClause,
	CollectionExpression,
	Conditional,
	Continue as ContinueNode,
	DeclarationExpression,
	DeclarationPattern,
	DefaultValue,
	DoWhile as DoWhileNode,
	ElementAccess,
	Empty as EmptyNode,
	Expression,
	ExpressionStatement,
	For as ForNode,
	Identifier as IdentifierNode,
	If as IfNode,
	IndexInit,
	Initializer,
	InterpolatedString,
	Invocation,
	IsPattern,
	Lambda,
	Literal as LiteralNode,
	LocalDeclaration,
	LocalFunction,
	Lock,
	MemberAccess,
	MemberInit,
	ObjectCreation,
	Parameter,
	Parenthesized,
	Postfix,
	RangeExpression,
	Return as ReturnNode,
	Spread as SpreadNode,
	Statement,
	This,
	Throw as ThrowNode,
	ThrowExpression,
	Try as TryNode,
	TupleExpression,
	TypeOf,
	Unary as UnaryNode,
	VarPattern,
	While as WhileNode,
	YieldStatement,
	is_iterator,
	walk,
)

logger = logging.getLogger(__name__)

EQUALITY_OPS: dict[str, str] = {"==": "===", "!=": "!=="}

# Event handler members of an object initializer (`OnClick = Save`)
_HANDLER_NAME = re.compile(r"On[A-Z]")

NUMERIC_TYPES: frozenset[str] = frozenset(
	{
		"int",
		"uint",
		"long",
		"ulong",
		"short",
		"ushort",
		"byte",
		"sbyte",
		"float",
		"double",
		"decimal",
		"Int32",
		"Int64",
		"Double",
		"Single",
		"Decimal",
	}
)


def member_name(name: str) -> str:
	"""JS name of a C# member: `_count` stays, `Count` becomes `count`."""
	if name.startswith("_"):
		return name
	return to_camel_case(name)


def default_value(type_text: str | None) -> ExprNode:
	"""`default(T)`: 0 for numbers, false for bool, null otherwise."""
	if not type_text or type_text.endswith("?"):
		return Literal(None)
	name = simple_type_name(type_text)
	if name in NUMERIC_TYPES:
		return Number("0")
	if name in ("bool", "Boolean"):
		return Literal(False)
	return Literal(None)


@dataclass(slots=True)
class ConversionResult:
	"""Converted JavaScript for one body plus the anomalies found on the way."""

	code: str
	diagnostics: list[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not self.diagnostics


class Converter:
	"""Converts C# statements and expressions into JavaScript.

	Args:
		semantic: A `SemanticHelper`, a bare semantic model, or None. Without
			a model, identifier and call resolution fall back to textual checks.
		expression_registry / statement_registry: Strategy registries. They
			default to the built-in strategy sets and are sealed on first use.

	Example:
		>>> Converter().convert_expression(parse_expression("Math.Clamp(v, 0, 10)"))
		'Math.min(Math.max(v, 0), 10)'
	"""

	semantic: SemanticHelper
	expression_registry: ExpressionRegistry
	statement_registry: StatementRegistry

	def __init__(
		self,
		semantic: SemanticHelper | SemanticModel | None = None,
		*,
		expression_registry: ExpressionRegistry | None = None,
		statement_registry: StatementRegistry | None = None,
	) -> None:
		if isinstance(semantic, SemanticHelper):
			self.semantic = semantic
		else:
			self.semantic = SemanticHelper(semantic)
		self.expression_registry = (
			expression_registry if expression_registry is not None else default_expression_registry()
		)
		self.statement_registry = (
			statement_registry if statement_registry is not None else default_statement_registry()
		)

	# --- Entrypoints --------------------------------------------------------

	def context(self, return_type: str | None = None) -> ConversionContext:
		"""Fresh context for one top-level call. Seals both registries."""
		self.expression_registry.seal()
		self.statement_registry.seal()
		return ConversionContext(self, self.semantic, return_type=return_type)

	def convert(self, statement: Statement) -> str:
		"""Convert one statement to JavaScript source text."""
		if not isinstance(statement, Statement):
			raise ConversionError(f"expected a statement, got {type(statement).__name__}")
		ctx = self.context()
		return render(self.statements([statement], ctx))

	def convert_expression(self, expression: Expression, expected_type: str | None = None) -> str:
		"""Convert one expression to JavaScript source text."""
		if not isinstance(expression, Expression):
			raise ConversionError(f"expected an expression, got {type(expression).__name__}")
		ctx = self.context()
		return format_js(emit(self.expr(expression, ctx, expected_type)))

	def convert_value(self, expression: Expression, expected_type: str | None = None) -> ConversionResult:
		"""Like `convert_expression`, keeping the diagnostics."""
		ctx = self.context()
		code = format_js(emit(self.expr(expression, ctx, expected_type)))
		return ConversionResult(code, ctx.diagnostics)

	def convert_body(
		self,
		body: BlockNode | Expression | Sequence[Statement],
		parameters: Sequence[Parameter] = (),
		*,
		return_type: str | None = None,
	) -> ConversionResult:
		"""Convert a method or accessor body under a single context."""
		ctx = self.context(return_type)
		with ctx.scope(p.name for p in parameters):
			if isinstance(body, Expression):
				value = self.expr(body, ctx, awaited_type(return_type))
				returns = return_type not in (None, "void", "Task", "ValueTask")
				nodes: list[StmtNode] = [Return(value) if returns else ExprStmt(value)]
				hoisted = ctx.take_hoisted()
				if hoisted:
					nodes.insert(0, Declare("let", [(n, None) for n in hoisted]))
			elif isinstance(body, BlockNode):
				nodes = self.statements(body.statements, ctx)
			else:
				nodes = self.statements(body, ctx)
		if ctx.diagnostics:
			logger.debug("%d unsupported construct(s) in body", len(ctx.diagnostics))
		return ConversionResult(render(nodes), ctx.diagnostics)

	# --- Statements ------------------------------------------------------------

	def statements(self, nodes: Sequence[Statement], ctx: ConversionContext) -> list[StmtNode]:
		"""Convert a statement list in order.

		Inline `out var` declarations hoist a `let` before their statement, and
		a `using var` declaration wraps the rest of the list in try/finally.
		"""
		outer = ctx.take_hoisted()
		for node in nodes:
			if isinstance(node, LocalFunction):
				ctx.bind(node.name)
		out: list[StmtNode] = []
		for i, node in enumerate(nodes):
			if isinstance(node, EmptyNode):
				continue
			if isinstance(node, LocalDeclaration) and node.is_using:
				converted = self._using_declaration(node, nodes[i + 1 :], ctx)
			else:
				converted = [self.stmt(node, ctx)]
			hoisted = ctx.take_hoisted()
			if hoisted:
				out.append(Declare("let", [(name, None) for name in hoisted]))
			out.extend(converted)
			if isinstance(node, LocalDeclaration) and node.is_using:
				break
		ctx.restore_hoisted(outer)
		return out

	def stmt(self, node: Statement, ctx: ConversionContext) -> StmtNode:
		"""Convert a single statement."""
		if node is None:
			raise ConversionError("statement is required")
		strategy = self.statement_registry.find(node, ctx)
		if strategy is not None:
			return strategy.convert(node, ctx)

		if isinstance(node, BlockNode):
			return Block(self.block(node, ctx))
		if isinstance(node, LocalDeclaration):
			if node.is_using:
				return Block(self._using_declaration(node, (), ctx))
			return self.declare(node, ctx)
		if isinstance(node, ExpressionStatement):
			return ExprStmt(self.expr(node.expression, ctx))
		if isinstance(node, IfNode):
			return self._if(node, ctx)
		if isinstance(node, WhileNode):
			return While(self.expr(node.condition, ctx), self.body(node.body, ctx))
		if isinstance(node, DoWhileNode):
			return DoWhile(self.body(node.body, ctx), self.expr(node.condition, ctx))
		if isinstance(node, ForNode):
			return self._for(node, ctx)
		if isinstance(node, ReturnNode):
			if node.expression is None:
				return Return()
			return Return(self.expr(node.expression, ctx, awaited_type(ctx.return_type)))
		if isinstance(node, YieldStatement):
			# yield break -> return
			if node.expression is None:
				return Return()
			return Yield(self.expr(node.expression, ctx, element_type(ctx.return_type)))
		if isinstance(node, BreakNode):
			return Break()
		if isinstance(node, ContinueNode):
			return Continue()
		if isinstance(node, ThrowNode):
			return self._throw(node, ctx)
		if isinstance(node, TryNode):
			return self._try(node, ctx)
		if isinstance(node, Lock):
			return Block(self.body(node.body, ctx))
		if isinstance(node, LocalFunction):
			return self._local_function(node, ctx)
		if isinstance(node, EmptyNode):
			return Empty()
		return ctx.unsupported(node)

	def block(self, node: BlockNode, ctx: ConversionContext) -> list[StmtNode]:
		with ctx.scope():
			return self.statements(node.statements, ctx)

	def body(self, node: Statement, ctx: ConversionContext) -> list[StmtNode]:
		"""Statements of an embedded statement (`if`, loop or `using` body)."""
		if isinstance(node, BlockNode):
			return self.block(node, ctx)
		with ctx.scope():
			return self.statements([node], ctx)

	def declare(
		self,
		node: LocalDeclaration,
		ctx: ConversionContext,
		kind: str | None = None,
	) -> Declare:
		"""`let`/`const` binding; initializers see the declared type."""
		declared = str(node.type) if node.type is not None else None
		bindings: list[tuple[str, ExprNode | None]] = []
		for d in node.declarators:
			value = None
			if d.initializer is not None:
				value = self.expr(d.initializer, ctx, declared)
			ctx.bind(d.name)
			bindings.append((d.name, value))
		if kind is None:
			kind = "const" if node.is_const else "let"
		return Declare("const" if kind == "const" else "let", bindings)

	def _using_declaration(
		self,
		node: LocalDeclaration,
		rest: Sequence[Statement],
		ctx: ConversionContext,
	) -> list[StmtNode]:
		declaration = self.declare(node, ctx, "const")
		with ctx.scope():
			body = self.statements(rest, ctx)
		finalizer: list[StmtNode] = [
			dispose_guard(d.name, node.is_await) for d in reversed(node.declarators)
		]
		return [declaration, Try(body, finalizer=finalizer)]

	def _if(self, node: IfNode, ctx: ConversionContext) -> If:
		cond = self.expr(node.condition, ctx)
		then = self.body(node.then, ctx)
		else_: list[StmtNode] = []
		if isinstance(node.else_, IfNode):
			else_ = [self.stmt(node.else_, ctx)]
		elif node.else_ is not None:
			else_ = self.body(node.else_, ctx)
		return If(cond, then, else_)

	def _for(self, node: ForNode, ctx: ConversionContext) -> For:
		with ctx.scope():
			init: Declare | list[ExprNode] | None = None
			if node.declaration is not None:
				init = self.declare(node.declaration, ctx)
			elif node.initializers:
				init = [self.expr(e, ctx) for e in node.initializers]
			cond = self.expr(node.condition, ctx) if node.condition is not None else None
			update = [self.expr(e, ctx) for e in node.incrementors]
			body = self.body(node.body, ctx)
		return For(init, cond, update, body)

	def _throw(self, node: ThrowNode, ctx: ConversionContext) -> StmtNode:
		if node.expression is not None:
			return Throw(self.expr(node.expression, ctx))
		param = ctx.current_catch_param
		if param is None:
			return ctx.unsupported(node, "rethrow outside of a catch clause")
		return Throw(Identifier(param))

	def _try(self, node: TryNode, ctx: ConversionContext) -> Try:
		body = self.block(node.block, ctx)
		param: str | None = None
		handler: list[StmtNode] | None = None
		if node.catches:
			param, handler = self._catches(node.catches, ctx)
		finalizer = self.block(node.finally_, ctx) if node.finally_ is not None else None
		return Try(body, param, handler, finalizer)

	def _catches(
		self, catches: Sequence[CatchClause], ctx: ConversionContext
	) -> tuple[str | None, list[StmtNode]]:
		"""Fold catch clauses into one JS catch.

		JS errors carry no C# exception type, so every `*Exception` clause
		catches everything. Other types are tested with `instanceof`, and an
		unmatched error is rethrown.
		"""
		first = catches[0]
		if len(catches) == 1 and _catches_all(first) and first.filter is None:
			param = first.name
			if param is None and any(
				isinstance(n, ThrowNode) and n.expression is None for n in walk(first.block)
			):
				param = ctx.fresh_temp()
			with ctx.scope([param] if param else ()):
				if param is None:
					return None, self.statements(first.block.statements, ctx)
				with ctx.catch_param(param):
					return param, self.statements(first.block.statements, ctx)

		names = {c.name for c in catches if c.name}
		param = names.pop() if len(names) == 1 else ctx.fresh_temp()
		chain: list[StmtNode] = [Throw(Identifier(param))]
		for clause in reversed(catches):
			aliases: dict[str, ExprNode | None] = {param: None}
			if clause.name and clause.name != param:
				aliases[clause.name] = Identifier(param)
			with ctx.scope(aliases), ctx.catch_param(param):
				test: ExprNode = Literal(True)
				if not _catches_all(clause) and clause.type is not None:
					test = type_test(Identifier(param), clause.type)
				if clause.filter is not None:
					test = conjoin(test, self.expr(clause.filter, ctx))
				handler = self.statements(clause.block.statements, ctx)
			chain = handler if is_true(test) else [If(test, handler, chain)]
		return param, chain

	def _local_function(self, node: LocalFunction, ctx: ConversionContext) -> Declare:
		params = [p.name for p in node.parameters]
		ctx.bind(node.name)
		if is_iterator(node.body):
			ctx.note(node, "local iterator function has no arrow form", "unsupported.statement")
		with ctx.scope(params):
			if isinstance(node.body, BlockNode):
				body: ExprNode | list[StmtNode] = self.statements(node.body.statements, ctx)
			else:
				body = self.expr(node.body, ctx)
		return Declare("const", [(node.name, Arrow(params, body, node.is_async))])

	# --- Expressions ---------------------------------------------------------

	def expr(
		self,
		node: Expression,
		ctx: ConversionContext,
		expected_type: str | None = None,
	) -> ExprNode:
		"""Convert a single expression.

		`expected_type` is the C# type the context expects (declared local
		type, parameter type); it resolves target-typed `new()` and
		collection expressions.
		"""
		if node is None:
			raise ConversionError("expression is required")
		strategy = self.expression_registry.find(node, ctx)
		if strategy is not None:
			return strategy.convert(node, ctx)

		if isinstance(node, IdentifierNode):
			return self._identifier(node, ctx)
		if isinstance(node, LiteralNode):
			if node.literal_kind == "number":
				return Number(str(node.value))
			return Literal(node.value)
		if isinstance(node, InterpolatedString):
			return self._interpolated(node, ctx)
		if isinstance(node, This):
			return Identifier("this")
		if isinstance(node, Base):
			return Identifier("super")
		if isinstance(node, MemberAccess):
			return self._member_access(node, ctx)
		if isinstance(node, ElementAccess):
			return self._element_access(node, ctx)
		if isinstance(node, Invocation):
			return self._invocation(node, ctx)
		if isinstance(node, BinaryNode):
			op = node.op
			# `x == null` also has to hold for undefined
			if not (_is_null(node.left) or _is_null(node.right)):
				op = EQUALITY_OPS.get(op, op)
			return Binary(self.expr(node.left, ctx), op, self.expr(node.right, ctx))
		if isinstance(node, UnaryNode):
			return self._unary(node, ctx)
		if isinstance(node, Postfix):
			if node.op == "!":
				return self.expr(node.operand, ctx)
			return Update(node.op, self.expr(node.operand, ctx))  # pyright: ignore[reportArgumentType]
		if isinstance(node, Assignment):
			return self._assignment(node, ctx)
		if isinstance(node, Conditional):
			return Ternary(
				self.expr(node.condition, ctx),
				self.expr(node.when_true, ctx, expected_type),
				self.expr(node.when_false, ctx, expected_type),
			)
		if isinstance(node, Lambda):
			return self._lambda(node, ctx)
		if isinstance(node, ObjectCreation):
			return self._object_creation(node, ctx, expected_type)
		if isinstance(node, AnonymousObject):
			return Object([(to_camel_case(m.name), self._member_value(m, ctx)) for m in node.members])
		if isinstance(node, ArrayCreation):
			return self._array_creation(node, ctx)
		if isinstance(node, CollectionExpression):
			return self._collection_expression(node, ctx, expected_type)
		if isinstance(node, SpreadNode):
			return Spread(self.expr(node.expression, ctx))
		if isinstance(node, TupleExpression):
			return Array([self.expr(e, ctx) for e in node.elements])
		if isinstance(node, Parenthesized):
			return self.expr(node.expression, ctx, expected_type)
		if isinstance(node, Await):
			return Unary("await", self.expr(node.expression, ctx))
		if isinstance(node, (Cast, As)):
			return self.expr(node.expression, ctx)
		if isinstance(node, IsPattern):
			return self._is_pattern(node, ctx)
		if isinstance(node, TypeOf):
			return Identifier(node.type.base_name)
		if isinstance(node, DefaultValue):
			return default_value(str(node.type) if node.type is not None else expected_type)
		if isinstance(node, ThrowExpression):
			# IIFE so the throw can sit in expression position
			return Call(Arrow([], [Throw(self.expr(node.expression, ctx))]), [])
		if isinstance(node, DeclarationExpression):
			ctx.hoist(node.name)
			return Identifier(node.name)
		return ctx.unsupported(node)

	def arguments(self, args: Sequence[Argument], ctx: ConversionContext) -> list[ExprNode]:
		"""Convert call arguments. `out`/`ref` modifiers and names are dropped."""
		return [self.expr(a.expression, ctx) for a in args]

	def callee(self, node: Expression, ctx: ConversionContext) -> ExprNode:
		"""Convert the target of a call. Method groups stay unbound here since
		the call itself supplies `this`."""
		if self.expression_registry.find(node, ctx) is None:
			if isinstance(node, IdentifierNode):
				return self._identifier(node, ctx, invoked=True)
			if isinstance(node, MemberAccess):
				return self._member_access(node, ctx, invoked=True)
		return self.expr(node, ctx)

	def _identifier(
		self, node: IdentifierNode, ctx: ConversionContext, invoked: bool = False
	) -> ExprNode:
		name = node.name
		if ctx.is_bound(name):
			return ctx.lookup(name)
		symbol = ctx.semantic.symbol(node)
		if symbol is not None:
			if not symbol.is_member:
				return Identifier(name)
			if symbol.is_static and symbol.containing_type:
				return Member(Identifier(simple_type_name(symbol.containing_type)), member_name(name))
			member = Member(Identifier("this"), member_name(name))
			if symbol.kind == "method" and not invoked:
				return _bound(member)
			return member
		# Unresolved: `_field` and `Property` are implicit instance members
		if name.startswith("_") and name != "_":
			return Member(Identifier("this"), name)
		if name[:1].isupper() and name not in KNOWN_TYPES:
			return Member(Identifier("this"), to_camel_case(name))
		return Identifier(name)

	def _interpolated(self, node: InterpolatedString, ctx: ConversionContext) -> Template:
		parts: list[str | ExprNode] = []
		for part in node.parts:
			if isinstance(part, str):
				parts.append(part)
				continue
			value = self.expr(part.expression, ctx)
			if part.format:
				formatted = apply_format(value, part.format)
				if formatted is None:
					ctx.note(part, f"format string {part.format!r} ignored", "unsupported.format")
				else:
					value = formatted
			if part.alignment:
				value = apply_alignment(value, part.alignment)
			parts.append(value)
		return Template(parts)

	def _member_access(
		self, node: MemberAccess, ctx: ConversionContext, invoked: bool = False
	) -> ExprNode:
		target = node.target
		obj = self.expr(target, ctx)
		name = node.name
		symbol = ctx.semantic.symbol(node)
		if (
			not invoked
			and symbol is not None
			and symbol.kind == "method"
			and not symbol.is_static
			and not node.conditional
			and is_simple(obj)
		):
			# obj.Method as a value -> obj.method.bind(obj)
			return _bound(Member(obj, member_name(name)))
		if name in ("Length", "Count") and not isinstance(target, This):
			# Members of user classes keep their own name
			user_member = (
				symbol is not None and symbol.containing_type is not None and "." not in symbol.containing_type
			)
			if not user_member:
				return Member(obj, "length", node.conditional)
		return Member(obj, member_name(name), node.conditional)

	def _element_access(self, node: ElementAccess, ctx: ConversionContext) -> ExprNode:
		if len(node.arguments) != 1:
			return ctx.unsupported(node, "multi-dimensional element access")
		obj = self.expr(node.target, ctx)
		index = node.arguments[0].expression
		if isinstance(index, UnaryNode) and index.op == "^":
			# xs[^1] -> xs.at(-1)
			return Call(
				Member(obj, "at", node.conditional),
				[Unary("-", self.expr(index.operand, ctx))],
			)
		if isinstance(index, RangeExpression):
			args: list[ExprNode] = [
				self._range_bound(index.start, ctx) if index.start is not None else Number("0")
			]
			if index.end is not None:
				args.append(self._range_bound(index.end, ctx))
			return Call(Member(obj, "slice", node.conditional), args)
		return Subscript(obj, self.expr(index, ctx), node.conditional)

	def _range_bound(self, node: Expression, ctx: ConversionContext) -> ExprNode:
		if isinstance(node, UnaryNode) and node.op == "^":
			return Unary("-", self.expr(node.operand, ctx))
		return self.expr(node, ctx)

	def _invocation(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		target = node.target
		if (
			isinstance(target, IdentifierNode)
			and target.name == "nameof"
			and len(node.arguments) == 1
			and not ctx.is_bound("nameof")
		):
			return Literal(_nameof(node.arguments[0].expression))
		return Call(self.callee(target, ctx), self.arguments(node.arguments, ctx))

	def _unary(self, node: UnaryNode, ctx: ConversionContext) -> ExprNode:
		if node.op in ("++", "--"):
			return Update(node.op, self.expr(node.operand, ctx), prefix=True)  # pyright: ignore[reportArgumentType]
		if node.op == "^":
			return ctx.unsupported(node, "index-from-end outside an element access")
		return Unary(node.op, self.expr(node.operand, ctx))

	def _assignment(self, node: Assignment, ctx: ConversionContext) -> ExprNode:
		target = node.target
		# `_ = expr` discards the value
		if (
			node.op == "="
			and isinstance(target, IdentifierNode)
			and target.name == "_"
			and not ctx.is_bound("_")
		):
			return self.expr(node.value, ctx)
		expected = ctx.semantic.type_of(target)
		value = self.expr(node.value, ctx, expected)
		return Assign(self.expr(target, ctx), node.op, value)

	def _lambda(self, node: Lambda, ctx: ConversionContext) -> Arrow:
		params = [p.name for p in node.parameters]
		with ctx.scope(params):
			if isinstance(node.body, BlockNode):
				body: ExprNode | list[StmtNode] = self.statements(node.body.statements, ctx)
			else:
				body = self.expr(node.body, ctx)
		return Arrow(params, body, node.is_async)

	def _is_pattern(self, node: IsPattern, ctx: ConversionContext) -> ExprNode:
		subject = self.expr(node.expression, ctx)
		pattern = node.pattern
		if isinstance(pattern, (DeclarationPattern, VarPattern)):
			# x is Foo f -> (f = x) instanceof Foo
			ctx.hoist(pattern.name)
			assigned = Assign(Identifier(pattern.name), "=", subject)
			if isinstance(pattern, VarPattern):
				return Binary(assigned, "||", Literal(True))
			return type_test(assigned, pattern.type)
		bindings: Bindings = []
		test = pattern_test(subject, pattern, ctx, bindings)
		captures: list[ExprNode] = []
		for name, value in bindings:
			ctx.hoist(name)
			captures.append(Binary(Assign(Identifier(name), "=", value), "||", Literal(True)))
		return conjoin(test, *captures)

	# --- Object and collection creation ------------------------------------

	def _object_creation(
		self,
		node: ObjectCreation,
		ctx: ConversionContext,
		expected_type: str | None,
	) -> ExprNode:
		type_text = str(node.type) if node.type is not None else expected_type
		args = self.arguments(node.arguments, ctx)
		init = node.initializer
		if type_text is None:
			return self._init_value(init, ctx) if init is not None else Object([])

		if is_map_type(type_text):
			props: list[tuple[str | ExprNode, ExprNode] | Spread] = []
			if args and not _is_capacity(node.arguments):
				props.append(Spread(args[0]))
			if init is not None:
				props.extend(self._map_entries(init, ctx))
			return Object(props)
		if is_set_type(type_text):
			if init is not None:
				return New(Identifier("Set"), [Array(self._elements(init, ctx, element_type(type_text)))])
			if args and not _is_capacity(node.arguments):
				return New(Identifier("Set"), args[:1])
			return New(Identifier("Set"), [])
		if is_sequence_type(type_text):
			if init is not None:
				return Array(self._elements(init, ctx, element_type(type_text)))
			if args and not _is_capacity(node.arguments):
				return Array([Spread(args[0])])
			return Array([])

		name = simple_type_name(type_text)
		if name.endswith("Exception"):
			return New(Identifier("Error"), args[:1])
		created = New(Identifier(name), args)
		if init is None:
			return created
		if not init.is_object:
			return ctx.unsupported(node, f"collection initializer on {name}")
		members: list[tuple[str | ExprNode, ExprNode] | Spread] = []
		for element in init.elements:
			if isinstance(element, MemberInit):
				members.append((member_name(element.name), self._member_value(element, ctx)))
			elif isinstance(element, IndexInit):
				members.append((self.expr(element.key, ctx), self._init_value(element.value, ctx)))
		return Call(Member(Identifier("Object"), "assign"), [created, Object(members)])

	def _member_value(self, member: MemberInit, ctx: ConversionContext) -> ExprNode:
		"""Initializer member value; `OnX = this.handler` keeps its receiver."""
		value = self._init_value(member.value, ctx)
		if (
			_HANDLER_NAME.match(member.name)
			and isinstance(value, Member)
			and isinstance(value.obj, Identifier)
			and value.obj.name == "this"
		):
			return _bound(value)
		return value

	def _init_value(self, value: Expression | Initializer, ctx: ConversionContext) -> ExprNode:
		"""Value of an initializer member; nested braces become literals."""
		if not isinstance(value, Initializer):
			return self.expr(value, ctx)
		if all(isinstance(e, IndexInit) for e in value.elements) and value.elements:
			return Object(self._map_entries(value, ctx))
		if value.is_object:
			props: list[tuple[str | ExprNode, ExprNode] | Spread] = []
			for element in value.elements:
				if isinstance(element, MemberInit):
					props.append((member_name(element.name), self._init_value(element.value, ctx)))
				elif isinstance(element, IndexInit):
					props.append((self.expr(element.key, ctx), self._init_value(element.value, ctx)))
			return Object(props)
		return Array(self._elements(value, ctx))

	def _elements(
		self,
		init: Initializer,
		ctx: ConversionContext,
		element_type_text: str | None = None,
	) -> list[ExprNode]:
		out: list[ExprNode] = []
		for element in init.elements:
			if isinstance(element, Initializer):
				out.append(self._init_value(element, ctx))
			elif isinstance(element, (MemberInit, IndexInit)):
				out.append(ctx.unsupported(element, "member initializer in a collection"))
			else:
				out.append(self.expr(element, ctx, element_type_text))
		return out

	def _map_entries(
		self, init: Initializer, ctx: ConversionContext
	) -> list[tuple[str | ExprNode, ExprNode] | Spread]:
		entries: list[tuple[str | ExprNode, ExprNode] | Spread] = []
		for element in init.elements:
			if isinstance(element, IndexInit):
				entries.append((self._map_key(element.key, ctx), self._init_value(element.value, ctx)))
			elif isinstance(element, Initializer) and len(element.elements) == 2:
				key, value = element.elements
				if isinstance(key, Expression) and isinstance(value, (Expression, Initializer)):
					entries.append((self._map_key(key, ctx), self._init_value(value, ctx)))
				else:
					entries.append(Spread(ctx.unsupported(element, "dictionary entry")))
			else:
				entries.append(Spread(ctx.unsupported(element, "dictionary entry")))
		return entries

	def _map_key(self, key: Expression, ctx: ConversionContext) -> str | ExprNode:
		if isinstance(key, LiteralNode) and key.literal_kind in ("string", "char"):
			return str(key.value)
		return self.expr(key, ctx)

	def _array_creation(self, node: ArrayCreation, ctx: ConversionContext) -> ExprNode:
		elem = str(node.element_type) if node.element_type is not None else None
		if node.initializer is not None:
			return Array(self._elements(node.initializer, ctx, elem))
		if node.size is not None:
			# new int[n] -> new Array(n).fill(0)
			sized = New(Identifier("Array"), [self.expr(node.size, ctx)])
			return Call(Member(sized, "fill"), [default_value(elem)])
		return Array([])

	def _collection_expression(
		self,
		node: CollectionExpression,
		ctx: ConversionContext,
		expected_type: str | None,
	) -> ExprNode:
		elements = [self.expr(e, ctx, element_type(expected_type)) for e in node.elements]
		if is_set_type(expected_type):
			return New(Identifier("Set"), [Array(elements)] if elements else [])
		if is_map_type(expected_type) and not elements:
			return Object([])
		return Array(elements)


def render(nodes: Sequence[StmtNode]) -> str:
	"""Emit statements one per line and indent them."""
	return format_js("\n".join(emit(n) for n in nodes))


def _is_null(node: Expression) -> bool:
	return isinstance(node, LiteralNode) and node.literal_kind == "null"


def _bound(member: Member) -> Call:
	"""`obj.m.bind(obj)`"""
	return Call(Member(member, "bind"), [member.obj])


def _catches_all(clause: CatchClause) -> bool:
	return clause.type is None or clause.type.base_name.endswith("Exception")


def _is_capacity(args: Sequence[Argument]) -> bool:
	"""`new List<T>(16)`: a numeric first argument is a capacity hint."""
	first = args[0].expression if args else None
	return isinstance(first, LiteralNode) and first.literal_kind == "number"


def _nameof(node: Expression) -> str:
	if isinstance(node, IdentifierNode):
		return node.name
	if isinstance(node, MemberAccess):
		return node.name
	return node.text

