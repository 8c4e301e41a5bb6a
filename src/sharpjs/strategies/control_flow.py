"""
Statement-level strategies: `foreach`, `using`, `switch` statements and
`switch` expressions.

These map source constructs with no one-to-one JavaScript counterpart onto
loops, try/finally blocks, native or `switch (true)` switches, and
immediately-invoked arrows.
"""

from __future__ import annotations

from typing import ClassVar, cast, override

from sharpjs.context import ConversionContext
from sharpjs.nodes import (
	Arrow,
	Block,
	Call,
	Case,
	Declare,
	ExprNode,
	ForOf,
	Identifier,
	If,
	Literal,
	Return,
	StmtNode,
	Switch,
	Throw,
	Try,
	Unary,
)
from sharpjs.patterns import Bindings, conjoin, is_true, names_type, pattern_test
from sharpjs.registry import STRUCTURAL, ExpressionStrategy, StatementStrategy
from sharpjs.semantic import is_map_type
from sharpjs.strategies.helpers import dispose_guard, global_call
from sharpjs.syntax import (
	Await,
	CaseLabel,
	ConstantPattern,
	Expression,
	ForEach,
	Identifier as IdentifierNode,
	Literal as LiteralNode,
	MemberAccess,
	Parenthesized,
	SwitchArm,
	SwitchExpression,
	SwitchStatement,
	This,
	ThrowExpression,
	Using,
	walk,
)


def _is_simple(node: Expression) -> bool:
	"""Whether re-reading `node` is free of side effects: `x`, `this.a.b`."""
	if isinstance(node, (IdentifierNode, This)):
		return True
	if isinstance(node, MemberAccess):
		return _is_simple(node.target)
	if isinstance(node, Parenthesized):
		return _is_simple(node.expression)
	return False


# =============================================================================
# Loops and resources
# =============================================================================


class ForEachStrategy(StatementStrategy[ForEach]):
	"""`foreach (var x in xs)` -> `for (const x of xs)`.

	Dictionaries iterate their entries; deconstruction (`var (k, v)`)
	becomes an array pattern. `await foreach` becomes `for await`.
	"""

	name: ClassVar[str] = "foreach"
	priority: ClassVar[int] = STRUCTURAL
	node_types: ClassVar[tuple[type, ...]] = (ForEach,)

	@override
	def matches(self, node: ForEach, ctx: ConversionContext) -> bool:
		return True

	@override
	def convert(self, node: ForEach, ctx: ConversionContext) -> StmtNode:
		source = ctx.expr(node.expression)
		if is_map_type(ctx.semantic.type_of(node.expression)):
			source = global_call("Object.entries", [source])
		if isinstance(node.variable, str):
			names = [node.variable]
			target = node.variable
		else:
			names = list(node.variable)
			target = f"[{', '.join(names)}]"
		with ctx.scope(names):
			body = ctx.converter.body(node.body, ctx)
		return ForOf(target, source, body, node.is_await)


class UsingStrategy(StatementStrategy[Using]):
	"""`using (var r = Open()) { ... }` -> block with try/finally release.

	The finally block only calls `dispose` when the value exists and has
	one, so release happens on completion, early return and throw alike.
	"""

	name: ClassVar[str] = "using"
	priority: ClassVar[int] = STRUCTURAL
	node_types: ClassVar[tuple[type, ...]] = (Using,)

	@override
	def matches(self, node: Using, ctx: ConversionContext) -> bool:
		return node.declaration is not None or node.expression is not None

	@override
	def convert(self, node: Using, ctx: ConversionContext) -> StmtNode:
		with ctx.scope():
			if node.declaration is not None:
				acquire = ctx.converter.declare(node.declaration, ctx, "const")
				names = [d.name for d in node.declaration.declarators]
			else:
				resource = ctx.expr(cast(Expression, node.expression))
				temp = ctx.fresh_temp()
				ctx.bind(temp)
				acquire = Declare("const", [(temp, resource)])
				names = [temp]
			body = ctx.converter.body(node.body, ctx)
		release: list[StmtNode] = [dispose_guard(n, node.is_await) for n in reversed(names)]
		return Block([acquire, Try(body, finalizer=release)])


# =============================================================================
# Switch statements
# =============================================================================


def _is_constant_label(label: CaseLabel, ctx: ConversionContext) -> bool:
	"""Whether a native `case` compares like the label. `case null` does not:
	`===` would miss undefined."""
	if label.guard is not None:
		return False
	pattern = label.pattern
	if pattern is None:
		return True
	if not isinstance(pattern, ConstantPattern):
		return False
	expr = pattern.expression
	if isinstance(expr, LiteralNode) and expr.literal_kind == "null":
		return False
	return not names_type(expr, ctx)


class SwitchStatementStrategy(StatementStrategy[SwitchStatement]):
	"""`switch` statements.

	All-constant labels map onto a native `switch`. Anything else (type,
	relational or property patterns, `when` guards) becomes `switch (true)`
	with one boolean test per label. Designated names alias the switched
	value inside their guard and section.
	"""

	name: ClassVar[str] = "switch-statement"
	priority: ClassVar[int] = STRUCTURAL
	node_types: ClassVar[tuple[type, ...]] = (SwitchStatement,)

	@override
	def matches(self, node: SwitchStatement, ctx: ConversionContext) -> bool:
		return True

	@override
	def convert(self, node: SwitchStatement, ctx: ConversionContext) -> StmtNode:
		labels = [label for section in node.sections for label in section.labels]
		if all(_is_constant_label(label, ctx) for label in labels):
			return self._native(node, ctx)
		return self._tests(node, ctx)

	def _native(self, node: SwitchStatement, ctx: ConversionContext) -> Switch:
		cases: list[Case] = []
		for section in node.sections:
			tests: list[ExprNode | None] = []
			for label in section.labels:
				pattern = cast(ConstantPattern | None, label.pattern)
				tests.append(ctx.expr(pattern.expression) if pattern is not None else None)
			with ctx.scope():
				body = ctx.statements(section.statements)
			cases.extend(Case(test) for test in tests[:-1])
			cases.append(Case(tests[-1], body))
		return Switch(ctx.expr(node.governing), cases)

	def _tests(self, node: SwitchStatement, ctx: ConversionContext) -> StmtNode:
		prelude: list[StmtNode] = []
		with ctx.scope():
			if _is_simple(node.governing):
				subject = ctx.expr(node.governing)
			else:
				temp = ctx.fresh_temp()
				prelude.append(Declare("const", [(temp, ctx.expr(node.governing))]))
				ctx.bind(temp)
				subject = Identifier(temp)
			cases: list[Case] = []
			for section in node.sections:
				aliases: dict[str, ExprNode | None] = {}
				tests: list[ExprNode | None] = []
				for label in section.labels:
					if label.pattern is None:
						tests.append(None)
						continue
					bindings: Bindings = []
					test = pattern_test(subject, label.pattern, ctx, bindings)
					aliases.update(bindings)
					if label.guard is not None:
						with ctx.scope(dict(bindings)):
							test = conjoin(test, ctx.expr(label.guard))
					tests.append(test)
				with ctx.scope(aliases):
					body = ctx.statements(section.statements)
				cases.extend(Case(test) for test in tests[:-1])
				cases.append(Case(tests[-1], body))
			switch = Switch(Literal(True), cases)
		if not prelude:
			return switch
		return Block([*prelude, switch])


# =============================================================================
# Switch expressions
# =============================================================================


class SwitchExpressionStrategy(ExpressionStrategy[SwitchExpression]):
	"""`x switch { ... }` -> `(() => { const $tmp0 = x; if (...) return ...; })()`.

	One conditional return per arm, in source order. The function always
	ends in an unconditional return: the first arm whose test is always
	true, or `return null;`.
	"""

	name: ClassVar[str] = "switch-expression"
	priority: ClassVar[int] = STRUCTURAL
	node_types: ClassVar[tuple[type, ...]] = (SwitchExpression,)

	@override
	def matches(self, node: SwitchExpression, ctx: ConversionContext) -> bool:
		return True

	@override
	def convert(self, node: SwitchExpression, ctx: ConversionContext) -> ExprNode:
		temp = ctx.fresh_temp()
		with ctx.scope([temp]):
			body: list[StmtNode] = [Declare("const", [(temp, ctx.expr(node.governing))])]
			exhaustive = False
			for arm in node.arms:
				test, result = self._arm(arm, Identifier(temp), ctx)
				if is_true(test):
					body.append(Block(result) if isinstance(result[0], Declare) else result[0])
					if arm.guard is None:
						exhaustive = True
						break
					continue
				body.append(If(test, result))
			if not exhaustive:
				body.append(Return(Literal(None)))
		is_async = any(isinstance(n, Await) for n in walk(node, into_lambdas=False))
		call: ExprNode = Call(Arrow([], body, is_async), [])
		return Unary("await", call) if is_async else call

	def _arm(
		self, arm: SwitchArm, subject: ExprNode, ctx: ConversionContext
	) -> tuple[ExprNode, list[StmtNode]]:
		"""Test for one arm and the statements that run when it matches."""
		bindings: Bindings = []
		test = pattern_test(subject, arm.pattern, ctx, bindings)
		with ctx.scope([name for name, _ in bindings]):
			guard = ctx.expr(arm.guard) if arm.guard is not None else None
			if isinstance(arm.expression, ThrowExpression):
				outcome: StmtNode = Throw(ctx.expr(arm.expression.expression))
			else:
				outcome = Return(ctx.expr(arm.expression))
		result: list[StmtNode] = [outcome]
		if guard is not None:
			if bindings:
				result = [If(guard, result)]
			else:
				test = conjoin(test, guard)
		if bindings:
			result = [Declare("const", list(bindings)), *result]
		return test, result
