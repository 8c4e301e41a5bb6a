"""Shared building blocks for conversion strategies."""

from __future__ import annotations

import inspect
import keyword
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sharpjs.nodes import (
	Arrow,
	Binary,
	Call,
	ExprNode,
	ExprStmt,
	Identifier,
	If,
	Literal,
	Member,
	Number,
	Unary,
)
from sharpjs.semantic import KNOWN_TYPES
from sharpjs.syntax import (
	Argument,
	Expression,
	Identifier as IdentifierNode,
	Invocation,
	Lambda,
	MemberAccess,
	TypeRef,
)

if TYPE_CHECKING:
	from sharpjs.context import ConversionContext


@dataclass(slots=True, frozen=True)
class CallParts:
	"""An invocation split into receiver, method name and arguments.

	`receiver` is None for calls without an explicit receiver (`Foo()`).
	"""

	receiver: Expression | None
	name: str
	type_args: tuple[TypeRef, ...]
	args: tuple[Argument, ...]
	conditional: bool = False

	@property
	def arg_exprs(self) -> list[Expression]:
		return [a.expression for a in self.args]


def call_parts(node: Invocation) -> CallParts | None:
	target = node.target
	if isinstance(target, MemberAccess):
		return CallParts(target.target, target.name, target.type_args, node.arguments, target.conditional)
	if isinstance(target, IdentifierNode):
		return CallParts(None, target.name, target.type_args, node.arguments)
	return None


def receiver_text(node: Expression | None) -> str | None:
	"""Dotted name of a receiver made of plain names: `Console.Error`."""
	if isinstance(node, IdentifierNode):
		return node.name
	if isinstance(node, MemberAccess) and not node.conditional:
		inner = receiver_text(node.target)
		return f"{inner}.{node.name}" if inner is not None else None
	return None


def is_static_call(
	node: Invocation | MemberAccess,
	receiver: Expression | None,
	ctx: ConversionContext,
	simple_names: Sequence[str],
	qualified_names: Sequence[str],
) -> bool:
	"""Call or member on a static type, by declaring type when resolved and
	by the receiver's spelling otherwise."""
	declaring = ctx.semantic.declaring_type(node)
	if declaring is not None:
		return declaring in qualified_names
	text = receiver_text(receiver)
	if text is None:
		return False
	return text in simple_names and not ctx.is_bound(text.split(".", 1)[0])


def static_type(receiver: Expression | None, ctx: ConversionContext) -> str | None:
	"""Qualified name of the static type `receiver` names, if it names one."""
	if receiver is None:
		return None
	symbol = ctx.semantic.symbol(receiver)
	if symbol is not None:
		return (symbol.containing_type or symbol.name) if symbol.kind == "type" else None
	text = receiver_text(receiver)
	if text is None or ctx.is_bound(text.split(".", 1)[0]):
		return None
	if text in KNOWN_TYPES:
		return KNOWN_TYPES[text]
	return text if text.startswith("System.") else None


def method(obj: ExprNode, name: str, args: Sequence[ExprNode] = (), optional: bool = False) -> Call:
	"""`obj.name(args)`"""
	return Call(Member(obj, name, optional), list(args))


def global_call(name: str, args: Sequence[ExprNode]) -> Call:
	"""`Object.keys(x)` style call on a global: name is dotted."""
	head, _, tail = name.partition(".")
	callee: ExprNode = Identifier(head)
	if tail:
		callee = Member(callee, tail)
	return Call(callee, list(args))


def is_simple(node: ExprNode) -> bool:
	"""Reading `node` again has no side effects: names, literals, plain member chains."""
	if isinstance(node, (Identifier, Literal, Number)):
		return True
	return isinstance(node, Member) and not node.optional and is_simple(node.obj)


def evaluate_once(
	ctx: ConversionContext,
	values: Sequence[ExprNode],
	reused: Sequence[bool],
	build: Callable[[list[ExprNode]], ExprNode],
) -> ExprNode:
	"""`build(values)` with every reused value evaluated exactly once.

	A reused value that is not simple becomes a parameter of an
	immediately-invoked arrow. Non-simple values before it are passed the
	same way so arguments still evaluate left to right.
	"""
	bound = [False] * len(values)
	pending = False
	for i in reversed(range(len(values))):
		if not is_simple(values[i]) and (reused[i] or pending):
			bound[i] = pending = True
	if not pending:
		return build(list(values))
	params: list[str] = []
	args: list[ExprNode] = []
	refs: list[ExprNode] = []
	with ctx.scope():
		for value, bind in zip(values, bound, strict=True):
			if not bind:
				refs.append(value)
				continue
			name = ctx.fresh_param("v")
			ctx.bind(name)
			params.append(name)
			args.append(value)
			refs.append(Identifier(name))
		body = build(refs)
	return Call(Arrow(params, body), args)


def inline_lambda(fn: Expression, args: Sequence[ExprNode], ctx: ConversionContext) -> ExprNode:
	"""Apply `fn` to `args` at conversion time.

	An expression-bodied lambda is inlined by binding its parameters to the
	argument expressions; anything else becomes a call.
	"""
	if (
		isinstance(fn, Lambda)
		and isinstance(fn.body, Expression)
		and len(fn.parameters) == len(args)
		and not fn.is_async
	):
		with ctx.scope({p.name: a for p, a in zip(fn.parameters, args, strict=True)}):
			return ctx.expr(fn.body)
	return Call(ctx.callee(fn), list(args))


def dispose_guard(name: str, is_async: bool = False) -> If:
	"""`if (r && typeof r.dispose === "function") { r.dispose(); }`"""
	release = "disposeAsync" if is_async else "dispose"
	target = Identifier(name)
	test = Binary(
		target,
		"&&",
		Binary(Unary("typeof", Member(target, release)), "===", Literal("function")),
	)
	call: ExprNode = method(target, release)
	if is_async:
		call = Unary("await", call)
	return If(test, [ExprStmt(call)])


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def snake_name(name: str) -> str:
	"""`FirstOrDefault` -> `first_or_default`; keywords get a trailing `_`."""
	snake = _CAMEL_BOUNDARY.sub("_", name).lower()
	return snake + "_" if keyword.iskeyword(snake) else snake


def public_methods(cls: type) -> set[str]:
	return {k for k in cls.__dict__ if not k.startswith("_")}


def accepts_arity(fn: Callable[..., Any], count: int) -> bool:
	"""Whether `fn` can be called with `count` positional arguments."""
	try:
		inspect.signature(fn).bind(*range(count))
	except TypeError:
		return False
	return True
