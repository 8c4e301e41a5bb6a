"""`Task` helpers -> Promise constructs."""

from __future__ import annotations

from typing import ClassVar, cast, override

from sharpjs.context import ConversionContext
from sharpjs.nodes import Array, Arrow, Call, ExprNode, Identifier, New
from sharpjs.registry import ExpressionStrategy
from sharpjs.semantic import is_sequence_type, is_task_type
from sharpjs.strategies.helpers import (
	CallParts,
	accepts_arity,
	call_parts,
	global_call,
	method,
	public_methods,
	receiver_text,
	snake_name,
	static_type,
)
from sharpjs.syntax import Expression, Invocation, MemberAccess

TASK_OWNERS = ("System.Threading.Tasks.Task", "System.Threading.Tasks.ValueTask")


def _resolved(*args: ExprNode) -> Call:
	return global_call("Promise.resolve", args)


class TaskMethods:
	"""Static `Task` helpers. Arguments arrive converted."""

	def delay(self, ms: ExprNode, token: ExprNode | None = None) -> ExprNode:
		"""Task.Delay(ms) -> new Promise((resolve) => setTimeout(resolve, ms))"""
		timer = Call(Identifier("setTimeout"), [Identifier("resolve"), ms])
		return New(Identifier("Promise"), [Arrow(["resolve"], timer)])

	def run(self, fn: ExprNode, token: ExprNode | None = None) -> ExprNode:
		"""Task.Run(fn) -> Promise.resolve().then(fn)"""
		return method(_resolved(), "then", [fn])

	def when_all(self, *tasks: ExprNode) -> ExprNode:
		"""Task.WhenAll(a, b) -> Promise.all([a, b])"""
		return global_call("Promise.all", [_task_array(tasks)])

	def when_any(self, *tasks: ExprNode) -> ExprNode:
		"""Task.WhenAny(a, b) -> Promise.race([a, b])"""
		return global_call("Promise.race", [_task_array(tasks)])

	def from_result(self, value: ExprNode) -> ExprNode:
		return _resolved(value)

	def yield_(self) -> ExprNode:
		return _resolved()


TASK_METHODS = public_methods(TaskMethods)


def _task_array(tasks: tuple[ExprNode, ...]) -> ExprNode:
	# A lone argument is a collection unless the caller wrapped it
	if len(tasks) == 1:
		return tasks[0]
	return Array(list(tasks))


def _is_single_task(node: Expression, ctx: ConversionContext) -> bool:
	"""Whether a lone `WhenAll`/`WhenAny` argument is one task rather than a
	collection of them. Without a type, `LoadAsync()` and `saveTask` count
	as single tasks."""
	type_text = ctx.semantic.type_of(node)
	if type_text is not None:
		return is_task_type(type_text) and not is_sequence_type(type_text)
	if isinstance(node, Invocation):
		parts = call_parts(node)
		return parts is not None and parts.name.endswith("Async")
	text = receiver_text(node)
	return text is not None and text.rsplit(".", 1)[-1].endswith("Task")


def _task_method(node: Invocation, ctx: ConversionContext) -> str | None:
	parts = call_parts(node)
	if parts is None or parts.receiver is None:
		return None
	name = snake_name(parts.name)
	if name not in TASK_METHODS:
		return None
	if not ctx.semantic.is_task_call(node) and static_type(parts.receiver, ctx) not in TASK_OWNERS:
		return None
	if not accepts_arity(getattr(TaskMethods(), name), len(parts.args)):
		return None
	return name


class TaskStrategy(ExpressionStrategy[Invocation]):
	name: ClassVar[str] = "task"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		return _task_method(node, ctx) is not None

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		name = cast(str, _task_method(node, ctx))
		args = ctx.converter.arguments(node.arguments, ctx)
		if (
			name in ("when_all", "when_any")
			and len(args) == 1
			and _is_single_task(node.arguments[0].expression, ctx)
		):
			args = [Array(args)]
		return getattr(TaskMethods(), name)(*args)


class CompletedTaskStrategy(ExpressionStrategy[MemberAccess]):
	"""`Task.CompletedTask` -> `Promise.resolve()`"""

	name: ClassVar[str] = "completed-task"
	node_types: ClassVar[tuple[type, ...]] = (MemberAccess,)

	@override
	def matches(self, node: MemberAccess, ctx: ConversionContext) -> bool:
		return node.name == "CompletedTask" and static_type(node.target, ctx) in TASK_OWNERS

	@override
	def convert(self, node: MemberAccess, ctx: ConversionContext) -> ExprNode:
		return _resolved()


class ConfigureAwaitStrategy(ExpressionStrategy[Invocation]):
	"""`task.ConfigureAwait(false)` -> `task`: promises have no sync context."""

	name: ClassVar[str] = "configure-await"
	node_types: ClassVar[tuple[type, ...]] = (Invocation,)

	@override
	def matches(self, node: Invocation, ctx: ConversionContext) -> bool:
		parts = call_parts(node)
		if parts is None or parts.receiver is None or parts.name != "ConfigureAwait":
			return False
		if len(parts.args) != 1:
			return False
		declaring = ctx.semantic.declaring_type(node)
		if declaring is not None:
			return declaring in TASK_OWNERS
		receiver_type = ctx.semantic.type_of(parts.receiver)
		return receiver_type is None or is_task_type(receiver_type)

	@override
	def convert(self, node: Invocation, ctx: ConversionContext) -> ExprNode:
		parts = cast(CallParts, call_parts(node))
		return ctx.expr(cast(Expression, parts.receiver))
