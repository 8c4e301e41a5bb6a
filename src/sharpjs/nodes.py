from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeAlias, override
from typing import Literal as Lit


# =============================================================================
# Base classes
# =============================================================================
class Node(ABC):
	"""Base class for all JavaScript nodes."""

	__slots__: tuple[str, ...] = ()

	@abstractmethod
	def emit(self, out: list[str]) -> None:
		"""Emit this node as JavaScript code into the output buffer."""


class ExprNode(Node, ABC):
	"""Base class for expression nodes."""

	__slots__: tuple[str, ...] = ()

	def precedence(self) -> int:
		"""Operator precedence (higher = binds tighter). Default: primary (20)."""
		return 20


class StmtNode(Node, ABC):
	"""Base class for statement nodes."""

	__slots__: tuple[str, ...] = ()


# =============================================================================
# Expression Nodes
# =============================================================================


@dataclass(slots=True)
class Identifier(ExprNode):
	"""JS identifier: x, foo, myFunc"""

	name: str

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.name)


@dataclass(slots=True)
class Literal(ExprNode):
	"""JS literal: "hello", true, null"""

	value: int | float | str | bool | None

	@override
	def emit(self, out: list[str]) -> None:
		if self.value is None:
			out.append("null")
		elif isinstance(self.value, bool):
			out.append("true" if self.value else "false")
		elif isinstance(self.value, str):
			out.append('"')
			out.append(_escape_string(self.value))
			out.append('"')
		else:
			out.append(str(self.value))


@dataclass(slots=True)
class Number(ExprNode):
	"""Numeric literal kept in its source spelling: 42, 0.5, 0xFF"""

	text: str

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.text)


class Undefined(ExprNode):
	"""JS undefined literal.

	Use Undefined() for JS `undefined`. Literal(None) emits `null`.
	"""

	__slots__: tuple[str, ...] = ()

	@override
	def emit(self, out: list[str]) -> None:
		out.append("undefined")


UNDEFINED = Undefined()


@dataclass(slots=True)
class Array(ExprNode):
	"""JS array: [a, b, c]"""

	elements: Sequence[ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("[")
		_emit_list(self.elements, out)
		out.append("]")


PropKey: TypeAlias = "str | ExprNode"


@dataclass(slots=True)
class Object(ExprNode):
	"""JS object: {key: value, "odd key": value, [computed]: value, ...spread}"""

	props: Sequence[tuple[PropKey, ExprNode] | Spread]

	@override
	def emit(self, out: list[str]) -> None:
		if not self.props:
			out.append("{}")
			return
		out.append("{")
		for i, prop in enumerate(self.props):
			if i > 0:
				out.append(", ")
			if isinstance(prop, Spread):
				prop.emit(out)
				continue
			key, value = prop
			if isinstance(key, str):
				if _IDENT_RE.match(key):
					out.append(key)
				else:
					out.append('"')
					out.append(_escape_string(key))
					out.append('"')
			else:
				out.append("[")
				key.emit(out)
				out.append("]")
			out.append(": ")
			_emit_min(value, _PRECEDENCE[","] + 1, out)
		out.append("}")


@dataclass(slots=True)
class Member(ExprNode):
	"""JS member access: obj.prop or obj?.prop"""

	obj: ExprNode
	prop: str
	optional: bool = False

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.obj, out)
		out.append("?." if self.optional else ".")
		out.append(self.prop)


@dataclass(slots=True)
class Subscript(ExprNode):
	"""JS subscript access: obj[key] or obj?.[key]"""

	obj: ExprNode
	key: ExprNode
	optional: bool = False

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.obj, out)
		out.append("?.[" if self.optional else "[")
		self.key.emit(out)
		out.append("]")


@dataclass(slots=True)
class Call(ExprNode):
	"""JS function call: fn(args)"""

	callee: ExprNode
	args: Sequence[ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.callee, out)
		out.append("(")
		_emit_list(self.args, out)
		out.append(")")


@dataclass(slots=True)
class Unary(ExprNode):
	"""JS unary expression: -x, !x, typeof x, await x, delete x"""

	op: str
	operand: ExprNode

	@override
	def precedence(self) -> int:
		op = self.op
		tag = "+u" if op == "+" else ("-u" if op == "-" else op)
		return _PRECEDENCE.get(tag, 17)

	@override
	def emit(self, out: list[str]) -> None:
		if self.op in {"typeof", "await", "void", "delete"}:
			out.append(self.op)
			out.append(" ")
		else:
			out.append(self.op)
			# Avoid `- -x` collapsing into `--x`
			if (
				self.op in {"-", "+"}
				and isinstance(self.operand, (Unary, Update))
				and self.operand.op[0] == self.op
			):
				out.append(" ")
		_emit_paren(self.operand, self.op, "unary", out)


@dataclass(slots=True)
class Update(ExprNode):
	"""JS increment/decrement: ++x, x--"""

	op: Lit["++", "--"]
	operand: ExprNode
	prefix: bool = False

	@override
	def precedence(self) -> int:
		return 17 if self.prefix else 18

	@override
	def emit(self, out: list[str]) -> None:
		if self.prefix:
			out.append(self.op)
			_emit_primary(self.operand, out)
		else:
			_emit_primary(self.operand, out)
			out.append(self.op)


@dataclass(slots=True)
class Binary(ExprNode):
	"""JS binary expression: x + y, a && b, k in obj"""

	left: ExprNode
	op: str
	right: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE.get(self.op, 0)

	@override
	def emit(self, out: list[str]) -> None:
		# Special: ** with unary +/- on left needs parens
		force_left = (
			self.op == "**" and isinstance(self.left, Unary) and self.left.op in {"-", "+"}
		)
		if force_left:
			out.append("(")
			self.left.emit(out)
			out.append(")")
		else:
			_emit_paren(self.left, self.op, "left", out)
		out.append(" ")
		out.append(self.op)
		out.append(" ")
		_emit_paren(self.right, self.op, "right", out)


@dataclass(slots=True)
class Ternary(ExprNode):
	"""JS ternary expression: cond ? a : b"""

	cond: ExprNode
	then: ExprNode
	else_: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["?:"]

	@override
	def emit(self, out: list[str]) -> None:
		_emit_min(self.cond, _PRECEDENCE["?:"] + 1, out)
		out.append(" ? ")
		_emit_min(self.then, _PRECEDENCE["="], out)
		out.append(" : ")
		_emit_min(self.else_, _PRECEDENCE["="], out)


@dataclass(slots=True)
class Assign(ExprNode):
	"""JS assignment expression: x = v, obj.count += 1, a ??= b"""

	target: ExprNode
	op: str
	value: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["="]

	@override
	def emit(self, out: list[str]) -> None:
		_emit_primary(self.target, out)
		out.append(" ")
		out.append(self.op)
		out.append(" ")
		_emit_min(self.value, _PRECEDENCE["="], out)


@dataclass(slots=True)
class Arrow(ExprNode):
	"""JS arrow function: (x) => expr or async (x) => { ... }"""

	params: Sequence[str]
	body: ExprNode | Sequence[StmtNode]
	is_async: bool = False

	@override
	def precedence(self) -> int:
		return _PRECEDENCE["=>"]

	@override
	def emit(self, out: list[str]) -> None:
		if self.is_async:
			out.append("async ")
		out.append("(")
		out.append(", ".join(self.params))
		out.append(") => ")
		if isinstance(self.body, ExprNode):
			# Object literal bodies must be parenthesized
			if isinstance(self.body, Object):
				out.append("(")
				self.body.emit(out)
				out.append(")")
			else:
				_emit_min(self.body, _PRECEDENCE["="], out)
		else:
			_emit_block(self.body, out)


@dataclass(slots=True)
class Template(ExprNode):
	"""JS template literal: `hello ${name}`

	Parts alternate between raw text and expressions.
	"""

	parts: Sequence[str | ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("`")
		for p in self.parts:
			if isinstance(p, str):
				out.append(_escape_template(p))
			else:
				out.append("${")
				p.emit(out)
				out.append("}")
		out.append("`")


@dataclass(slots=True)
class Spread(ExprNode):
	"""JS spread: ...expr"""

	expr: ExprNode

	@override
	def precedence(self) -> int:
		return _PRECEDENCE[","]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("...")
		_emit_min(self.expr, _PRECEDENCE["="], out)


@dataclass(slots=True)
class New(ExprNode):
	"""JS new expression: new Ctor(args)"""

	ctor: ExprNode
	args: Sequence[ExprNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("new ")
		_emit_primary(self.ctor, out)
		out.append("(")
		_emit_list(self.args, out)
		out.append(")")


# =============================================================================
# Statement Nodes
# =============================================================================


@dataclass(slots=True)
class Return(StmtNode):
	"""JS return statement: return expr;"""

	value: ExprNode | None = None

	@override
	def emit(self, out: list[str]) -> None:
		out.append("return")
		if self.value is not None:
			out.append(" ")
			self.value.emit(out)
		out.append(";")


@dataclass(slots=True)
class Yield(StmtNode):
	"""JS yield statement inside a generator: yield expr;"""

	value: ExprNode

	@override
	def emit(self, out: list[str]) -> None:
		out.append("yield ")
		self.value.emit(out)
		out.append(";")


@dataclass(slots=True)
class If(StmtNode):
	"""JS if statement: if (cond) { ... } else { ... }

	An else branch holding a single If is emitted as `else if`.
	"""

	cond: ExprNode
	then: Sequence[StmtNode]
	else_: Sequence[StmtNode] = ()

	@override
	def emit(self, out: list[str]) -> None:
		out.append("if (")
		self.cond.emit(out)
		out.append(") ")
		_emit_block(self.then, out)
		if self.else_:
			if len(self.else_) == 1 and isinstance(self.else_[0], If):
				out.append(" else ")
				self.else_[0].emit(out)
			else:
				out.append(" else ")
				_emit_block(self.else_, out)


@dataclass(slots=True)
class ForOf(StmtNode):
	"""JS for-of loop: for (const x of iter) { ... }

	target can be a single name or array pattern for destructuring: [a, b]
	"""

	target: str
	iter: ExprNode
	body: Sequence[StmtNode]
	is_await: bool = False

	@override
	def emit(self, out: list[str]) -> None:
		out.append("for await (const " if self.is_await else "for (const ")
		out.append(self.target)
		out.append(" of ")
		self.iter.emit(out)
		out.append(") ")
		_emit_block(self.body, out)


@dataclass(slots=True)
class For(StmtNode):
	"""JS C-style loop: for (let i = 0; i < n; i++) { ... }"""

	init: Declare | Sequence[ExprNode] | None
	cond: ExprNode | None
	update: Sequence[ExprNode]
	body: Sequence[StmtNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("for (")
		if isinstance(self.init, Declare):
			self.init.emit_head(out)
		elif self.init:
			_emit_list(self.init, out)
		out.append(";")
		if self.cond is not None:
			out.append(" ")
			self.cond.emit(out)
		out.append(";")
		if self.update:
			out.append(" ")
			_emit_list(self.update, out)
		out.append(") ")
		_emit_block(self.body, out)


@dataclass(slots=True)
class While(StmtNode):
	"""JS while loop: while (cond) { ... }"""

	cond: ExprNode
	body: Sequence[StmtNode]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("while (")
		self.cond.emit(out)
		out.append(") ")
		_emit_block(self.body, out)


@dataclass(slots=True)
class DoWhile(StmtNode):
	"""JS do-while loop: do { ... } while (cond);"""

	body: Sequence[StmtNode]
	cond: ExprNode

	@override
	def emit(self, out: list[str]) -> None:
		out.append("do ")
		_emit_block(self.body, out)
		out.append(" while (")
		self.cond.emit(out)
		out.append(");")


@dataclass(slots=True)
class Break(StmtNode):
	"""JS break statement."""

	@override
	def emit(self, out: list[str]) -> None:
		out.append("break;")


@dataclass(slots=True)
class Continue(StmtNode):
	"""JS continue statement."""

	@override
	def emit(self, out: list[str]) -> None:
		out.append("continue;")


@dataclass(slots=True)
class Declare(StmtNode):
	"""JS variable declaration: let x = 1, y; or const z = f();"""

	kind: Lit["let", "const"]
	bindings: Sequence[tuple[str, ExprNode | None]]

	def emit_head(self, out: list[str]) -> None:
		out.append(self.kind)
		out.append(" ")
		for i, (name, value) in enumerate(self.bindings):
			if i > 0:
				out.append(", ")
			out.append(name)
			if value is not None:
				out.append(" = ")
				_emit_min(value, _PRECEDENCE["="], out)

	@override
	def emit(self, out: list[str]) -> None:
		self.emit_head(out)
		out.append(";")


@dataclass(slots=True)
class ExprStmt(StmtNode):
	"""JS expression statement: expr;"""

	expr: ExprNode

	@override
	def emit(self, out: list[str]) -> None:
		# A leading `{` would parse as a block
		if isinstance(self.expr, Object):
			out.append("(")
			self.expr.emit(out)
			out.append(")")
		else:
			self.expr.emit(out)
		out.append(";")


@dataclass(slots=True)
class Block(StmtNode):
	"""JS block: { ... } - a sequence of statements."""

	body: Sequence[StmtNode]

	@override
	def emit(self, out: list[str]) -> None:
		_emit_block(self.body, out)


@dataclass(slots=True)
class Throw(StmtNode):
	"""JS throw statement: throw expr;"""

	value: ExprNode

	@override
	def emit(self, out: list[str]) -> None:
		out.append("throw ")
		self.value.emit(out)
		out.append(";")


@dataclass(slots=True)
class Case:
	"""One `case test:` (or `default:` when test is None) with its body."""

	test: ExprNode | None
	body: Sequence[StmtNode] = ()


@dataclass(slots=True)
class Switch(StmtNode):
	"""JS switch statement. Cases with an empty body fall through."""

	discriminant: ExprNode
	cases: Sequence[Case]

	@override
	def emit(self, out: list[str]) -> None:
		out.append("switch (")
		self.discriminant.emit(out)
		out.append(") {\n")
		for case in self.cases:
			if case.test is None:
				out.append("default:")
			else:
				out.append("case ")
				case.test.emit(out)
				out.append(":")
			if case.body:
				out.append(" ")
				_emit_block(case.body, out)
			out.append("\n")
		out.append("}")


@dataclass(slots=True)
class Try(StmtNode):
	"""JS try statement: try { ... } catch (e) { ... } finally { ... }"""

	body: Sequence[StmtNode]
	param: str | None = None
	handler: Sequence[StmtNode] | None = None
	finalizer: Sequence[StmtNode] | None = None

	@override
	def emit(self, out: list[str]) -> None:
		out.append("try ")
		_emit_block(self.body, out)
		if self.handler is not None:
			out.append(" catch ")
			if self.param:
				out.append("(")
				out.append(self.param)
				out.append(") ")
			_emit_block(self.handler, out)
		if self.finalizer is not None:
			out.append(" finally ")
			_emit_block(self.finalizer, out)


class Empty(StmtNode):
	"""JS empty statement."""

	__slots__: tuple[str, ...] = ()

	@override
	def emit(self, out: list[str]) -> None:
		out.append(";")


# =============================================================================
# Fallback
# =============================================================================


@dataclass(slots=True)
class Unsupported(ExprNode, StmtNode):
	"""Source construct with no conversion rule, emitted verbatim.

	Usable in both expression and statement position. The converter records
	a diagnostic for every instance it creates.
	"""

	text: str
	kind: str
	line: int = 0
	column: int = 0

	@override
	def precedence(self) -> int:
		return 0

	@override
	def emit(self, out: list[str]) -> None:
		out.append(self.text)


# =============================================================================
# Emit logic
# =============================================================================


def emit(node: Node) -> str:
	"""Emit a node as JavaScript code."""
	out: list[str] = []
	node.emit(out)
	return "".join(out)


def format_js(code: str, indent: str = "  ") -> str:
	"""Re-indent emitted code by brace depth.

	Nodes emit one statement per line without indentation; this pass adds
	it. Braces inside string and template literals are ignored.
	"""
	lines: list[str] = []
	depth = 0
	for raw in code.split("\n"):
		line = raw.strip()
		if not line:
			lines.append("")
			continue
		opens, closes, leading = _brace_balance(line)
		level = max(depth - leading, 0)
		lines.append(indent * level + line)
		depth = max(depth + opens - closes, 0)
	return "\n".join(lines)


def _brace_balance(line: str) -> tuple[int, int, int]:
	opens = closes = leading = 0
	at_start = True
	quote: str | None = None
	i = 0
	while i < len(line):
		c = line[i]
		if quote is not None:
			if c == "\\":
				i += 2
				continue
			if c == quote:
				quote = None
			i += 1
			continue
		if c in "\"'`":
			quote = c
			at_start = False
		elif c == "{":
			opens += 1
			at_start = False
		elif c == "}":
			closes += 1
			if at_start:
				leading += 1
		elif c not in " )];,":
			at_start = False
		i += 1
	return opens, closes, leading


# Operator precedence table (higher = binds tighter)
_PRECEDENCE: dict[str, int] = {
	# Primary
	".": 20,
	"[]": 20,
	"()": 20,
	# Unary
	"!": 17,
	"~": 17,
	"+u": 17,
	"-u": 17,
	"typeof": 17,
	"await": 17,
	"delete": 17,
	"void": 17,
	# Exponentiation (right-assoc)
	"**": 16,
	# Multiplicative
	"*": 15,
	"/": 15,
	"%": 15,
	# Additive
	"+": 14,
	"-": 14,
	# Shift
	"<<": 13,
	">>": 13,
	">>>": 13,
	# Relational
	"<": 12,
	"<=": 12,
	">": 12,
	">=": 12,
	"instanceof": 12,
	"in": 12,
	# Equality
	"===": 11,
	"!==": 11,
	"==": 11,
	"!=": 11,
	# Bitwise
	"&": 10,
	"^": 9,
	"|": 8,
	# Logical
	"&&": 7,
	"||": 6,
	"??": 6,
	# Ternary
	"?:": 4,
	# Assignment and arrows
	"=": 3,
	"=>": 3,
	# Comma
	",": 1,
}

_RIGHT_ASSOC = {"**", "??"}

# `??` cannot be mixed with `&&`/`||` without parentheses
_NULLISH_EXCLUSIVE = {"&&", "||"}

_IDENT_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def _escape_string(s: str) -> str:
	"""Escape for double-quoted JS string literals."""
	return (
		s.replace("\\", "\\\\")
		.replace('"', '\\"')
		.replace("\n", "\\n")
		.replace("\r", "\\r")
		.replace("\t", "\\t")
		.replace("\b", "\\b")
		.replace("\f", "\\f")
		.replace("\v", "\\v")
		.replace("\x00", "\\x00")
		.replace("\u2028", "\\u2028")
		.replace("\u2029", "\\u2029")
	)


def _escape_template(s: str) -> str:
	"""Escape for template literal strings."""
	return (
		s.replace("\\", "\\\\")
		.replace("`", "\\`")
		.replace("${", "\\${")
		.replace("\n", "\\n")
		.replace("\r", "\\r")
		.replace("\t", "\\t")
		.replace("\b", "\\b")
		.replace("\f", "\\f")
		.replace("\v", "\\v")
		.replace("\x00", "\\x00")
		.replace("\u2028", "\\u2028")
		.replace("\u2029", "\\u2029")
	)


def _emit_paren(node: ExprNode, parent_op: str, side: str, out: list[str]) -> None:
	"""Emit child with parens if needed for precedence."""
	needs_parens = False
	if isinstance(node, Ternary):
		needs_parens = True
	elif (
		isinstance(node, Binary)
		and side != "unary"
		and (
			(parent_op == "??" and node.op in _NULLISH_EXCLUSIVE)
			or (parent_op in _NULLISH_EXCLUSIVE and node.op == "??")
		)
	):
		needs_parens = True
	else:
		child_prec = node.precedence()
		if side == "unary":
			parent_prec = 17
		else:
			parent_prec = _PRECEDENCE.get(parent_op, 0)
		if child_prec < parent_prec:
			needs_parens = True
		elif child_prec == parent_prec and isinstance(node, Binary):
			# Handle associativity
			if parent_op in _RIGHT_ASSOC:
				needs_parens = side == "left"
			else:
				needs_parens = side == "right"

	if needs_parens:
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)


def _emit_primary(node: ExprNode, out: list[str]) -> None:
	"""Emit with parens if not primary precedence."""
	if node.precedence() < 20 or isinstance(node, Ternary):
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)


def _emit_min(node: ExprNode, min_prec: int, out: list[str]) -> None:
	"""Emit with parens if the node binds looser than `min_prec`."""
	if node.precedence() < min_prec:
		out.append("(")
		node.emit(out)
		out.append(")")
	else:
		node.emit(out)


def _emit_list(items: Sequence[ExprNode], out: list[str]) -> None:
	for i, item in enumerate(items):
		if i > 0:
			out.append(", ")
		_emit_min(item, _PRECEDENCE[","], out)


def _emit_block(body: Sequence[StmtNode], out: list[str]) -> None:
	out.append("{\n")
	for stmt in body:
		stmt.emit(out)
		out.append("\n")
	out.append("}")
