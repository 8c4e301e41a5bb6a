"""Per-call conversion state threaded through the recursive descent."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sharpjs.errors import Diagnostic, DiagnosticCode
from sharpjs.nodes import ExprNode, Identifier, StmtNode, Unsupported
from sharpjs.semantic import SemanticHelper
from sharpjs.syntax import Expression, Statement, SyntaxNode

if TYPE_CHECKING:
	from sharpjs.converter import Converter


class ConversionContext:
	"""State for one top-level conversion call.

	Holds a reference back to the converter for recursive sub-conversions,
	the semantic helper, and a stack of lexical scopes. Each scope maps a
	bound name to its replacement expression (None keeps the name as is).
	Names in scope are never rewritten to instance-member accesses.

	A context is created per `Converter.convert*` call and must not be
	shared between independent calls.
	"""

	converter: Converter
	semantic: SemanticHelper
	scopes: list[dict[str, ExprNode | None]]
	diagnostics: list[Diagnostic]
	return_type: str | None
	_hoisted: list[str]
	_catch_params: list[str]
	_temp_counter: int

	def __init__(
		self,
		converter: Converter,
		semantic: SemanticHelper,
		*,
		return_type: str | None = None,
	) -> None:
		self.converter = converter
		self.semantic = semantic
		self.scopes = [{}]
		self.diagnostics = []
		self.return_type = return_type
		self._hoisted = []
		self._catch_params = []
		self._temp_counter = 0

	# --- Recursive conversion --------------------------------------------------

	def expr(self, node: Expression, expected_type: str | None = None) -> ExprNode:
		return self.converter.expr(node, self, expected_type)

	def callee(self, node: Expression) -> ExprNode:
		return self.converter.callee(node, self)

	def stmt(self, node: Statement) -> StmtNode:
		return self.converter.stmt(node, self)

	def statements(self, nodes: Sequence[Statement]) -> list[StmtNode]:
		return self.converter.statements(nodes, self)

	# --- Scopes ------------------------------------------------------------------

	@contextmanager
	def scope(
		self, names: Iterable[str] | Mapping[str, ExprNode | None] = ()
	) -> Iterator[None]:
		"""Push a lexical scope binding `names` for the duration of the block."""
		frame: dict[str, ExprNode | None] = (
			dict(names) if isinstance(names, Mapping) else dict.fromkeys(names)
		)
		self.scopes.append(frame)
		try:
			yield
		finally:
			self.scopes.pop()

	def bind(self, name: str, alias: ExprNode | None = None) -> None:
		"""Bind `name` in the innermost scope."""
		self.scopes[-1][name] = alias

	def is_bound(self, name: str) -> bool:
		return any(name in frame for frame in self.scopes)

	def lookup(self, name: str) -> ExprNode:
		"""Expression a bound name converts to."""
		for frame in reversed(self.scopes):
			if name in frame:
				return frame[name] or Identifier(name)
		return Identifier(name)

	# --- Synthetic names ---------------------------------------------------------

	def fresh_temp(self) -> str:
		"""Generate a fresh temporary variable name."""
		while True:
			name = f"$tmp{self._temp_counter}"
			self._temp_counter += 1
			if not self.is_bound(name):
				return name

	def fresh_param(self, base: str) -> str:
		"""`$base`, numbered when an enclosing generated function already uses it."""
		name = f"${base}"
		n = 0
		while self.is_bound(name):
			n += 1
			name = f"${base}{n}"
		return name

	@contextmanager
	def params(self, *bases: str) -> Iterator[list[str]]:
		"""Reserve parameter names for a generated function while its body converts.

		Generated functions nest (a `Sum` selector holding another `Sum`), so
		each level gets names no enclosing level is using.
		"""
		with self.scope():
			names: list[str] = []
			for base in bases:
				name = self.fresh_param(base)
				self.bind(name)
				names.append(name)
			yield names

	def hoist(self, name: str) -> None:
		"""Request a `let name;` before the statement being converted."""
		if name not in self._hoisted:
			self._hoisted.append(name)
		self.bind(name)

	def take_hoisted(self) -> list[str]:
		names, self._hoisted = self._hoisted, []
		return names

	def restore_hoisted(self, names: list[str]) -> None:
		self._hoisted = names + [n for n in self._hoisted if n not in names]

	@contextmanager
	def catch_param(self, name: str) -> Iterator[None]:
		self._catch_params.append(name)
		try:
			yield
		finally:
			self._catch_params.pop()

	@property
	def current_catch_param(self) -> str | None:
		return self._catch_params[-1] if self._catch_params else None

	# --- Diagnostics -----------------------------------------------------------

	def unsupported(
		self,
		node: SyntaxNode,
		message: str | None = None,
		code: DiagnosticCode | None = None,
	) -> Unsupported:
		"""Record a diagnostic and return the verbatim fallback for `node`."""
		if code is None:
			code = "unsupported.statement" if isinstance(node, Statement) else "unsupported.expression"
		self.diagnostics.append(
			Diagnostic(
				code,
				message or f"no conversion rule for {node.kind}",
				node.line,
				node.column,
				node.text,
			)
		)
		return Unsupported(node.text, node.kind, node.line, node.column)

	def note(self, node: SyntaxNode, message: str, code: DiagnosticCode) -> None:
		"""Record a diagnostic while keeping the converted output."""
		self.diagnostics.append(Diagnostic(code, message, node.line, node.column, node.text))
