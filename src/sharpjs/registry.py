"""
Strategies and the registries that resolve them.

Both registries use one resolution discipline: among the strategies whose
predicate matches a node, the highest priority wins and ties go to the
earliest registered. The order is computed whenever a strategy is added, so
lookup is a plain first-match scan over an immutable tuple.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, ClassVar, Generic, TypeVar, override

from sharpjs.errors import RegistryError
from sharpjs.nodes import ExprNode, StmtNode
from sharpjs.syntax import SyntaxNode

if TYPE_CHECKING:
	from sharpjs.context import ConversionContext

# Priority tiers
IDIOM = 10
STRUCTURAL = 0

N = TypeVar("N", bound=SyntaxNode)
R = TypeVar("R", ExprNode, StmtNode)


class Strategy(ABC, Generic[N, R]):
	"""One unit of conversion knowledge.

	Subclasses declare the syntax node types they can handle; `matches` is
	only consulted for instances of those types. Neither `matches` nor
	`convert` may have side effects beyond the conversion context, and
	neither may raise for unsupported input.
	"""

	name: ClassVar[str]
	priority: ClassVar[int] = IDIOM
	node_types: ClassVar[tuple[type[SyntaxNode], ...]] = ()

	def accepts(self, node: SyntaxNode) -> bool:
		return not self.node_types or isinstance(node, self.node_types)

	@abstractmethod
	def matches(self, node: N, ctx: ConversionContext) -> bool: ...

	@abstractmethod
	def convert(self, node: N, ctx: ConversionContext) -> R: ...

	@override
	def __repr__(self) -> str:
		return f"<{type(self).__name__} {self.name!r} priority={self.priority}>"


class ExpressionStrategy(Strategy[N, ExprNode]):
	pass


class StatementStrategy(Strategy[N, StmtNode]):
	pass


S = TypeVar("S", bound=Strategy)  # pyright: ignore[reportMissingTypeArgument]


class StrategyRegistry(Generic[S]):
	"""Ordered, append-only set of strategies.

	A registry is sealed the first time a converter starts serving lookups
	from it; registering afterwards raises `RegistryError`.
	"""

	kind: str
	_ordered: tuple[S, ...]
	_count: int
	_sealed: bool

	def __init__(self, kind: str, strategies: Iterable[S] = ()) -> None:
		self.kind = kind
		self._ordered = ()
		self._count = 0
		self._sealed = False
		for strategy in strategies:
			self.register(strategy)

	def register(self, strategy: S) -> None:
		"""Append a strategy. No de-duplication is performed."""
		if self._sealed:
			raise RegistryError(
				f"cannot register {strategy!r}: {self.kind} registry is already in use"
			)
		entries = [*self._ordered, strategy]
		# sorted() is stable, so equal priorities keep registration order
		self._ordered = tuple(sorted(entries, key=lambda s: -s.priority))
		self._count += 1

	def seal(self) -> None:
		self._sealed = True

	@property
	def sealed(self) -> bool:
		return self._sealed

	def find(self, node: SyntaxNode, ctx: ConversionContext) -> S | None:
		"""First strategy, in resolution order, whose predicate matches."""
		for strategy in self._ordered:
			if strategy.accepts(node) and strategy.matches(node, ctx):
				return strategy
		return None

	def __iter__(self) -> Iterator[S]:
		return iter(self._ordered)

	def __len__(self) -> int:
		return self._count

	@override
	def __repr__(self) -> str:
		return f"<StrategyRegistry {self.kind} ({self._count} strategies)>"


ExpressionRegistry = StrategyRegistry[ExpressionStrategy]  # pyright: ignore[reportMissingTypeArgument]
StatementRegistry = StrategyRegistry[StatementStrategy]  # pyright: ignore[reportMissingTypeArgument]
