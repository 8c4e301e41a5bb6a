"""Built-in conversion strategies and the default registries built from them."""

from __future__ import annotations

from sharpjs.registry import (
	ExpressionRegistry,
	ExpressionStrategy,
	StatementRegistry,
	StatementStrategy,
)
from sharpjs.strategies.calls import (
	ConsoleStrategy,
	DatePartStrategy,
	MathStrategy,
	ServiceLookupStrategy,
	StaticCallStrategy,
	StaticMemberStrategy,
	ToStringStrategy,
)
from sharpjs.strategies.collections import (
	DictionaryStrategy,
	KeyValuePairStrategy,
	ListStrategy,
	MapMemberStrategy,
	SetStrategy,
	UntypedAddStrategy,
)
from sharpjs.strategies.control_flow import (
	ForEachStrategy,
	SwitchExpressionStrategy,
	SwitchStatementStrategy,
	UsingStrategy,
)
from sharpjs.strategies.linq import LinqStrategy, MaterializationStrategy
from sharpjs.strategies.strings import (
	StringEmptyStrategy,
	StringMethodStrategy,
	StringStaticStrategy,
)
from sharpjs.strategies.tasks import (
	CompletedTaskStrategy,
	ConfigureAwaitStrategy,
	TaskStrategy,
)


def expression_strategies() -> list[ExpressionStrategy]:  # pyright: ignore[reportMissingTypeArgument]
	"""Fresh instances of every built-in expression strategy, in registration order."""
	return [
		ConsoleStrategy(),
		MathStrategy(),
		StaticCallStrategy(),
		StaticMemberStrategy(),
		DatePartStrategy(),
		TaskStrategy(),
		CompletedTaskStrategy(),
		ConfigureAwaitStrategy(),
		ServiceLookupStrategy(),
		ToStringStrategy(),
		StringStaticStrategy(),
		StringEmptyStrategy(),
		DictionaryStrategy(),
		MapMemberStrategy(),
		KeyValuePairStrategy(),
		SetStrategy(),
		ListStrategy(),
		StringMethodStrategy(),
		MaterializationStrategy(),
		LinqStrategy(),
		UntypedAddStrategy(),
		SwitchExpressionStrategy(),
	]


def statement_strategies() -> list[StatementStrategy]:  # pyright: ignore[reportMissingTypeArgument]
	return [
		ForEachStrategy(),
		UsingStrategy(),
		SwitchStatementStrategy(),
	]


def default_expression_registry() -> ExpressionRegistry:
	return ExpressionRegistry("expression", expression_strategies())


def default_statement_registry() -> StatementRegistry:
	return StatementRegistry("statement", statement_strategies())
