"""
Tests for strategy registration and resolution order.
"""

from typing import ClassVar, override

import pytest
from sharpjs.context import ConversionContext
from sharpjs.converter import Converter
from sharpjs.errors import RegistryError
from sharpjs.nodes import ExprNode, Identifier, Literal
from sharpjs.parser import parse_expression
from sharpjs.registry import (
	IDIOM,
	STRUCTURAL,
	ExpressionRegistry,
	ExpressionStrategy,
	StatementRegistry,
)
from sharpjs.strategies import default_expression_registry, default_statement_registry
from sharpjs.syntax import Identifier as IdentifierNode


class RenameFoo(ExpressionStrategy[IdentifierNode]):
	name: ClassVar[str] = "rename-foo"
	node_types: ClassVar[tuple[type, ...]] = (IdentifierNode,)

	@override
	def matches(self, node: IdentifierNode, ctx: ConversionContext) -> bool:
		return node.name == "foo"

	@override
	def convert(self, node: IdentifierNode, ctx: ConversionContext) -> ExprNode:
		return Identifier("bar")


class FooToLiteral(RenameFoo):
	name: ClassVar[str] = "foo-literal"

	@override
	def convert(self, node: IdentifierNode, ctx: ConversionContext) -> ExprNode:
		return Literal("foo")


class LowPriorityFoo(FooToLiteral):
	name: ClassVar[str] = "low-foo"
	priority: ClassVar[int] = STRUCTURAL


# =============================================================================
# Resolution
# =============================================================================


class TestResolution:
	"""Highest priority wins; ties go to the earliest registered."""

	def test_custom_strategy_is_used(self):
		registry = default_expression_registry()
		registry.register(RenameFoo())
		converter = Converter(expression_registry=registry)
		assert converter.convert_expression(parse_expression("foo + 1")) == "bar + 1"

	def test_first_registered_wins_ties(self):
		registry = ExpressionRegistry("expression", [RenameFoo(), FooToLiteral()])
		converter = Converter(expression_registry=registry)
		assert converter.convert_expression(parse_expression("foo")) == "bar"

	def test_priority_beats_registration_order(self):
		registry = ExpressionRegistry("expression", [LowPriorityFoo(), RenameFoo()])
		assert [s.name for s in registry] == ["rename-foo", "low-foo"]

	def test_non_matching_strategy_falls_through(self):
		registry = ExpressionRegistry("expression", [RenameFoo()])
		converter = Converter(expression_registry=registry)
		assert converter.convert_expression(parse_expression("baz")) == "baz"

	def test_empty_registries_use_defaults_only(self):
		converter = Converter(
			expression_registry=ExpressionRegistry("expression"),
			statement_registry=StatementRegistry("statement"),
		)
		# Without strategies, LINQ calls are plain method calls
		assert converter.convert_expression(parse_expression("xs.Any()")) == "xs.any()"

	def test_default_priorities(self):
		assert RenameFoo.priority == IDIOM
		assert all(s.priority == STRUCTURAL for s in default_statement_registry())


# =============================================================================
# Sealing
# =============================================================================


class TestSealing:
	"""A registry is sealed once a converter starts using it."""

	def test_register_before_use(self):
		registry = default_expression_registry()
		count = len(registry)
		registry.register(RenameFoo())
		assert len(registry) == count + 1
		assert not registry.sealed

	def test_register_after_use_raises(self):
		registry = default_expression_registry()
		converter = Converter(expression_registry=registry)
		converter.convert_expression(parse_expression("x"))
		assert registry.sealed
		with pytest.raises(RegistryError):
			registry.register(RenameFoo())

	def test_no_deduplication(self):
		registry = ExpressionRegistry("expression", [RenameFoo(), RenameFoo()])
		assert len(registry) == 2
