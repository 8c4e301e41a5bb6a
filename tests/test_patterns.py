"""
Tests for `is` patterns lowered to boolean tests.
"""

from sharpjs.converter import Converter
from sharpjs.parser import parse_expression


def js(source: str) -> str:
	return Converter().convert_expression(parse_expression(source))


class TestIsPattern:
	"""Constant, type, relational, logical and property patterns."""

	def test_null(self):
		assert js("x is null") == "x == null"

	def test_not_null(self):
		assert js("x is not null") == "x != null"

	def test_constant(self):
		assert js("x is 3") == "x === 3"

	def test_relational_conjunction(self):
		assert js("x is > 0 and < 10") == "x > 0 && x < 10"

	def test_disjunction(self):
		assert js("x is 1 or 2") == "x === 1 || x === 2"

	def test_negated_type(self):
		assert js("x is not Circle") == "!(x instanceof Circle)"

	def test_primitive_type(self):
		assert js("o is string") == 'typeof o === "string"'
		assert js("o is int") == 'typeof o === "number"'

	def test_class_type(self):
		assert js("shape is Circle") == "shape instanceof Circle"

	def test_exception_type(self):
		assert js("e is TimeoutException") == "e instanceof Error"

	def test_array_type(self):
		assert js("o is int[]") == "Array.isArray(o)"

	def test_property_pattern(self):
		assert js('p is { Name: "a", Age: > 18 }') == 'p != null && p.name === "a" && p.age > 18'

	def test_empty_property_pattern(self):
		assert js("p is { }") == "p != null"

	def test_typed_property_pattern(self):
		code = js("s is Circle { Radius: 0 }")
		assert code == "s instanceof Circle && s.radius === 0"

	def test_length_in_property_pattern(self):
		assert js("s is { Length: 0 }") == "s != null && s.length === 0"

	def test_dotted_property_guards_each_step(self):
		assert js('p is { Address.City: "Oslo" }') == (
			'p != null && p.address != null && p.address.city === "Oslo"'
		)

	def test_nested_property_pattern(self):
		assert js("p is { Address: { Zip: 1 } }") == (
			"p != null && p.address != null && p.address.zip === 1"
		)

	def test_null_matches_undefined(self):
		# Loose equality so a missing member matches `null` as well
		assert js("user.Manager is null") == "user.manager == null"
