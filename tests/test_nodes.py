"""
Tests for JavaScript node emission and re-indentation.
"""

from sharpjs.nodes import (
	Array,
	Arrow,
	Assign,
	Binary,
	Call,
	Declare,
	ExprStmt,
	ForOf,
	Identifier,
	If,
	Literal,
	Member,
	New,
	Number,
	Object,
	Return,
	Spread,
	Template,
	Ternary,
	Unary,
	Unsupported,
	emit,
	format_js,
)

a = Identifier("a")
b = Identifier("b")
c = Identifier("c")


# =============================================================================
# Expressions
# =============================================================================


class TestLiterals:
	"""Literal spelling and escaping."""

	def test_primitives(self):
		assert emit(Literal(None)) == "null"
		assert emit(Literal(True)) == "true"
		assert emit(Literal(False)) == "false"
		assert emit(Number("0xFF")) == "0xFF"

	def test_string_escaping(self):
		assert emit(Literal('say "hi"\n')) == '"say \\"hi\\"\\n"'

	def test_template_escaping(self):
		node = Template(["cost: `$", Identifier("x"), "` ${raw}"])
		assert emit(node) == "`cost: \\`$${x}\\` \\${raw}`"

	def test_object_keys(self):
		node = Object([("name", a), ("odd key", b), (Identifier("k"), c), Spread(Identifier("rest"))])
		assert emit(node) == '{name: a, "odd key": b, [k]: c, ...rest}'

	def test_empty_object(self):
		assert emit(Object([])) == "{}"


class TestPrecedence:
	"""Parentheses are added only where binding strength requires them."""

	def test_lower_precedence_child(self):
		assert emit(Binary(Binary(a, "+", b), "*", c)) == "(a + b) * c"

	def test_higher_precedence_child(self):
		assert emit(Binary(a, "+", Binary(b, "*", c))) == "a + b * c"

	def test_left_associativity(self):
		assert emit(Binary(Binary(a, "-", b), "-", c)) == "a - b - c"
		assert emit(Binary(a, "-", Binary(b, "-", c))) == "a - (b - c)"

	def test_nullish_cannot_mix_with_logical(self):
		assert emit(Binary(Binary(a, "&&", b), "??", c)) == "(a && b) ?? c"
		assert emit(Binary(a, "||", Binary(b, "??", c))) == "a || (b ?? c)"

	def test_ternary_inside_binary(self):
		node = Binary(Ternary(a, b, c), "||", Identifier("d"))
		assert emit(node) == "(a ? b : c) || d"

	def test_member_of_binary(self):
		assert emit(Member(Binary(a, "+", b), "length")) == "(a + b).length"

	def test_call_on_arrow(self):
		assert emit(Call(Arrow([], a), [])) == "(() => a)()"

	def test_unary(self):
		assert emit(Unary("!", Binary(a, "&&", b))) == "!(a && b)"
		assert emit(Unary("-", Unary("-", a))) == "- -a"
		assert emit(Unary("await", Call(a, []))) == "await a()"

	def test_unsupported_is_parenthesized(self):
		node = Binary(Unsupported("sizeof(int)", "expression"), "+", Number("1"))
		assert emit(node) == "(sizeof(int)) + 1"

	def test_new(self):
		assert emit(New(Identifier("Set"), [Array([a, b])])) == "new Set([a, b])"


class TestArrow:
	"""Arrow functions."""

	def test_expression_body(self):
		assert emit(Arrow(["x"], Binary(Identifier("x"), "*", Number("2")))) == "(x) => x * 2"

	def test_object_body_is_parenthesized(self):
		assert emit(Arrow([], Object([("a", Number("1"))]))) == "() => ({a: 1})"

	def test_async_block_body(self):
		code = format_js(emit(Arrow(["x"], [Return(Identifier("x"))], is_async=True)))
		assert code == "async (x) => {\n  return x;\n}"


# =============================================================================
# Statements
# =============================================================================


class TestStatements:
	"""Statement emission through `format_js`."""

	def test_declare(self):
		assert emit(Declare("let", [("x", Number("1")), ("y", None)])) == "let x = 1, y;"

	def test_object_expression_statement(self):
		assert emit(ExprStmt(Object([]))) == "({});"

	def test_else_if_chain(self):
		node = If(a, [ExprStmt(Call(b, []))], [If(c, [Return()])])
		assert format_js(emit(node)) == "if (a) {\n  b();\n} else if (c) {\n  return;\n}"

	def test_for_of(self):
		node = ForOf("[k, v]", Identifier("pairs"), [ExprStmt(Assign(a, "+=", Identifier("v")))])
		assert format_js(emit(node)) == "for (const [k, v] of pairs) {\n  a += v;\n}"


class TestFormatJs:
	"""Brace-depth re-indentation."""

	def test_nested_blocks(self):
		code = "if (a) {\nif (b) {\nc();\n}\n}"
		assert format_js(code) == "if (a) {\n  if (b) {\n    c();\n  }\n}"

	def test_braces_in_strings_are_ignored(self):
		code = 'if (a) {\nlog("{");\nlog(`}`);\n}\nafter();'
		assert format_js(code) == 'if (a) {\n  log("{");\n  log(`}`);\n}\nafter();'

	def test_custom_indent(self):
		assert format_js("{\nx;\n}", indent="\t") == "{\n\tx;\n}"

	def test_blank_lines_are_kept_empty(self):
		assert format_js("a;\n   \nb;") == "a;\n\nb;"
