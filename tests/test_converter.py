"""
Tests for the default conversion rules: names, operators, object creation,
statements and the verbatim fallback.
"""

import pytest
from sharpjs.converter import Converter, default_value, member_name
from sharpjs.errors import ConversionError
from sharpjs.nodes import emit
from sharpjs.parser import parse_expression, parse_statements


def js(source: str) -> str:
	return Converter().convert_expression(parse_expression(source))


def body(source: str, return_type: str | None = None) -> str:
	return Converter().convert_body(parse_statements(source), return_type=return_type).code


# =============================================================================
# Examples
# =============================================================================


class TestExamples:
	"""End-to-end conversions of small snippets."""

	def test_console_with_linq(self):
		assert js("Console.WriteLine(seq.Any(x => x.Active))") == "console.log(seq.some((x) => x.active))"

	def test_dictionary_creation(self):
		assert js("new Dictionary<string, int>()") == "{}"

	def test_null_coalescing(self):
		assert js("a ?? b") == "a ?? b"

	def test_math_clamp(self):
		assert js("Math.Clamp(v, 0, 10)") == "Math.min(Math.max(v, 0), 10)"


# =============================================================================
# Names
# =============================================================================


class TestNames:
	"""Resolution of unresolved identifiers without a semantic model."""

	def test_underscore_field_is_instance_member(self):
		assert js("_count") == "this._count"

	def test_capitalized_name_is_instance_member(self):
		assert js("Count + 1") == "this.count + 1"

	def test_lowercase_name_is_kept(self):
		assert js("count") == "count"

	def test_member_access_is_camel_cased(self):
		assert js("user.FirstName") == "user.firstName"

	def test_length_and_count_become_length(self):
		assert js("items.Count") == "items.length"
		assert js("name.Length") == "name.length"

	def test_conditional_access(self):
		assert js("user?.Name") == "user?.name"

	def test_this_member(self):
		assert js("this.Value") == "this.value"

	def test_nameof(self):
		assert js("nameof(Value)") == '"Value"'

	def test_member_name(self):
		assert member_name("_items") == "_items"
		assert member_name("IsVisible") == "isVisible"


# =============================================================================
# Operators
# =============================================================================


class TestOperators:
	"""Operators and literals."""

	def test_equality_is_strict(self):
		assert js("a == b") == "a === b"
		assert js("a != b") == "a !== b"

	def test_null_comparison_is_loose(self):
		assert js("a != null") == "a != null"
		assert js("null == a.B") == "null == a.b"

	def test_precedence_is_preserved(self):
		assert js("(a + b) * c") == "(a + b) * c"

	def test_ternary(self):
		assert js("a > 0 ? a : -a") == "a > 0 ? a : -a"

	def test_string_literal(self):
		assert js('"hello"') == '"hello"'

	def test_bool_literals(self):
		assert js("true && !done") == "true && !done"

	def test_cast_is_dropped(self):
		assert js("(int)value") == "value"

	def test_as_is_dropped(self):
		assert js("value as string") == "value"

	def test_null_forgiving_is_dropped(self):
		assert js("value!") == "value"

	def test_index_from_end(self):
		assert js("items[^1]") == "items.at(-1)"

	def test_range(self):
		assert js("items[1..^1]") == "items.slice(1, -1)"

	def test_interpolated_string(self):
		assert js('$"Hello {name}!"') == "`Hello ${name}!`"

	def test_interpolated_format(self):
		assert js('$"{price:F2}"') == "`${price.toFixed(2)}`"

	def test_interpolated_alignment(self):
		assert js('$"{n,5}"') == "`${String(n).padStart(5)}`"

	def test_await(self):
		assert js("await LoadAsync()") == "await this.loadAsync()"


# =============================================================================
# Object and collection creation
# =============================================================================


class TestCreation:
	"""`new` expressions, initializers and collection literals."""

	def test_list_with_initializer(self):
		assert js("new List<int> { 1, 2, 3 }") == "[1, 2, 3]"

	def test_empty_list(self):
		assert js("new List<string>()") == "[]"

	def test_capacity_argument_is_dropped(self):
		assert js("new List<string>(16)") == "[]"

	def test_hash_set(self):
		assert js("new HashSet<string>()") == "new Set()"

	def test_dictionary_initializer(self):
		assert js('new Dictionary<string, int> { ["a"] = 1, ["b"] = 2 }') == "{a: 1, b: 2}"

	def test_object_initializer(self):
		assert js('new User { Name = "a", Age = 3 }') == 'Object.assign(new User(), {name: "a", age: 3})'

	def test_handler_member_keeps_receiver(self):
		assert js("new Button { OnClick = Save, Label = Title }") == (
			"Object.assign(new Button(), {onClick: this.save.bind(this), label: this.title})"
		)

	def test_handler_lambda_is_not_bound(self):
		assert js("new Button { OnClick = () => Save() }") == (
			"Object.assign(new Button(), {onClick: () => this.save()})"
		)

	def test_exception_becomes_error(self):
		assert js('new InvalidOperationException("bad")') == 'new Error("bad")'

	def test_anonymous_object(self):
		assert js("new { Id = 1, Title = title }") == "{id: 1, title: title}"

	def test_target_typed_new(self):
		result = Converter().convert_expression(parse_expression("new()"), "List<int>")
		assert result == "[]"

	def test_sized_array(self):
		assert js("new int[n]") == "new Array(n).fill(0)"

	def test_default_value(self):
		assert js("default(int)") == "0"
		assert js("default(bool)") == "false"
		assert js("default(string)") == "null"

	def test_default_value_nullable(self):
		assert emit(default_value("int?")) == "null"
		assert emit(default_value("decimal")) == "0"


# =============================================================================
# Statements
# =============================================================================


class TestStatements:
	"""Statement conversion through `convert_body`."""

	def test_local_declaration(self):
		assert body("var x = 1;") == "let x = 1;"

	def test_const_declaration(self):
		assert body("const int Max = 10;") == "const Max = 10;"

	def test_if_else(self):
		code = body("if (a > 1) { b = 2; } else { b = 3; }")
		assert code == "if (a > 1) {\n  b = 2;\n} else {\n  b = 3;\n}"

	def test_for_loop(self):
		code = body("for (int i = 0; i < n; i++) { Total += i; }")
		assert code == "for (let i = 0; i < n; i++) {\n  this.total += i;\n}"

	def test_while_loop(self):
		code = body("while (running) { Tick(); }")
		assert code == "while (running) {\n  this.tick();\n}"

	def test_try_catch(self):
		code = body("try { Run(); } catch (Exception ex) { Log(ex); }")
		assert code == "try {\n  this.run();\n} catch (ex) {\n  this.log(ex);\n}"

	def test_throw(self):
		assert body('throw new ArgumentException("x");') == 'throw new Error("x");'

	def test_local_names_shadow_members(self):
		code = body("var Count = 1; Count++;")
		assert code == "let Count = 1;\nCount++;"

	def test_out_var_is_hoisted(self):
		code = body("if (d.TryGetValue(k, out var v)) { Use(v); }")
		assert code == "let v;\nif ((v = d[k]) !== undefined) {\n  this.use(v);\n}"

	def test_is_pattern_declaration(self):
		code = body("if (shape is Circle c) { Draw(c); }")
		assert code == "let c;\nif ((c = shape) instanceof Circle) {\n  this.draw(c);\n}"

	def test_expression_body_returns(self):
		result = Converter().convert_body(parse_expression("a + b"), return_type="int")
		assert result.code == "return a + b;"

	def test_void_expression_body(self):
		result = Converter().convert_body(parse_expression("Run()"), return_type="void")
		assert result.code == "this.run();"

	def test_local_function(self):
		code = body("int Twice(int x) => x * 2;")
		assert code == "const Twice = (x) => x * 2;"

	def test_yield(self):
		assert body("yield return 1; yield break;") == "yield 1;\nreturn;"

	def test_local_iterator_is_reported(self):
		stmts = parse_statements("IEnumerable<int> Ones() { yield return 1; }")
		result = Converter().convert_body(stmts)
		assert [d.code for d in result.diagnostics] == ["unsupported.statement"]

	def test_try_parse_hoists_out_variable(self):
		code = body("if (int.TryParse(s, out var n)) { Use(n); }")
		assert code == "let n;\nif (!Number.isNaN(n = parseInt(s))) {\n  this.use(n);\n}"


# =============================================================================
# Verbatim fallback
# =============================================================================


class TestFallback:
	"""Constructs with no conversion rule are kept verbatim and reported."""

	def test_unsupported_statement(self):
		result = Converter().convert_body(parse_statements("goto done;"))
		assert result.code == "goto done;"
		assert not result.ok
		assert result.diagnostics[0].code == "unsupported.statement"

	def test_unsupported_expression(self):
		result = Converter().convert_value(parse_expression("sizeof(int)"))
		assert result.code == "sizeof(int)"
		assert [d.code for d in result.diagnostics] == ["unsupported.expression"]

	def test_diagnostic_format(self):
		result = Converter().convert_body(parse_statements("goto done;"))
		assert result.diagnostics[0].format("A.cs").startswith("A.cs:1:1: unsupported.statement:")

	def test_supported_body_has_no_diagnostics(self):
		result = Converter().convert_body(parse_statements("var x = 1;"))
		assert result.ok

	def test_missing_expression_raises(self):
		with pytest.raises(ConversionError):
			Converter().convert_expression(parse_statements("x = 1;")[0])  # pyright: ignore[reportArgumentType]
