"""
Tests for the structural statement strategies: foreach, using, switch
statements, switch expressions and multi-clause catches.
"""

from sharpjs.converter import Converter
from sharpjs.parser import parse_expression, parse_statements


def body(source: str) -> str:
	return Converter().convert_body(parse_statements(source)).code


# =============================================================================
# Loops
# =============================================================================


class TestForEach:
	"""`foreach` becomes `for...of`."""

	def test_foreach(self):
		code = body("foreach (var x in xs) { Console.WriteLine(x); }")
		assert code == "for (const x of xs) {\n  console.log(x);\n}"

	def test_foreach_deconstruction(self):
		code = body("foreach (var (k, v) in pairs) { Log(k, v); }")
		assert code == "for (const [k, v] of pairs) {\n  this.log(k, v);\n}"

	def test_await_foreach(self):
		code = body("await foreach (var item in stream) { Handle(item); }")
		assert code == "for await (const item of stream) {\n  this.handle(item);\n}"

	def test_loop_variable_is_not_a_member(self):
		code = body("foreach (var Item in Items) { Use(Item); }")
		assert code == "for (const Item of this.items) {\n  this.use(Item);\n}"


# =============================================================================
# Resources
# =============================================================================


class TestUsing:
	"""`using` releases through a guarded `dispose()` in `finally`."""

	def test_using_statement(self):
		code = body("using (var r = Open()) { r.Read(); }")
		assert code == (
			"{\n"
			"  const r = this.open();\n"
			"  try {\n"
			"    r.read();\n"
			"  } finally {\n"
			'    if (r && typeof r.dispose === "function") {\n'
			"      r.dispose();\n"
			"    }\n"
			"  }\n"
			"}"
		)

	def test_early_return_still_disposes(self):
		code = body("using (var r = Open()) { if (r.Done) { return; } r.Read(); }")
		assert code == (
			"{\n"
			"  const r = this.open();\n"
			"  try {\n"
			"    if (r.done) {\n"
			"      return;\n"
			"    }\n"
			"    r.read();\n"
			"  } finally {\n"
			'    if (r && typeof r.dispose === "function") {\n'
			"      r.dispose();\n"
			"    }\n"
			"  }\n"
			"}"
		)

	def test_using_declaration_wraps_the_rest(self):
		code = body("using var r = Open(); r.Read();")
		assert code == (
			"const r = this.open();\n"
			"try {\n"
			"  r.read();\n"
			"} finally {\n"
			'  if (r && typeof r.dispose === "function") {\n'
			"    r.dispose();\n"
			"  }\n"
			"}"
		)


# =============================================================================
# Switch statements
# =============================================================================


class TestSwitchStatement:
	"""Constant labels map onto `switch`; patterns onto `switch (true)`."""

	def test_constant_labels(self):
		code = body("switch (x) { case 1: A(); break; default: B(); break; }")
		assert code == (
			"switch (x) {\n"
			"  case 1: {\n"
			"    this.a();\n"
			"    break;\n"
			"  }\n"
			"  default: {\n"
			"    this.b();\n"
			"    break;\n"
			"  }\n"
			"}"
		)

	def test_stacked_labels_fall_through(self):
		code = body("switch (x) { case 1: case 2: A(); break; }")
		assert code == (
			"switch (x) {\n"
			"  case 1:\n"
			"  case 2: {\n"
			"    this.a();\n"
			"    break;\n"
			"  }\n"
			"}"
		)

	def test_type_patterns(self):
		code = body(
			"switch (shape) { case Circle c: Draw(c); break; case null: break; default: Clear(); break; }"
		)
		assert code == (
			"switch (true) {\n"
			"  case shape instanceof Circle: {\n"
			"    this.draw(shape);\n"
			"    break;\n"
			"  }\n"
			"  case shape == null: {\n"
			"    break;\n"
			"  }\n"
			"  default: {\n"
			"    this.clear();\n"
			"    break;\n"
			"  }\n"
			"}"
		)

	def test_null_label_uses_loose_test(self):
		code = body("switch (x) { case null: Reset(); break; case 1: Step(); break; }")
		assert code == (
			"switch (true) {\n"
			"  case x == null: {\n"
			"    this.reset();\n"
			"    break;\n"
			"  }\n"
			"  case x === 1: {\n"
			"    this.step();\n"
			"    break;\n"
			"  }\n"
			"}"
		)


# =============================================================================
# Switch expressions
# =============================================================================


class TestSwitchExpression:
	"""`switch` expressions become immediately-invoked arrows."""

	def test_discard_arm_ends_the_function(self):
		code = Converter().convert_expression(parse_expression('x switch { 1 => "one", _ => "many" }'))
		assert code == (
			"(() => {\n"
			"  const $tmp0 = x;\n"
			"  if ($tmp0 === 1) {\n"
			'    return "one";\n'
			"  }\n"
			'  return "many";\n'
			"})()"
		)

	def test_relational_arms(self):
		code = Converter().convert_expression(
			parse_expression('score switch { >= 90 => "A", >= 80 => "B", _ => "C" }')
		)
		assert "if ($tmp0 >= 90) {" in code
		assert "if ($tmp0 >= 80) {" in code
		assert code.endswith('  return "C";\n})()')

	def test_without_discard_returns_null(self):
		code = Converter().convert_expression(parse_expression('x switch { 1 => "a" }'))
		assert code.endswith("  return null;\n})()")

	def test_throw_arm(self):
		code = Converter().convert_expression(
			parse_expression('x switch { 1 => "a", _ => throw new ArgumentException("bad") }')
		)
		assert code.endswith('  throw new Error("bad");\n})()')
		assert "return null;" not in code

	def test_property_arm_rejects_null(self):
		code = Converter().convert_expression(parse_expression('x switch { { Name: "a" } => 1, _ => 2 }'))
		assert 'if ($tmp0 != null && $tmp0.name === "a") {' in code


# =============================================================================
# Exceptions
# =============================================================================


class TestCatch:
	"""Several catch clauses fold into one `catch` with `instanceof` tests."""

	def test_typed_clauses(self):
		code = body("try { Run(); } catch (HttpError e) { Retry(); } catch (Exception e) { Fail(e); }")
		assert code == (
			"try {\n"
			"  this.run();\n"
			"} catch (e) {\n"
			"  if (e instanceof HttpError) {\n"
			"    this.retry();\n"
			"  } else {\n"
			"    this.fail(e);\n"
			"  }\n"
			"}"
		)

	def test_rethrow(self):
		code = body("try { Run(); } catch { Log(); throw; }")
		assert code == "try {\n  this.run();\n} catch ($tmp0) {\n  this.log();\n  throw $tmp0;\n}"
