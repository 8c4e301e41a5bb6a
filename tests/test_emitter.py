"""
Tests for module emission: class boilerplate, state classes, server action
stubs, enums and runtime imports.
"""

from sharpjs.component import extract_components
from sharpjs.emitter import emit_module
from sharpjs.parser import parse_compilation_unit
from sharpjs.registry import ExpressionRegistry


def emit(source: str, path: str = "Counter.cs", **kwargs) -> str:
	module = extract_components(parse_compilation_unit(source), path)
	return emit_module(module, **kwargs).code


class TestStatefulModule:
	"""A stateful component and its state class."""

	def test_header_and_imports(self, counter_source):
		code = emit(counter_source)
		lines = code.split("\n")
		assert lines[0] == "// Generated by sharpjs from Counter.cs. Do not edit."
		assert lines[1] == 'import { StatefulComponent, Text, callServerAction } from "@sharpjs/runtime";'

	def test_custom_runtime(self, counter_source):
		code = emit(counter_source, runtime="./runtime.js")
		assert 'from "./runtime.js";' in code

	def test_enum(self, counter_source):
		code = emit(counter_source)
		assert "export const Mode = Object.freeze({\n  off: 0,\n  on: 1,\n  auto: 5,\n  next: 6,\n});" in code

	def test_component_class(self, counter_source):
		code = emit(counter_source)
		assert "export class Counter extends StatefulComponent {" in code
		assert "  createState() {\n    return new CounterState(this);\n  }" in code

	def test_server_action_stub(self, counter_source):
		code = emit(counter_source)
		assert (
			'  async save(value) {\n    return await callServerAction("Counter/Save", [value]);\n  }'
		) in code
		# The C# body is not converted
		assert "return value;" not in code

	def test_state_class(self, counter_source):
		code = emit(counter_source)
		assert "\nclass CounterState {\n  _count = 0;\n  items = [];\n" in code
		assert (
			"  constructor(component) {\n"
			"    this._component = component;\n"
			"    this._needsRender = false;\n"
			"  }"
		) in code
		assert "  get component() {\n    return this._component;\n  }" in code

	def test_state_methods(self, counter_source):
		code = emit(counter_source)
		assert "  increment() {\n    this.setState(() => this._count++);\n  }" in code
		assert "  build(context) {\n    return new Text(`Count: ${this._count}`);\n  }" in code

	def test_output_ends_with_newline(self, counter_source):
		assert emit(counter_source).endswith("}\n")

	def test_no_diagnostics(self, counter_source):
		module = extract_components(parse_compilation_unit(counter_source), "Counter.cs")
		assert emit_module(module).diagnostics == []


class TestStatelessModule:
	"""Stateless components carry their own members."""

	def test_fields_and_build(self):
		code = emit(
			"""
public class Hello : StatelessComponent
{
	public string Name = "World";
	public IComponent Build(BuildContext context) => new Text($"Hello {Name}");
}
""",
			"Hello.cs",
		)
		assert "export class Hello extends StatelessComponent {" in code
		assert '  name = "World";' in code
		assert "  build(context) {\n    return new Text(`Hello ${this.name}`);\n  }" in code
		assert "import { StatelessComponent, Text }" in code

	def test_missing_build_returns_null(self):
		code = emit("class Empty : StatelessComponent { }", "Empty.cs")
		assert "  build(context) {\n    return null;\n  }" in code

	def test_properties(self):
		code = emit(
			"""
class Badge : StatelessComponent
{
	int _n;
	public int Count { get => _n; set { _n = value; } }
	public bool Visible { get; set; } = true;
	public IComponent Build(BuildContext context) => null;
}
""",
			"Badge.cs",
		)
		assert "  _n = 0;\n  visible = true;" in code
		assert "  get count() {\n    return this._n;\n  }" in code
		assert "  set count(value) {\n    this._n = value;\n  }" in code

	def test_method_parameters(self):
		code = emit(
			"""
class Greeter : StatelessComponent
{
	public static string Greet(string name = "you", params string[] rest) => name;
	public IComponent Build(BuildContext context) => null;
}
""",
			"Greeter.cs",
		)
		assert '  static greet(name = "you", ...rest) {\n    return name;\n  }' in code

	def test_iterator_method_is_a_generator(self):
		code = emit(
			"""
class Steps : StatelessComponent
{
	IEnumerable<int> Numbers(int n)
	{
		if (n < 0) { yield break; }
		yield return n;
	}
	public IComponent Build(BuildContext context) => null;
}
""",
			"Steps.cs",
		)
		assert "  *numbers(n) {\n    if (n < 0) {\n      return;\n    }\n    yield n;\n  }" in code


class TestDiagnostics:
	"""Unsupported member bodies are kept and reported."""

	def test_fallback_is_reported(self):
		source = """
class Odd : StatelessComponent
{
	public IComponent Build(BuildContext context)
	{
		goto end;
	}
}
"""
		module = extract_components(parse_compilation_unit(source), "Odd.cs")
		result = emit_module(module)
		assert "goto end;" in result.code
		assert [d.code for d in result.diagnostics] == ["unsupported.statement"]

	def test_custom_registry_is_used(self, counter_source):
		registry = ExpressionRegistry("expression")
		code = emit(counter_source, expression_registry=registry)
		assert registry.sealed
		assert "export class Counter" in code
