"""
Tests for component extraction: routes, server actions, state classes and
enums found in a compilation unit.
"""

from sharpjs.component import extract_components, fields_of, methods_of
from sharpjs.parser import parse_compilation_unit


def extract(source: str):
	return extract_components(parse_compilation_unit(source), "Counter.cs")


class TestExtraction:
	"""Components are classes deriving from the runtime component bases."""

	def test_counter(self, counter_source):
		module = extract(counter_source)
		assert [c.name for c in module.components] == ["Counter"]
		counter = module.components[0]
		assert counter.is_stateful
		assert counter.namespace == "App.Pages"
		assert counter.source_path == "Counter.cs"
		assert counter.state is not None
		assert counter.state.name == "CounterState"
		assert counter.state_class_name == "CounterState"

	def test_page_route(self, counter_source):
		counter = extract(counter_source).components[0]
		assert [(r.route, r.title) for r in counter.page_routes] == [("/counter", "Counter")]

	def test_server_action(self, counter_source):
		counter = extract(counter_source).components[0]
		(action,) = counter.server_actions
		assert action.name == "Save"
		assert action.action_id == "Counter/Save"
		assert action.parameters == ("value",)
		assert action.return_type == "Task<int>"
		assert action.is_async

	def test_body_class_is_the_state(self, counter_source):
		counter = extract(counter_source).components[0]
		assert [f.name for f in counter.fields] == ["_count", "items"]
		assert [m.name for m in counter.methods] == ["Increment", "Build"]

	def test_enums(self, counter_source):
		module = extract(counter_source)
		assert [e.name for e in module.enums] == ["Mode"]

	def test_runtime_members_are_skipped(self, counter_source):
		counter = extract(counter_source).components[0]
		assert methods_of(counter.declaration) == []

	def test_state_found_by_base_type(self):
		module = extract(
			"""
class Clock : StatefulComponent { }
class Ticker : ComponentState<Clock> { int ticks; }
"""
		)
		clock = module.components[0]
		assert clock.state is not None
		assert clock.state.name == "Ticker"

	def test_missing_state(self):
		module = extract("class Lonely : StatefulComponent { }")
		lonely = module.components[0]
		assert lonely.state is None
		assert lonely.state_class_name == "LonelyState"

	def test_stateless(self):
		module = extract('[Route("/hi")] class Hello : StatelessComponent { string Name = "x"; }')
		hello = module.components[0]
		assert not hello.is_stateful
		assert hello.state_class_name is None
		assert hello.page_routes[0].route == "/hi"
		assert hello.page_routes[0].title is None
		assert [f.name for f in fields_of(hello.body_class)] == ["Name"]

	def test_plain_classes_are_ignored(self):
		assert extract("class Util { }").components == []

	def test_nested_types(self):
		module = extract("class Outer { enum Inner { A } class Box : StatelessComponent { } }")
		assert [e.name for e in module.enums] == ["Inner"]
		assert [c.name for c in module.components] == ["Box"]
