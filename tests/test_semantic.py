"""
Tests for the binder and the semantic helper, and for conversions that
depend on declared types rather than on spelling.
"""

from sharpjs.converter import Converter
from sharpjs.parser import parse_compilation_unit, parse_expression
from sharpjs.semantic import (
	Binder,
	SemanticHelper,
	awaited_type,
	element_type,
	is_map_type,
	is_sequence_type,
	is_set_type,
)
from sharpjs.syntax import ClassDeclaration, MethodDeclaration, PropertyDeclaration

STORE = """
using System.Collections.Generic;

public class Store
{
	static int Limit = 3;
	private Dictionary<string, int> _counts = new();
	private HashSet<string> _seen = new();
	private List<string> _names = new();

	public int Total()
	{
		var total = 0;
		foreach (var (key, value) in _counts)
		{
			total += value;
		}
		return total;
	}

	public bool Seen(string k) => _seen.Contains(k);

	public int SeenCount => _seen.Count;

	public int NameCount => _names.Count;

	public bool Full() => _names.Count >= Limit;

	public int MonthOf(DateTime d) => d.Month;

	public int ThisYear => DateTime.Now.Year;

	public void Reset() => _names.Clear();

	public void Drop(string n)
	{
		_names.Remove(n);
		_counts.Clear();
	}

	public void Wire(Store other)
	{
		var mine = Total;
		var theirs = other.Total;
		Reset();
	}
}
"""


def store_member(name: str) -> str:
	unit = parse_compilation_unit(STORE)
	cls = unit.types[0]
	assert isinstance(cls, ClassDeclaration)
	converter = Converter(Binder(unit).bind_class(cls))
	for member in cls.members:
		if isinstance(member, MethodDeclaration) and member.name == name:
			assert member.body is not None
			return converter.convert_body(
				member.body, member.parameters, return_type=str(member.return_type)
			).code
		if isinstance(member, PropertyDeclaration) and member.name == name:
			assert member.getter is not None
			return converter.convert_body(member.getter, return_type=str(member.type)).code
	raise AssertionError(f"no member {name}")


# =============================================================================
# Type helpers
# =============================================================================


class TestTypeHelpers:
	"""Classification of written-out type names."""

	def test_collection_kinds(self):
		assert is_map_type("Dictionary<string, int>")
		assert is_map_type("IReadOnlyDictionary<string, User>")
		assert is_set_type("HashSet<int>")
		assert is_sequence_type("List<User>")
		assert is_sequence_type("int[]")
		assert not is_sequence_type("Dictionary<string, int>")
		assert not is_map_type(None)

	def test_element_type(self):
		assert element_type("List<User>") == "User"
		assert element_type("User[]") == "User"
		assert element_type("Dictionary<string, int>") == "KeyValuePair<string, int>"
		assert element_type("string") is None

	def test_awaited_type(self):
		assert awaited_type("Task<int>") == "int"
		assert awaited_type("Task") == "void"
		assert awaited_type("string") == "string"


# =============================================================================
# Helper without a model
# =============================================================================


class TestSemanticHelper:
	"""Every query is negative when no model is present."""

	def test_no_model(self):
		helper = SemanticHelper()
		node = parse_expression("xs")
		assert helper.symbol(node) is None
		assert helper.type_of(node) is None
		assert not helper.is_map_like(node)
		assert not helper.is_type_name(node)


# =============================================================================
# Binding
# =============================================================================


class TestBinder:
	"""Declared types drive member resolution and collection mappings."""

	def test_dictionary_iterates_entries(self):
		assert store_member("Total") == (
			"let total = 0;\n"
			"for (const [key, value] of Object.entries(this._counts)) {\n"
			"  total += value;\n"
			"}\n"
			"return total;"
		)

	def test_set_contains_becomes_has(self):
		assert store_member("Seen") == "return this._seen.has(k);"

	def test_set_count_becomes_size(self):
		assert store_member("SeenCount") == "return this._seen.size;"

	def test_list_count_becomes_length(self):
		assert store_member("NameCount") == "return this._names.length;"

	def test_static_field_is_qualified(self):
		assert store_member("Full") == "return this._names.length >= Store.limit;"

	def test_method_group_is_bound(self):
		assert store_member("Wire") == (
			"let mine = this.total.bind(this);\n"
			"let theirs = other.total.bind(other);\n"
			"this.reset();"
		)

	def test_list_remove_and_dictionary_clear(self):
		assert store_member("Drop") == (
			"(($i) => $i >= 0 && this._names.splice($i, 1).length > 0)(this._names.indexOf(n));\n"
			"Object.keys(this._counts).forEach(($k) => delete this._counts[$k]);"
		)

	def test_typed_date_parts(self):
		assert store_member("MonthOf") == "return d.getMonth() + 1;"
		assert store_member("ThisYear") == "return new Date().getFullYear();"

	def test_members_of(self):
		unit = parse_compilation_unit(STORE)
		cls = unit.types[0]
		assert isinstance(cls, ClassDeclaration)
		members = Binder(unit).members_of(cls)
		assert members["_counts"].kind == "field"
		assert members["_counts"].type == "Dictionary<string, int>"
		assert members["Limit"].is_static
		assert members["Total"].kind == "method"
		assert members["SeenCount"].kind == "property"

	def test_bind_class_records_symbols(self):
		unit = parse_compilation_unit(STORE)
		cls = unit.types[0]
		assert isinstance(cls, ClassDeclaration)
		assert len(Binder(unit).bind_class(cls)) > 0
