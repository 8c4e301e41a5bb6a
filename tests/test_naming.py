from sharpjs.naming import simple_type_name, split_generic, to_camel_case


class TestCamelCase:
	def test_simple(self):
		assert to_camel_case("FirstName") == "firstName"

	def test_acronyms(self):
		assert to_camel_case("HTMLParser") == "htmlParser"
		assert to_camel_case("ID") == "id"
		assert to_camel_case("IOStream") == "ioStream"

	def test_acronym_before_digit(self):
		assert to_camel_case("UTF8Text") == "utf8Text"

	def test_idempotent(self):
		assert to_camel_case("count") == "count"
		assert to_camel_case("_count") == "_count"
		assert to_camel_case(to_camel_case("HTMLParser")) == "htmlParser"


class TestTypeNames:
	def test_split_generic(self):
		assert split_generic("Dictionary<string, List<int>>") == ("Dictionary", ["string", "List<int>"])
		assert split_generic("int?") == ("int", [])
		assert split_generic("Func<(int, int), bool>") == ("Func", ["(int, int)", "bool"])

	def test_simple_type_name(self):
		assert simple_type_name("System.Collections.Generic.List<int>?") == "List"
		assert simple_type_name("User[][]") == "User"
