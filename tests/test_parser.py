"""
Tests for the C# front end: tokenizer and parser.
"""

import pytest
from sharpjs.errors import ParseError
from sharpjs.lexer import TK_CHAR, TK_EOF, TK_IDENT, TK_INTERP, TK_NUMBER, TK_STRING, tokenize
from sharpjs.parser import (
	parse_compilation_unit,
	parse_expression,
	parse_statement,
	parse_statements,
)
from sharpjs.syntax import (
	Binary,
	ClassDeclaration,
	EnumDeclaration,
	ForEach,
	Identifier,
	Invocation,
	Lambda,
	Literal,
	LocalDeclaration,
	MemberAccess,
	MethodDeclaration,
	Return,
	UnparsedStatement,
	YieldStatement,
)

# =============================================================================
# Tokenizer
# =============================================================================


class TestTokenize:
	"""Token kinds, decoded values and positions."""

	def test_keywords_lex_as_identifiers(self):
		tokens = tokenize("return var x")
		assert [t.type for t in tokens] == [TK_IDENT, TK_IDENT, TK_IDENT, TK_EOF]

	def test_string_is_decoded(self):
		(token, _) = tokenize(r'"a\tb\"c"')
		assert token.type == TK_STRING
		assert token.value == 'a\tb"c'

	def test_verbatim_string(self):
		(token, _) = tokenize('@"C:\\dir ""x"""')
		assert token.type == TK_STRING
		assert token.value == 'C:\\dir "x"'

	def test_interpolated_string_keeps_raw_body(self):
		(token, _) = tokenize('$"Hi {name}"')
		assert token.type == TK_INTERP
		assert token.value == "Hi {name}"

	def test_char(self):
		(token, _) = tokenize("'\\n'")
		assert token.type == TK_CHAR
		assert token.value == "\n"

	def test_number_suffix_is_dropped(self):
		(token, _) = tokenize("1_000m")
		assert token.type == TK_NUMBER
		assert token.value == "1000"

	def test_comments_and_directives_are_skipped(self):
		tokens = tokenize("#nullable enable\n// note\nx /* y */")
		assert [t.value for t in tokens] == ["x", ""]

	def test_positions(self):
		tokens = tokenize("a\n  b")
		assert (tokens[1].line, tokens[1].col) == (2, 3)

	def test_unterminated_string(self):
		with pytest.raises(ParseError) as exc:
			tokenize('"abc')
		assert exc.value.line == 1

	def test_unexpected_character(self):
		with pytest.raises(ParseError):
			tokenize("a ` b")


# =============================================================================
# Expressions and statements
# =============================================================================


class TestParseExpression:
	"""Expression precedence and shapes."""

	def test_precedence(self):
		expr = parse_expression("a + b * c")
		assert isinstance(expr, Binary)
		assert expr.op == "+"
		assert isinstance(expr.right, Binary)
		assert expr.right.op == "*"

	def test_call_chain(self):
		expr = parse_expression("items.Where(x => x.Done).Count()")
		assert isinstance(expr, Invocation)
		assert isinstance(expr.target, MemberAccess)
		assert expr.target.name == "Count"
		inner = expr.target.target
		assert isinstance(inner, Invocation)
		assert isinstance(inner.arguments[0].expression, Lambda)

	def test_literal(self):
		expr = parse_expression("42")
		assert isinstance(expr, Literal)
		assert expr.literal_kind == "number"

	def test_source_text_is_kept(self):
		expr = parse_expression("Foo( 1 )")
		assert expr.text == "Foo( 1 )"

	def test_trailing_tokens(self):
		with pytest.raises(ParseError):
			parse_expression("a b")

	def test_generic_call(self):
		expr = parse_expression("services.GetService<List<int>>()")
		assert isinstance(expr, Invocation)
		assert isinstance(expr.target, MemberAccess)
		assert [str(t) for t in expr.target.type_args] == ["List<int>"]

	def test_less_than_is_not_generic(self):
		expr = parse_expression("a < b")
		assert isinstance(expr, Binary)
		assert isinstance(expr.left, Identifier)


class TestParseStatement:
	"""Statement parsing."""

	def test_local_declaration(self):
		stmt = parse_statement("var x = 1, y = 2;")
		assert isinstance(stmt, LocalDeclaration)
		assert stmt.type is None
		assert [d.name for d in stmt.declarators] == ["x", "y"]

	def test_return(self):
		stmt = parse_statement("return;")
		assert isinstance(stmt, Return)
		assert stmt.expression is None

	def test_foreach_deconstruction(self):
		stmt = parse_statement("foreach (var (k, v) in pairs) { }")
		assert isinstance(stmt, ForEach)
		assert stmt.variable == ("k", "v")

	def test_yield(self):
		stmt = parse_statement("yield return x + 1;")
		assert isinstance(stmt, YieldStatement)
		assert isinstance(stmt.expression, Binary)
		stop = parse_statement("yield break;")
		assert isinstance(stop, YieldStatement)
		assert stop.expression is None

	def test_unmodelled_statement(self):
		stmt = parse_statement("goto done;")
		assert isinstance(stmt, UnparsedStatement)
		assert stmt.keyword == "goto"

	def test_statement_list(self):
		assert len(parse_statements("a(); b(); ; c();")) == 4

	def test_trailing_tokens(self):
		with pytest.raises(ParseError):
			parse_statement("a(); b();")


# =============================================================================
# Compilation units
# =============================================================================


class TestParseCompilationUnit:
	"""Usings, namespaces, types and members."""

	def test_file_scoped_namespace(self):
		unit = parse_compilation_unit(
			"""
using System;
namespace App.Pages;

public enum Mode { Off, On }

[Page("/home")]
public class Home : StatelessComponent
{
	public string Title { get; set; } = "Home";
	public IComponent Build(BuildContext context) => new Text(Title);
}
"""
		)
		assert unit.usings == ("System",)
		assert unit.namespace == "App.Pages"
		enum, cls = unit.types
		assert isinstance(enum, EnumDeclaration)
		assert [m.name for m in enum.members] == ["Off", "On"]
		assert isinstance(cls, ClassDeclaration)
		assert cls.attributes[0].name == "Page"
		assert [t.base_name for t in cls.base_types] == ["StatelessComponent"]
		build = cls.members[1]
		assert isinstance(build, MethodDeclaration)
		assert str(build.return_type) == "IComponent"
		assert [p.name for p in build.parameters] == ["context"]

	def test_missing_brace(self):
		with pytest.raises(ParseError):
			parse_compilation_unit("class A {")
