"""C# tokenizer: lexes source text into a flat token list."""

from __future__ import annotations

from dataclasses import dataclass

from sharpjs.errors import ParseError

TK_IDENT = "IDENT"
TK_NUMBER = "NUMBER"
TK_STRING = "STRING"
TK_CHAR = "CHAR"
TK_INTERP = "INTERP"
TK_OP = "OP"
TK_EOF = "EOF"

# Reserved words. Contextual keywords (var, async, await, when, and, or, not,
# record, get, set, init, ...) lex as identifiers and are recognized by the
# parser where they matter.
KEYWORDS: frozenset[str] = frozenset(
	{
		"abstract",
		"as",
		"base",
		"bool",
		"break",
		"byte",
		"case",
		"catch",
		"char",
		"checked",
		"class",
		"const",
		"continue",
		"decimal",
		"default",
		"delegate",
		"do",
		"double",
		"else",
		"enum",
		"event",
		"explicit",
		"extern",
		"false",
		"finally",
		"fixed",
		"float",
		"for",
		"foreach",
		"goto",
		"if",
		"implicit",
		"in",
		"int",
		"interface",
		"internal",
		"is",
		"lock",
		"long",
		"namespace",
		"new",
		"null",
		"object",
		"operator",
		"out",
		"override",
		"params",
		"private",
		"protected",
		"public",
		"readonly",
		"ref",
		"return",
		"sbyte",
		"sealed",
		"short",
		"sizeof",
		"stackalloc",
		"static",
		"string",
		"struct",
		"switch",
		"this",
		"throw",
		"true",
		"try",
		"typeof",
		"uint",
		"ulong",
		"unchecked",
		"unsafe",
		"ushort",
		"using",
		"virtual",
		"void",
		"volatile",
		"while",
	}
)

# Longest first for greedy matching. `>>` and `>>=` are deliberately absent:
# the parser joins adjacent `>` tokens so that nested generics close cleanly.
MULTI_OPS: tuple[str, ...] = (
	"??=",
	"<<=",
	"=>",
	"==",
	"!=",
	"<=",
	">=",
	"&&",
	"||",
	"??",
	"?.",
	"++",
	"--",
	"+=",
	"-=",
	"*=",
	"/=",
	"%=",
	"&=",
	"|=",
	"^=",
	"<<",
	"->",
	"::",
	"..",
)

SINGLE_OPS: frozenset[str] = frozenset("+-*/%&|^~!<>=()[]{},;:.?@#")

ESCAPES: dict[str, str] = {
	"n": "\n",
	"r": "\r",
	"t": "\t",
	"0": "\0",
	"a": "\a",
	"b": "\b",
	"f": "\f",
	"v": "\v",
	"\\": "\\",
	'"': '"',
	"'": "'",
}

_NUMBER_SUFFIXES = "fFdDmMlLuU"


@dataclass(slots=True)
class Token:
	"""A token with its type, value and source span.

	For STRING and CHAR tokens `value` holds the decoded content. For INTERP
	tokens it holds the raw text between the quotes and `verbatim` tells
	whether backslashes are literal.
	"""

	type: str
	value: str
	line: int
	col: int
	start: int
	end: int
	verbatim: bool = False

	def is_op(self, value: str) -> bool:
		return self.type == TK_OP and self.value == value


def _is_ident_start(c: str) -> bool:
	return c.isalpha() or c == "_"


def _is_ident_char(c: str) -> bool:
	return c.isalnum() or c == "_"


class Lexer:
	"""Single-pass scanner over a C# source string."""

	def __init__(self, source: str, line: int = 1, col: int = 1):
		self.src = source
		self.pos = 0
		self.line = line
		self.col = col
		self.tokens: list[Token] = []

	def error(self, msg: str) -> ParseError:
		return ParseError(msg, self.line, self.col)

	def _advance(self, n: int = 1) -> None:
		for _ in range(n):
			if self.src[self.pos] == "\n":
				self.line += 1
				self.col = 1
			else:
				self.col += 1
			self.pos += 1

	def _peek(self, offset: int = 0) -> str:
		idx = self.pos + offset
		return self.src[idx] if idx < len(self.src) else ""

	def tokenize(self) -> list[Token]:
		src = self.src
		while self.pos < len(src):
			c = src[self.pos]

			if c in " \t\r\n\f\v﻿":
				self._advance()
				continue

			if c == "/" and self._peek(1) == "/":
				while self.pos < len(src) and src[self.pos] != "\n":
					self._advance()
				continue

			if c == "/" and self._peek(1) == "*":
				end = src.find("*/", self.pos + 2)
				if end < 0:
					raise self.error("unterminated block comment")
				self._advance(end + 2 - self.pos)
				continue

			# Preprocessor directives only matter to the C# build; skip the line
			if c == "#" and self._at_line_start():
				while self.pos < len(src) and src[self.pos] != "\n":
					self._advance()
				continue

			start, line, col = self.pos, self.line, self.col

			if c == "$" or (c == "@" and self._peek(1) in ('"', "$")):
				self._lex_string_prefix(start, line, col)
				continue

			if c == '"':
				value = self._lex_regular_string()
				self._push(TK_STRING, value, start, line, col)
				continue

			if c == "'":
				value = self._lex_char()
				self._push(TK_CHAR, value, start, line, col)
				continue

			if c.isdigit() or (c == "." and self._peek(1).isdigit()):
				value = self._lex_number()
				self._push(TK_NUMBER, value, start, line, col)
				continue

			if _is_ident_start(c) or (c == "@" and _is_ident_start(self._peek(1))):
				if c == "@":
					self._advance()
				word_start = self.pos
				while self.pos < len(src) and _is_ident_char(src[self.pos]):
					self._advance()
				self._push(TK_IDENT, src[word_start : self.pos], start, line, col)
				continue

			for op in MULTI_OPS:
				if src.startswith(op, self.pos):
					self._advance(len(op))
					self._push(TK_OP, op, start, line, col)
					break
			else:
				if c not in SINGLE_OPS:
					raise self.error(f"unexpected character {c!r}")
				self._advance()
				self._push(TK_OP, c, start, line, col)

		self.tokens.append(Token(TK_EOF, "", self.line, self.col, self.pos, self.pos))
		return self.tokens

	def _at_line_start(self) -> bool:
		i = self.pos - 1
		while i >= 0 and self.src[i] in " \t":
			i -= 1
		return i < 0 or self.src[i] == "\n"

	def _push(self, type_: str, value: str, start: int, line: int, col: int) -> None:
		self.tokens.append(Token(type_, value, line, col, start, self.pos))

	def _lex_string_prefix(self, start: int, line: int, col: int) -> None:
		prefix = ""
		while self._peek() in ("$", "@"):
			prefix += self._peek()
			self._advance()
		if self._peek() != '"':
			raise self.error("expected string after prefix")
		verbatim = "@" in prefix
		if "$" not in prefix:
			value = self._lex_verbatim_string()
			self._push(TK_STRING, value, start, line, col)
			return
		raw = self._lex_interpolated(verbatim)
		self.tokens.append(Token(TK_INTERP, raw, line, col, start, self.pos, verbatim))

	def _lex_regular_string(self) -> str:
		self._advance()  # opening quote
		out: list[str] = []
		while True:
			c = self._peek()
			if c == "" or c == "\n":
				raise self.error("unterminated string literal")
			if c == '"':
				self._advance()
				return "".join(out)
			if c == "\\":
				out.append(self._lex_escape())
				continue
			out.append(c)
			self._advance()

	def _lex_verbatim_string(self) -> str:
		self._advance()
		out: list[str] = []
		while True:
			c = self._peek()
			if c == "":
				raise self.error("unterminated verbatim string")
			if c == '"':
				if self._peek(1) == '"':
					out.append('"')
					self._advance(2)
					continue
				self._advance()
				return "".join(out)
			out.append(c)
			self._advance()

	def _lex_interpolated(self, verbatim: bool) -> str:
		"""Scan an interpolated string body, tracking nested holes and strings."""
		self._advance()
		body_start = self.pos
		depth = 0
		while True:
			c = self._peek()
			if c == "" or (c == "\n" and not verbatim and depth == 0):
				raise self.error("unterminated interpolated string")
			if depth == 0:
				if c == '"':
					if verbatim and self._peek(1) == '"':
						self._advance(2)
						continue
					raw = self.src[body_start : self.pos]
					self._advance()
					return raw
				if c == "\\" and not verbatim:
					self._advance(2)
					continue
				if c == "{":
					if self._peek(1) == "{":
						self._advance(2)
						continue
					depth = 1
				self._advance()
				continue
			# Inside a hole
			if c == '"':
				self._lex_regular_string()
				continue
			if c == "'":
				self._lex_char()
				continue
			if c == "{":
				depth += 1
			elif c == "}":
				depth -= 1
			self._advance()

	def _lex_escape(self) -> str:
		self._advance()  # backslash
		c = self._peek()
		if c in ESCAPES:
			self._advance()
			return ESCAPES[c]
		if c in ("u", "x"):
			self._advance()
			digits = ""
			limit = 4
			while len(digits) < limit and self._peek() and self._peek() in "0123456789abcdefABCDEF":
				digits += self._peek()
				self._advance()
			if not digits:
				raise self.error(f"invalid \\{c} escape")
			return chr(int(digits, 16))
		raise self.error(f"invalid escape \\{c}")

	def _lex_char(self) -> str:
		self._advance()
		if self._peek() == "\\":
			value = self._lex_escape()
		else:
			value = self._peek()
			self._advance()
		if self._peek() != "'":
			raise self.error("unterminated character literal")
		self._advance()
		return value

	def _lex_number(self) -> str:
		src = self.src
		start = self.pos
		if src.startswith(("0x", "0X", "0b", "0B"), self.pos):
			self._advance(2)
			while self.pos < len(src) and (src[self.pos].isalnum() or src[self.pos] == "_"):
				if src[self.pos] in "uUlL":
					break
				self._advance()
		else:
			while self.pos < len(src) and (src[self.pos].isdigit() or src[self.pos] == "_"):
				self._advance()
			if self._peek() == "." and self._peek(1).isdigit():
				self._advance()
				while self.pos < len(src) and (src[self.pos].isdigit() or src[self.pos] == "_"):
					self._advance()
			if self._peek() in ("e", "E") and (
				self._peek(1).isdigit() or (self._peek(1) in "+-" and self._peek(2).isdigit())
			):
				self._advance(2)
				while self.pos < len(src) and src[self.pos].isdigit():
					self._advance()
		text = src[start : self.pos].replace("_", "")
		while self._peek() and self._peek() in _NUMBER_SUFFIXES:
			self._advance()
		return text


def tokenize(source: str, line: int = 1, col: int = 1) -> list[Token]:
	"""Tokenize C# source into a flat list ending with an EOF token."""
	return Lexer(source, line, col).tokenize()
