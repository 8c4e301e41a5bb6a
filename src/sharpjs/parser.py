"""
Recursive descent parser for the C# subset used by component code.

Covers namespaces, classes/records/structs/interfaces/enums with fields,
properties, methods and constructors, the usual statement forms and the
expression grammar including lambdas, patterns, switch expressions, object
and collection initializers and interpolated strings. Anything it does not
model at statement level becomes an `UnparsedStatement` so that conversion
can fall back to the verbatim source.
"""

from __future__ import annotations

from typing import Any

from sharpjs.errors import ParseError
from sharpjs.lexer import (
	ESCAPES,
	KEYWORDS,
	TK_CHAR,
	TK_EOF,
	TK_IDENT,
	TK_INTERP,
	TK_NUMBER,
	TK_OP,
	TK_STRING,
	Token,
	tokenize,
)
from sharpjs.syntax import (
	PREDEFINED_TYPES,
	AnonymousObject,
	Argument,
	ArrayCreation,
	As,
	Assignment,
	Attribute,
	Await,
	Base,
	Binary,
	BinaryPattern,
	Block,
	Break,
	CaseLabel,
	Cast,
	CatchClause,
	ClassDeclaration,
	CollectionExpression,
	CompilationUnit,
	Conditional,
	ConstantPattern,
	ConstructorDeclaration,
	Continue,
	DeclarationExpression,
	DeclarationPattern,
	DefaultValue,
	DiscardPattern,
	DoWhile,
	ElementAccess,
	Empty,
	EnumDeclaration,
	EnumMember,
	Expression,
	ExpressionStatement,
	FieldDeclaration,
	For,
	ForEach,
	Identifier,
	If,
	IndexInit,
	Initializer,
	InitElement,
	InterpolatedString,
	Interpolation,
	Invocation,
	IsPattern,
	Lambda,
	ListPattern,
	Literal,
	LocalDeclaration,
	LocalFunction,
	Lock,
	MemberAccess,
	MemberDeclaration,
	MemberInit,
	MethodDeclaration,
	NotPattern,
	ObjectCreation,
	Parameter,
	Parenthesized,
	Pattern,
	Postfix,
	PropertyDeclaration,
	PropertyPattern,
	RangeExpression,
	RelationalPattern,
	Return,
	SizeOf,
	Spread,
	Statement,
	Subpattern,
	SwitchArm,
	SwitchExpression,
	SwitchSection,
	SwitchStatement,
	This,
	Throw,
	ThrowExpression,
	Try,
	TupleExpression,
	TypeOf,
	TypePattern,
	TypeRef,
	Unary,
	UnparsedStatement,
	Using,
	VariableDeclarator,
	VarPattern,
	While,
	WithExpression,
	YieldStatement,
)

MODIFIERS: frozenset[str] = frozenset(
	{
		"abstract",
		"const",
		"extern",
		"internal",
		"new",
		"override",
		"private",
		"protected",
		"public",
		"readonly",
		"sealed",
		"static",
		"unsafe",
		"virtual",
		"volatile",
		"implicit",
		"explicit",
	}
)

# Contextual modifiers only count when another identifier follows them
CONTEXTUAL_MODIFIERS: frozenset[str] = frozenset(
	{"async", "partial", "required", "file"}
)

ASSIGN_OPS: frozenset[str] = frozenset(
	{"=", "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<=", "??="}
)

# Tokens that may follow a generic argument list in expression context
GENERIC_FOLLOW: frozenset[str] = frozenset(
	{"(", ")", "]", "}", ":", ";", ",", ".", "?", "?.", "==", "!=", "|", "^", "&&", "||", "&", "["}
)

# Identifiers that end a constant pattern or a declaration name
_PATTERN_WORDS: frozenset[str] = frozenset({"when", "and", "or", "not", "switch", "with", "is", "as"})

_UNPARSED_KEYWORDS: frozenset[str] = frozenset({"goto", "unsafe", "fixed", "checked", "unchecked"})


class Parser:
	"""Recursive descent parser over a token list."""

	def __init__(self, source: str, *, line: int = 1, col: int = 1):
		self.source: str = source
		self.tokens: list[Token] = tokenize(source, line, col)
		self.pos: int = 0
		self._no_lambda: bool = False

	# -- Helpers --------------------------------------------------------------

	def current(self) -> Token:
		return self.tokens[self.pos]

	def peek(self, offset: int = 1) -> Token:
		idx = self.pos + offset
		if idx >= len(self.tokens):
			return self.tokens[-1]
		return self.tokens[idx]

	def advance(self) -> Token:
		tok = self.tokens[self.pos]
		if tok.type != TK_EOF:
			self.pos += 1
		return tok

	def at(self, value: str) -> bool:
		tok = self.current()
		return tok.value == value and tok.type in (TK_OP, TK_IDENT)

	def at_eof(self) -> bool:
		return self.current().type == TK_EOF

	def at_ident(self) -> bool:
		tok = self.current()
		return tok.type == TK_IDENT and tok.value not in KEYWORDS

	def expect(self, value: str) -> Token:
		if not self.at(value):
			raise self.error(f"expected '{value}', got '{self.current().value or 'end of input'}'")
		return self.advance()

	def expect_ident(self) -> Token:
		if not self.at_ident():
			raise self.error(f"expected identifier, got '{self.current().value or 'end of input'}'")
		return self.advance()

	def accept(self, value: str) -> bool:
		if self.at(value):
			self.advance()
			return True
		return False

	def error(self, msg: str) -> ParseError:
		tok = self.current()
		return ParseError(msg, tok.line, tok.col)

	def span(self, start: Token) -> dict[str, Any]:
		"""Source text and position of everything consumed since `start`."""
		end = self.tokens[self.pos - 1].end if self.pos > 0 else start.start
		return {
			"text": self.source[start.start : max(end, start.start)],
			"line": start.line,
			"column": start.col,
		}

	def _adjacent(self, a: Token, b: Token) -> bool:
		return a.end == b.start

	def _at_shift_right(self) -> bool:
		"""Two adjacent `>` tokens form `>>` (not followed by `=`)."""
		tok = self.current()
		nxt = self.peek()
		return tok.is_op(">") and nxt.is_op(">") and self._adjacent(tok, nxt)

	# -- Compilation unit ---------------------------------------------------------

	def parse_compilation_unit(self) -> CompilationUnit:
		start = self.current()
		usings: list[str] = []
		types: list[ClassDeclaration | EnumDeclaration] = []
		namespace = self._parse_namespace_members(None, usings, types, top_level=True)
		return CompilationUnit(tuple(usings), namespace, tuple(types), **self.span(start))

	def _parse_namespace_members(
		self,
		namespace: str | None,
		usings: list[str],
		types: list[ClassDeclaration | EnumDeclaration],
		top_level: bool,
	) -> str | None:
		file_namespace = namespace
		while not self.at_eof() and not (not top_level and self.at("}")):
			if self.at("global") and self.peek().value == "using":
				self.advance()
			if self.at("using"):
				usings.append(self._parse_using_directive())
				continue
			if self.at("namespace"):
				self.advance()
				name = self._parse_qualified_name()
				full = f"{namespace}.{name}" if namespace else name
				if self.accept(";"):
					file_namespace = full
					namespace = full
					continue
				self.expect("{")
				self._parse_namespace_members(full, usings, types, top_level=False)
				self.expect("}")
				continue
			if self.accept(";"):
				continue
			decl = self.parse_type_declaration(namespace)
			if isinstance(decl, (ClassDeclaration, EnumDeclaration)):
				types.append(decl)
		return file_namespace

	def _parse_using_directive(self) -> str:
		self.expect("using")
		parts: list[str] = []
		while not self.at(";"):
			if self.at_eof():
				raise self.error("unterminated using directive")
			parts.append(self.advance().value)
		self.expect(";")
		text = " ".join(parts)
		return text.replace(" . ", ".").replace(" .", ".").replace(". ", ".")

	def _parse_qualified_name(self) -> str:
		name = self.expect_ident().value
		while self.at(".") or self.at("::"):
			self.advance()
			name += "." + self.expect_ident().value
		return name

	# -- Type declarations -----------------------------------------------------------

	def parse_attributes(self) -> tuple[Attribute, ...]:
		attrs: list[Attribute] = []
		while self.at("["):
			self.advance()
			# Attribute targets: [return: Foo], [assembly: Bar]
			if self.current().type == TK_IDENT and self.peek().is_op(":"):
				self.advance()
				self.advance()
			while True:
				start = self.current()
				name = self._parse_qualified_name()
				args: tuple[Argument, ...] = ()
				if self.at("("):
					args = self.parse_arguments()
				attrs.append(Attribute(name.rsplit(".", 1)[-1], args, **self.span(start)))
				if not self.accept(","):
					break
			self.expect("]")
		return tuple(attrs)

	def parse_modifiers(self) -> tuple[str, ...]:
		mods: list[str] = []
		while True:
			tok = self.current()
			if tok.type != TK_IDENT:
				break
			if tok.value in MODIFIERS:
				mods.append(self.advance().value)
				continue
			if tok.value in CONTEXTUAL_MODIFIERS and self.peek().type == TK_IDENT:
				mods.append(self.advance().value)
				continue
			break
		return tuple(mods)

	def parse_type_declaration(self, namespace: str | None) -> MemberDeclaration | None:
		start = self.current()
		attributes = self.parse_attributes()
		modifiers = self.parse_modifiers()
		if self.at("delegate"):
			self._skip_member()
			return None
		if self.at("enum"):
			return self._parse_enum(start, modifiers, namespace)
		keyword = self.current().value
		if keyword == "record":
			self.advance()
			if self.at("class") or self.at("struct"):
				self.advance()
		elif keyword in ("class", "struct", "interface"):
			self.advance()
		else:
			raise self.error(f"expected type declaration, got '{keyword or 'end of input'}'")
		name = self.expect_ident().value
		type_parameters = self._parse_type_parameter_list()
		primary: tuple[Parameter, ...] = ()
		if self.at("("):
			primary = self.parse_parameters()
		bases: list[TypeRef] = []
		if self.accept(":"):
			bases.append(self.parse_type())
			if self.at("("):
				self.parse_arguments()
			while self.accept(","):
				bases.append(self.parse_type())
		self._skip_constraints()
		members: list[MemberDeclaration] = []
		if self.accept("{"):
			while not self.at("}"):
				if self.at_eof():
					raise self.error(f"unterminated declaration of '{name}'")
				member = self.parse_member(name, namespace)
				if member is not None:
					members.append(member)
			self.expect("}")
		self.accept(";")
		return ClassDeclaration(
			name,
			tuple(members),
			tuple(bases),
			modifiers,
			attributes,
			type_parameters,
			keyword,
			namespace,
			primary,
			**self.span(start),
		)

	def _parse_enum(
		self, start: Token, modifiers: tuple[str, ...], namespace: str | None
	) -> EnumDeclaration:
		self.expect("enum")
		name = self.expect_ident().value
		if self.accept(":"):
			self.parse_type()
		self.expect("{")
		members: list[EnumMember] = []
		while not self.at("}"):
			self.parse_attributes()
			tok = self.current()
			member_name = self.expect_ident().value
			value = self.parse_expression() if self.accept("=") else None
			members.append(EnumMember(member_name, value, **self.span(tok)))
			if not self.accept(","):
				break
		self.expect("}")
		self.accept(";")
		return EnumDeclaration(name, tuple(members), modifiers, namespace, **self.span(start))

	def _parse_type_parameter_list(self) -> tuple[str, ...]:
		if not self.at("<"):
			return ()
		self.advance()
		names: list[str] = []
		while True:
			self.parse_attributes()
			if self.at("in") or self.at("out"):
				self.advance()
			names.append(self.expect_ident().value)
			if not self.accept(","):
				break
		self.expect(">")
		return tuple(names)

	def _skip_constraints(self) -> None:
		while self.at("where"):
			while not (self.at("{") or self.at(";") or self.at("=>") or self.at_eof()):
				if self.at("where") and self.peek(-1).value != ":":
					self.advance()
					continue
				self.advance()

	def _skip_member(self) -> None:
		"""Skip a member this front end does not model (events, indexers, operators)."""
		depth = 0
		while not self.at_eof():
			tok = self.advance()
			if tok.is_op("{") or tok.is_op("(") or tok.is_op("["):
				depth += 1
			elif tok.is_op("}") or tok.is_op(")") or tok.is_op("]"):
				depth -= 1
				if depth == 0 and tok.is_op("}"):
					if self.at("=") or self.at("=>"):
						continue
					self.accept(";")
					return
			elif tok.is_op(";") and depth == 0:
				return

	def parse_member(self, class_name: str, namespace: str | None) -> MemberDeclaration | None:
		start = self.current()
		mark = self.pos
		attributes = self.parse_attributes()
		modifiers = self.parse_modifiers()
		tok = self.current()

		if tok.value in ("class", "struct", "interface", "enum", "delegate") or (
			tok.value == "record" and self.peek().type == TK_IDENT
		):
			self.pos = mark
			return self.parse_type_declaration(namespace)

		if tok.is_op("~") or tok.value in ("event", "operator"):
			self._skip_member()
			return None

		if tok.value == class_name and self.peek().is_op("("):
			self.advance()
			params = self.parse_parameters()
			if self.accept(":"):
				self.advance()  # base / this
				self.parse_arguments()
			body = self._parse_body()
			return ConstructorDeclaration(class_name, params, body, modifiers, **self.span(start))

		type_ = self.parse_type()
		if self.at("operator") or (self.at("this") and self.peek().is_op("[")):
			self._skip_member()
			return None

		name_tok = self.expect_ident()
		name = name_tok.value
		# Explicit interface implementations: IFoo.Bar
		while self.at(".") and self.peek().type == TK_IDENT:
			self.advance()
			name = self.expect_ident().value

		if self.at("(") or self.at("<"):
			type_parameters = self._parse_type_parameter_list()
			params = self.parse_parameters()
			self._skip_constraints()
			body = self._parse_body()
			return MethodDeclaration(
				name,
				type_,
				params,
				body,
				modifiers,
				attributes,
				type_parameters,
				**self.span(start),
			)

		if self.at("{") or self.at("=>"):
			return self._parse_property(start, type_, name, modifiers, attributes)

		declarators = self._parse_declarators(name_tok)
		self.expect(";")
		return FieldDeclaration(type_, declarators, modifiers, attributes, **self.span(start))

	def _parse_body(self) -> Block | Expression | None:
		if self.at("{"):
			return self.parse_block()
		if self.accept("=>"):
			expr = self.parse_expression()
			self.expect(";")
			return expr
		self.expect(";")
		return None

	def _parse_property(
		self,
		start: Token,
		type_: TypeRef,
		name: str,
		modifiers: tuple[str, ...],
		attributes: tuple[Attribute, ...],
	) -> PropertyDeclaration:
		if self.accept("=>"):
			getter = self.parse_expression()
			self.expect(";")
			return PropertyDeclaration(
				type_, name, modifiers, attributes, getter=getter, **self.span(start)
			)
		self.expect("{")
		getter: Block | Expression | None = None
		setter: Block | Expression | None = None
		is_auto = False
		while not self.at("}"):
			self.parse_attributes()
			self.parse_modifiers()
			accessor = self.expect_ident().value
			if accessor not in ("get", "set", "init"):
				raise self.error(f"unexpected accessor '{accessor}'")
			body: Block | Expression | None
			if self.accept(";"):
				is_auto = True
				body = None
			elif self.accept("=>"):
				body = self.parse_expression()
				self.expect(";")
			else:
				body = self.parse_block()
			if accessor == "get":
				getter = body
			else:
				setter = body
		self.expect("}")
		initializer = None
		if self.accept("="):
			initializer = self.parse_expression()
			self.expect(";")
		return PropertyDeclaration(
			type_,
			name,
			modifiers,
			attributes,
			getter,
			setter,
			initializer,
			is_auto,
			**self.span(start),
		)

	def parse_parameters(self) -> tuple[Parameter, ...]:
		self.expect("(")
		params: list[Parameter] = []
		saved, self._no_lambda = self._no_lambda, False
		while not self.at(")"):
			start = self.current()
			self.parse_attributes()
			modifier = None
			while self.current().value in ("this", "params", "ref", "out", "in", "scoped", "readonly"):
				modifier = self.advance().value
			type_ = self.parse_type()
			name = self.expect_ident().value
			default = self.parse_expression() if self.accept("=") else None
			params.append(Parameter(name, type_, modifier, default, **self.span(start)))
			if not self.accept(","):
				break
		self._no_lambda = saved
		self.expect(")")
		return tuple(params)

	# -- Types -------------------------------------------------------------------

	def parse_type(self, *, allow_nullable: bool = True, allow_array: bool = True) -> TypeRef:
		start = self.current()
		if self.at("("):
			self.advance()
			elements: list[TypeRef] = []
			while True:
				elements.append(self.parse_type())
				if self.at_ident():
					self.advance()  # element name
				if not self.accept(","):
					break
			self.expect(")")
			base = TypeRef("ValueTuple", tuple(elements), **self.span(start))
		else:
			tok = self.current()
			if tok.type != TK_IDENT or (tok.value in KEYWORDS and tok.value not in PREDEFINED_TYPES):
				raise self.error(f"expected type, got '{tok.value or 'end of input'}'")
			name = self.advance().value
			if name == "global" and self.at("::"):
				self.advance()
				name = self.expect_ident().value
			args: tuple[TypeRef, ...] = ()
			while True:
				if self.at("<"):
					args = self._parse_type_args()
				if self.at(".") and self.peek().type == TK_IDENT and self.peek().value not in KEYWORDS:
					self.advance()
					name += "." + self.advance().value
					args = ()
					continue
				break
			base = TypeRef(name, args, **self.span(start))
		nullable = False
		if allow_nullable and self.at("?") and self._nullable_follows():
			self.advance()
			nullable = True
		rank = 0
		while allow_array and self.at("[") and (self.peek().is_op("]") or self.peek().is_op(",")):
			self.advance()
			while self.accept(","):
				pass
			self.expect("]")
			rank += 1
		if nullable or rank:
			return TypeRef(base.name, base.args, nullable, rank, **self.span(start))
		return base

	def _nullable_follows(self) -> bool:
		nxt = self.peek()
		if nxt.type == TK_OP:
			return nxt.value in (">", ",", ")", "[", "]", ";", "=", "{")
		if nxt.type == TK_IDENT:
			after = self.peek(2)
			return after.value in ("=", ";", ",", ")", "{", "=>", "in") or after.type == TK_EOF
		return False

	def _parse_type_args(self) -> tuple[TypeRef, ...]:
		self.expect("<")
		args: list[TypeRef] = []
		while True:
			args.append(self.parse_type())
			if not self.accept(","):
				break
		self.expect(">")
		return tuple(args)

	def _try_generic_args(self) -> tuple[TypeRef, ...] | None:
		"""Speculatively parse `<...>` after a name in expression context."""
		mark = self.pos
		try:
			args = self._parse_type_args()
		except ParseError:
			self.pos = mark
			return None
		tok = self.current()
		if tok.type == TK_EOF or (tok.type == TK_OP and tok.value in GENERIC_FOLLOW):
			return args
		self.pos = mark
		return None

	# -- Statements ----------------------------------------------------------------

	def parse_block(self) -> Block:
		start = self.expect("{")
		stmts: list[Statement] = []
		while not self.at("}"):
			if self.at_eof():
				raise self.error("unterminated block")
			stmts.append(self.parse_statement())
		self.expect("}")
		return Block(tuple(stmts), **self.span(start))

	def parse_statement(self) -> Statement:
		start = self.current()
		value = start.value if start.type in (TK_IDENT, TK_OP) else ""

		if value == "{":
			return self.parse_block()
		if value == ";":
			self.advance()
			return Empty(**self.span(start))
		if value == "if":
			return self._parse_if()
		if value == "while":
			self.advance()
			self.expect("(")
			cond = self.parse_expression()
			self.expect(")")
			body = self.parse_statement()
			return While(cond, body, **self.span(start))
		if value == "do":
			self.advance()
			body = self.parse_statement()
			self.expect("while")
			self.expect("(")
			cond = self.parse_expression()
			self.expect(")")
			self.expect(";")
			return DoWhile(body, cond, **self.span(start))
		if value == "for":
			return self._parse_for()
		if value == "foreach":
			return self._parse_foreach(start, is_await=False)
		if value == "await" and self.peek().value == "foreach":
			self.advance()
			return self._parse_foreach(start, is_await=True)
		if value == "return":
			self.advance()
			expr = None if self.at(";") else self.parse_expression()
			self.expect(";")
			return Return(expr, **self.span(start))
		if value == "yield" and self.peek().value in ("return", "break"):
			self.advance()
			expr = self.parse_expression() if self.advance().value == "return" else None
			self.expect(";")
			return YieldStatement(expr, **self.span(start))
		if value == "break":
			self.advance()
			self.expect(";")
			return Break(**self.span(start))
		if value == "continue":
			self.advance()
			self.expect(";")
			return Continue(**self.span(start))
		if value == "throw":
			self.advance()
			expr = None if self.at(";") else self.parse_expression()
			self.expect(";")
			return Throw(expr, **self.span(start))
		if value == "switch":
			return self._parse_switch_statement()
		if value == "try":
			return self._parse_try()
		if value == "lock":
			self.advance()
			self.expect("(")
			expr = self.parse_expression()
			self.expect(")")
			body = self.parse_statement()
			return Lock(expr, body, **self.span(start))
		if value == "using" or (value == "await" and self.peek().value == "using"):
			return self._parse_using(start)
		if value == "const":
			self.advance()
			decl = self._parse_local_declaration(start, is_const=True)
			self.expect(";")
			return decl
		if value in _UNPARSED_KEYWORDS and not self.peek().is_op("("):
			return self._parse_unparsed(start)
		if start.type == TK_IDENT and self.peek().is_op(":") and start.value not in KEYWORDS:
			return self._parse_unparsed(start)

		local = self._try_local_function() or self._try_local_declaration()
		if local is not None:
			return local

		expr = self.parse_expression()
		self.expect(";")
		return ExpressionStatement(expr, **self.span(start))

	def _parse_unparsed(self, start: Token) -> UnparsedStatement:
		depth = 0
		while not self.at_eof():
			tok = self.advance()
			if tok.is_op("{") or tok.is_op("("):
				depth += 1
			elif tok.is_op("}") or tok.is_op(")"):
				depth -= 1
				if depth == 0 and tok.is_op("}"):
					break
			elif tok.is_op(";") and depth == 0:
				break
		return UnparsedStatement(start.value, **self.span(start))

	def _parse_if(self) -> If:
		start = self.expect("if")
		self.expect("(")
		cond = self.parse_expression()
		self.expect(")")
		then = self.parse_statement()
		else_ = self.parse_statement() if self.accept("else") else None
		return If(cond, then, else_, **self.span(start))

	def _parse_for(self) -> For:
		start = self.expect("for")
		self.expect("(")
		declaration: LocalDeclaration | None = None
		initializers: list[Expression] = []
		if not self.at(";"):
			declaration = self._try_local_declaration(terminated=False)
			if declaration is None:
				initializers.append(self.parse_expression())
				while self.accept(","):
					initializers.append(self.parse_expression())
		self.expect(";")
		cond = None if self.at(";") else self.parse_expression()
		self.expect(";")
		incrementors: list[Expression] = []
		if not self.at(")"):
			incrementors.append(self.parse_expression())
			while self.accept(","):
				incrementors.append(self.parse_expression())
		self.expect(")")
		body = self.parse_statement()
		return For(
			declaration, tuple(initializers), cond, tuple(incrementors), body, **self.span(start)
		)

	def _parse_foreach(self, start: Token, is_await: bool) -> ForEach:
		self.expect("foreach")
		self.expect("(")
		type_: TypeRef | None = None
		variable: str | tuple[str, ...]
		if self.at("var") and self.peek().is_op("("):
			self.advance()
			variable = self._parse_deconstruction()
		elif self.at("("):
			variable = self._parse_deconstruction()
		else:
			type_ = self.parse_type()
			if type_.is_var:
				type_ = None
			variable = self.expect_ident().value
		self.expect("in")
		expr = self.parse_expression()
		self.expect(")")
		body = self.parse_statement()
		return ForEach(type_, variable, expr, body, is_await, **self.span(start))

	def _parse_deconstruction(self) -> tuple[str, ...]:
		self.expect("(")
		names: list[str] = []
		while True:
			if self.current().type == TK_IDENT and self.peek().type == TK_IDENT:
				self.parse_type()
			names.append(self.expect_ident().value)
			if not self.accept(","):
				break
		self.expect(")")
		return tuple(names)

	def _parse_switch_statement(self) -> SwitchStatement:
		start = self.expect("switch")
		self.expect("(")
		governing = self.parse_expression()
		self.expect(")")
		self.expect("{")
		sections: list[SwitchSection] = []
		while not self.at("}"):
			section_start = self.current()
			labels: list[CaseLabel] = []
			while self.at("case") or (self.at("default") and self.peek().is_op(":")):
				label_start = self.advance()
				if label_start.value == "default":
					self.expect(":")
					labels.append(CaseLabel(None, **self.span(label_start)))
					continue
				pattern = self.parse_pattern()
				guard = self._parse_guard()
				self.expect(":")
				labels.append(CaseLabel(pattern, guard, **self.span(label_start)))
			if not labels:
				raise self.error("expected 'case' or 'default'")
			stmts: list[Statement] = []
			while not (
				self.at("}") or self.at("case") or (self.at("default") and self.peek().is_op(":"))
			):
				if self.at_eof():
					raise self.error("unterminated switch")
				stmts.append(self.parse_statement())
			sections.append(SwitchSection(tuple(labels), tuple(stmts), **self.span(section_start)))
		self.expect("}")
		return SwitchStatement(governing, tuple(sections), **self.span(start))

	def _parse_guard(self) -> Expression | None:
		if not self.accept("when"):
			return None
		saved, self._no_lambda = self._no_lambda, True
		try:
			return self.parse_expression()
		finally:
			self._no_lambda = saved

	def _parse_try(self) -> Try:
		start = self.expect("try")
		block = self.parse_block()
		catches: list[CatchClause] = []
		while self.at("catch"):
			catch_start = self.advance()
			type_: TypeRef | None = None
			name: str | None = None
			if self.accept("("):
				type_ = self.parse_type()
				if self.at_ident():
					name = self.advance().value
				self.expect(")")
			filter_ = None
			if self.accept("when"):
				self.expect("(")
				filter_ = self.parse_expression()
				self.expect(")")
			catch_block = self.parse_block()
			catches.append(CatchClause(type_, name, filter_, catch_block, **self.span(catch_start)))
		finally_ = self.parse_block() if self.accept("finally") else None
		if not catches and finally_ is None:
			raise self.error("expected 'catch' or 'finally'")
		return Try(block, tuple(catches), finally_, **self.span(start))

	def _parse_using(self, start: Token) -> Statement:
		is_await = self.accept("await")
		self.expect("using")
		if not self.at("("):
			decl = self._parse_local_declaration(start, is_using=True, is_await=is_await)
			self.expect(";")
			return decl
		self.advance()
		decl_start = self.current()
		declaration = self._try_local_declaration(terminated=False, start=decl_start)
		expression = None if declaration is not None else self.parse_expression()
		self.expect(")")
		body = self.parse_statement()
		return Using(declaration, expression, body, is_await, **self.span(start))

	def _try_local_declaration(
		self, *, terminated: bool = True, start: Token | None = None
	) -> LocalDeclaration | None:
		tok = self.current()
		if tok.type != TK_IDENT or tok.value in ("await", "yield", "nameof", "this", "base", "new"):
			return None
		if tok.value in KEYWORDS and tok.value not in PREDEFINED_TYPES:
			return None
		mark = self.pos
		try:
			self.parse_type()
			ok = self.at_ident() and self.peek().value in ("=", ";", ",", "in", ")")
		except ParseError:
			ok = False
		self.pos = mark
		if not ok:
			return None
		decl = self._parse_local_declaration(start or tok)
		if terminated:
			self.expect(";")
		return decl

	def _parse_local_declaration(
		self,
		start: Token,
		*,
		is_const: bool = False,
		is_using: bool = False,
		is_await: bool = False,
	) -> LocalDeclaration:
		type_: TypeRef | None = self.parse_type()
		if type_ is not None and type_.is_var:
			type_ = None
		name_tok = self.expect_ident()
		declarators = self._parse_declarators(name_tok)
		return LocalDeclaration(
			type_, declarators, is_const, is_using, is_await, **self.span(start)
		)

	def _parse_declarators(self, first: Token) -> tuple[VariableDeclarator, ...]:
		declarators: list[VariableDeclarator] = []
		name_tok = first
		while True:
			init = self.parse_expression() if self.accept("=") else None
			declarators.append(VariableDeclarator(name_tok.value, init, **self.span(name_tok)))
			if not self.accept(","):
				break
			name_tok = self.expect_ident()
		return tuple(declarators)

	def _try_local_function(self) -> LocalFunction | None:
		start = self.current()
		if start.type != TK_IDENT:
			return None
		mark = self.pos
		try:
			is_async = False
			while self.current().value in ("async", "static", "unsafe") and self.peek().type == TK_IDENT:
				is_async = is_async or self.current().value == "async"
				self.advance()
			return_type = self.parse_type()
			if not (self.at_ident() and (self.peek().is_op("(") or self.peek().is_op("<"))):
				raise self.error("not a local function")
			name = self.advance().value
			self._parse_type_parameter_list()
			params = self.parse_parameters()
			if not (self.at("{") or self.at("=>")):
				raise self.error("not a local function")
		except ParseError:
			self.pos = mark
			return None
		body = self._parse_body()
		if body is None:
			raise self.error("local function requires a body")
		return LocalFunction(name, params, body, return_type, is_async, **self.span(start))

	# -- Expressions ---------------------------------------------------------------

	def parse_expression(self) -> Expression:
		return self.parse_assignment()

	def parse_assignment(self) -> Expression:
		if self._at_lambda():
			return self.parse_lambda()
		start = self.current()
		left = self.parse_conditional()
		tok = self.current()
		if tok.type == TK_OP and tok.value in ASSIGN_OPS:
			self.advance()
			value = self.parse_assignment()
			return Assignment(left, tok.value, value, **self.span(start))
		if tok.is_op(">") and self.peek().is_op(">=") and self._adjacent(tok, self.peek()):
			self.advance()
			self.advance()
			value = self.parse_assignment()
			return Assignment(left, ">>=", value, **self.span(start))
		return left

	def parse_conditional(self) -> Expression:
		start = self.current()
		cond = self.parse_coalesce()
		if self.at("?"):
			self.advance()
			saved, self._no_lambda = self._no_lambda, False
			when_true = self.parse_expression()
			self.expect(":")
			when_false = self.parse_expression()
			self._no_lambda = saved
			return Conditional(cond, when_true, when_false, **self.span(start))
		return cond

	def parse_coalesce(self) -> Expression:
		start = self.current()
		left = self.parse_binary(0)
		if self.at("??"):
			self.advance()
			right = self.parse_coalesce()
			return Binary(left, "??", right, **self.span(start))
		return left

	# Binary levels, loosest first. Relational, shift and range are handled
	# by dedicated methods because of `is`/`as`/`switch` and `>>`.
	_LEVELS: tuple[tuple[str, ...], ...] = (
		("||",),
		("&&",),
		("|",),
		("^",),
		("&",),
		("==", "!="),
	)

	def parse_binary(self, level: int) -> Expression:
		if level >= len(self._LEVELS):
			return self.parse_relational()
		start = self.current()
		left = self.parse_binary(level + 1)
		ops = self._LEVELS[level]
		while self.current().type == TK_OP and self.current().value in ops:
			op = self.advance().value
			right = self.parse_binary(level + 1)
			left = Binary(left, op, right, **self.span(start))
		return left

	def parse_relational(self) -> Expression:
		start = self.current()
		left = self.parse_shift()
		while True:
			tok = self.current()
			if tok.type == TK_OP and tok.value in ("<", ">", "<=", ">="):
				if self._at_shift_right():
					break
				self.advance()
				right = self.parse_shift()
				left = Binary(left, tok.value, right, **self.span(start))
			elif self.at("is"):
				self.advance()
				pattern = self.parse_pattern()
				left = IsPattern(left, pattern, **self.span(start))
			elif self.at("as"):
				self.advance()
				type_ = self.parse_type(allow_nullable=False)
				left = As(left, type_, **self.span(start))
			elif self.at("switch") and self.peek().is_op("{"):
				left = self._parse_switch_expression(start, left)
			elif self.at("with") and self.peek().is_op("{"):
				self.advance()
				init = self.parse_initializer()
				left = WithExpression(left, init, **self.span(start))
			else:
				break
		return left

	def parse_shift(self) -> Expression:
		start = self.current()
		left = self.parse_additive()
		while True:
			if self.at("<<"):
				self.advance()
				op = "<<"
			elif self._at_shift_right() and not self.peek(2).is_op("="):
				self.advance()
				self.advance()
				op = ">>"
			else:
				break
			right = self.parse_additive()
			left = Binary(left, op, right, **self.span(start))
		return left

	def parse_additive(self) -> Expression:
		start = self.current()
		left = self.parse_multiplicative()
		while self.current().type == TK_OP and self.current().value in ("+", "-"):
			op = self.advance().value
			right = self.parse_multiplicative()
			left = Binary(left, op, right, **self.span(start))
		return left

	def parse_multiplicative(self) -> Expression:
		start = self.current()
		left = self.parse_range()
		while self.current().type == TK_OP and self.current().value in ("*", "/", "%"):
			op = self.advance().value
			right = self.parse_range()
			left = Binary(left, op, right, **self.span(start))
		return left

	def parse_range(self) -> Expression:
		start = self.current()
		if self.at(".."):
			self.advance()
			end = self.parse_unary() if self._at_expression_start() else None
			return RangeExpression(None, end, **self.span(start))
		left = self.parse_unary()
		if self.at(".."):
			self.advance()
			end = self.parse_unary() if self._at_expression_start() else None
			return RangeExpression(left, end, **self.span(start))
		return left

	def _at_expression_start(self) -> bool:
		tok = self.current()
		if tok.type in (TK_NUMBER, TK_STRING, TK_CHAR, TK_INTERP):
			return True
		if tok.type == TK_IDENT:
			return tok.value not in _PATTERN_WORDS or tok.value in ("not",)
		return tok.value in ("(", "[", "-", "+", "!", "~", "^", "++", "--", "..")

	def parse_unary(self) -> Expression:
		start = self.current()
		tok = start
		if tok.type == TK_OP and tok.value in ("+", "-", "!", "~", "++", "--", "^"):
			self.advance()
			operand = self.parse_unary()
			return Unary(tok.value, operand, **self.span(start))
		if tok.type == TK_IDENT and tok.value == "await" and self._await_is_operator():
			self.advance()
			operand = self.parse_unary()
			return Await(operand, **self.span(start))
		if tok.type == TK_IDENT and tok.value == "throw":
			self.advance()
			operand = self.parse_coalesce()
			return ThrowExpression(operand, **self.span(start))
		if tok.is_op("("):
			cast = self._try_cast()
			if cast is not None:
				return cast
		return self.parse_postfix(self.parse_primary(), start)

	def _await_is_operator(self) -> bool:
		nxt = self.peek()
		if nxt.type in (TK_NUMBER, TK_STRING, TK_CHAR, TK_INTERP):
			return True
		if nxt.type == TK_IDENT:
			return True
		return nxt.value in ("(", "[", "!", "-")

	def _try_cast(self) -> Cast | None:
		start = self.current()
		mark = self.pos
		self.advance()
		try:
			type_ = self.parse_type()
			self.expect(")")
		except ParseError:
			self.pos = mark
			return None
		nxt = self.current()
		is_cast = False
		if type_.name in PREDEFINED_TYPES or type_.rank or type_.nullable:
			is_cast = nxt.type != TK_OP or nxt.value in ("(", "!", "~", "-", "+", "[")
		elif nxt.type in (TK_NUMBER, TK_STRING, TK_CHAR, TK_INTERP):
			is_cast = True
		elif nxt.type == TK_IDENT:
			is_cast = nxt.value not in _PATTERN_WORDS and nxt.value not in ("in",)
		elif nxt.is_op("(") or nxt.is_op("!") or nxt.is_op("~"):
			is_cast = True
		if not is_cast:
			self.pos = mark
			return None
		operand = self.parse_unary()
		return Cast(type_, operand, **self.span(start))

	def parse_postfix(self, expr: Expression, start_tok: Token) -> Expression:
		while True:
			tok = self.current()
			if tok.is_op("."):
				self.advance()
				name = self.advance()
				if name.type != TK_IDENT:
					raise self.error("expected member name")
				type_args = self._try_generic_args() if self.at("<") else None
				expr = MemberAccess(expr, name.value, type_args or (), **self.span(start_tok))
			elif tok.is_op("?."):
				self.advance()
				name = self.expect_ident()
				expr = MemberAccess(expr, name.value, (), True, **self.span(start_tok))
			elif tok.is_op("?") and self.peek().is_op("[") and self._adjacent(tok, self.peek()):
				self.advance()
				args = self._parse_argument_list("[", "]")
				expr = ElementAccess(expr, args, True, **self.span(start_tok))
			elif tok.is_op("("):
				args = self.parse_arguments()
				expr = Invocation(expr, args, **self.span(start_tok))
			elif tok.is_op("["):
				args = self._parse_argument_list("[", "]")
				expr = ElementAccess(expr, args, **self.span(start_tok))
			elif tok.is_op("++") or tok.is_op("--"):
				self.advance()
				expr = Postfix(tok.value, expr, **self.span(start_tok))
			elif tok.is_op("!"):
				self.advance()
				expr = Postfix("!", expr, **self.span(start_tok))
			else:
				return expr

	def parse_arguments(self) -> tuple[Argument, ...]:
		return self._parse_argument_list("(", ")")

	def _parse_argument_list(self, open_: str, close: str) -> tuple[Argument, ...]:
		self.expect(open_)
		saved, self._no_lambda = self._no_lambda, False
		args: list[Argument] = []
		while not self.at(close):
			args.append(self._parse_argument())
			if not self.accept(","):
				break
		self._no_lambda = saved
		self.expect(close)
		return tuple(args)

	def _parse_argument(self) -> Argument:
		start = self.current()
		name = None
		if start.type == TK_IDENT and self.peek().is_op(":") and start.value not in KEYWORDS:
			name = self.advance().value
			self.advance()
		modifier = None
		if self.current().value in ("out", "ref", "in") and self.current().type == TK_IDENT:
			modifier = self.advance().value
		if modifier == "out":
			decl_start = self.current()
			mark = self.pos
			try:
				type_ = self.parse_type()
				if self.at_ident() and self.peek().value in (",", ")"):
					var_name = self.advance().value
					decl_type = None if type_.is_var else type_
					expr: Expression = DeclarationExpression(
						decl_type, var_name, **self.span(decl_start)
					)
					return Argument(expr, modifier, name, **self.span(start))
			except ParseError:
				pass
			self.pos = mark
		expr = self.parse_expression()
		return Argument(expr, modifier, name, **self.span(start))

	def parse_primary(self) -> Expression:
		start = self.current()
		tok = start

		if tok.type == TK_NUMBER:
			self.advance()
			return Literal(tok.value, "number", **self.span(start))
		if tok.type == TK_STRING:
			self.advance()
			return Literal(tok.value, "string", **self.span(start))
		if tok.type == TK_CHAR:
			self.advance()
			return Literal(tok.value, "char", **self.span(start))
		if tok.type == TK_INTERP:
			self.advance()
			return self._parse_interpolated(tok)

		if tok.type == TK_IDENT:
			v = tok.value
			if v in ("true", "false"):
				self.advance()
				return Literal(v == "true", "bool", **self.span(start))
			if v == "null":
				self.advance()
				return Literal(None, "null", **self.span(start))
			if v == "this":
				self.advance()
				return This(**self.span(start))
			if v == "base":
				self.advance()
				return Base(**self.span(start))
			if v == "default":
				self.advance()
				type_ = None
				if self.accept("("):
					type_ = self.parse_type()
					self.expect(")")
				return DefaultValue(type_, **self.span(start))
			if v in ("typeof", "sizeof"):
				self.advance()
				self.expect("(")
				type_ = self.parse_type()
				self.expect(")")
				if v == "typeof":
					return TypeOf(type_, **self.span(start))
				return SizeOf(type_, **self.span(start))
			if v == "new":
				return self._parse_new()
			if v in ("checked", "unchecked") and self.peek().is_op("("):
				self.advance()
				self.expect("(")
				inner = self.parse_expression()
				self.expect(")")
				return Parenthesized(inner, **self.span(start))
			if v == "delegate":
				return self._parse_anonymous_method()
			if v in PREDEFINED_TYPES:
				self.advance()
				return Identifier(v, **self.span(start))
			if v in KEYWORDS:
				raise self.error(f"unexpected keyword '{v}'")
			self.advance()
			type_args = self._try_generic_args() if self.at("<") else None
			return Identifier(v, type_args or (), **self.span(start))

		if tok.is_op("("):
			self.advance()
			saved, self._no_lambda = self._no_lambda, False
			first = self.parse_expression()
			if self.at(","):
				elements = [first]
				while self.accept(","):
					elements.append(self.parse_expression())
				self.expect(")")
				self._no_lambda = saved
				return TupleExpression(tuple(elements), **self.span(start))
			self.expect(")")
			self._no_lambda = saved
			return Parenthesized(first, **self.span(start))

		if tok.is_op("["):
			self.advance()
			saved, self._no_lambda = self._no_lambda, False
			items: list[Expression] = []
			while not self.at("]"):
				item_start = self.current()
				if self.accept(".."):
					inner = self.parse_expression()
					items.append(Spread(inner, **self.span(item_start)))
				else:
					items.append(self.parse_expression())
				if not self.accept(","):
					break
			self.expect("]")
			self._no_lambda = saved
			return CollectionExpression(tuple(items), **self.span(start))

		raise self.error(f"unexpected token '{tok.value or 'end of input'}'")

	def _parse_anonymous_method(self) -> Lambda:
		start = self.expect("delegate")
		params: tuple[Parameter, ...] = ()
		if self.at("("):
			params = self.parse_parameters()
		body = self.parse_block()
		return Lambda(params, body, **self.span(start))

	def _parse_new(self) -> Expression:
		start = self.expect("new")
		if self.at("("):
			args = self.parse_arguments()
			init = self.parse_initializer() if self.at("{") else None
			return ObjectCreation(None, args, init, **self.span(start))
		if self.at("{"):
			return self._parse_anonymous_object(start)
		if self.at("[") and self.peek().is_op("]"):
			self.advance()
			self.advance()
			init = self.parse_initializer()
			return ArrayCreation(None, None, init, **self.span(start))
		type_ = self.parse_type(allow_nullable=False)
		if type_.rank:
			element = TypeRef(type_.name, type_.args, type_.nullable, type_.rank - 1, text=type_.text)
			init = self.parse_initializer() if self.at("{") else None
			return ArrayCreation(element, None, init, **self.span(start))
		if self.at("["):
			self.advance()
			size = self.parse_expression()
			self.expect("]")
			while self.at("[") and self.peek().is_op("]"):
				self.advance()
				self.advance()
			init = self.parse_initializer() if self.at("{") else None
			return ArrayCreation(type_, size, init, **self.span(start))
		args: tuple[Argument, ...] = ()
		if self.at("("):
			args = self.parse_arguments()
		init = self.parse_initializer() if self.at("{") else None
		return ObjectCreation(type_, args, init, **self.span(start))

	def _parse_anonymous_object(self, start: Token) -> AnonymousObject:
		self.expect("{")
		members: list[MemberInit] = []
		while not self.at("}"):
			member_start = self.current()
			if self.at_ident() and self.peek().is_op("="):
				name = self.advance().value
				self.advance()
				value = self.parse_expression()
			else:
				value = self.parse_expression()
				if isinstance(value, MemberAccess):
					name = value.name
				elif isinstance(value, Identifier):
					name = value.name
				else:
					raise self.error("anonymous object member needs a name")
			members.append(MemberInit(name, value, **self.span(member_start)))
			if not self.accept(","):
				break
		self.expect("}")
		return AnonymousObject(tuple(members), **self.span(start))

	def parse_initializer(self) -> Initializer:
		start = self.expect("{")
		saved, self._no_lambda = self._no_lambda, False
		elements: list[InitElement] = []
		while not self.at("}"):
			elements.append(self._parse_init_element())
			if not self.accept(","):
				break
		self.expect("}")
		self._no_lambda = saved
		return Initializer(tuple(elements), **self.span(start))

	def _parse_init_element(self) -> InitElement:
		start = self.current()
		if self.at("{"):
			return self.parse_initializer()
		if self.at("["):
			mark = self.pos
			self.advance()
			try:
				key = self.parse_expression()
				self.expect("]")
				if self.accept("="):
					value = self._parse_init_value()
					return IndexInit(key, value, **self.span(start))
			except ParseError:
				pass
			self.pos = mark
		if self.at_ident() and self.peek().is_op("="):
			name = self.advance().value
			self.advance()
			value = self._parse_init_value()
			return MemberInit(name, value, **self.span(start))
		return self.parse_expression()

	def _parse_init_value(self) -> Expression | Initializer:
		if self.at("{"):
			return self.parse_initializer()
		return self.parse_expression()

	def _parse_interpolated(self, tok: Token) -> InterpolatedString:
		raw = tok.value
		parts: list[str | Interpolation] = []
		buf: list[str] = []
		i = 0
		while i < len(raw):
			c = raw[i]
			if c == "{" and raw.startswith("{{", i):
				buf.append("{")
				i += 2
				continue
			if c == "}" and raw.startswith("}}", i):
				buf.append("}")
				i += 2
				continue
			if c == '"' and tok.verbatim and raw.startswith('""', i):
				buf.append('"')
				i += 2
				continue
			if c == "\\" and not tok.verbatim and i + 1 < len(raw):
				nxt = raw[i + 1]
				if nxt in ESCAPES:
					buf.append(ESCAPES[nxt])
					i += 2
					continue
				if nxt == "u" and i + 6 <= len(raw):
					buf.append(chr(int(raw[i + 2 : i + 6], 16)))
					i += 6
					continue
			if c == "{":
				end = _matching_brace(raw, i)
				if buf:
					parts.append("".join(buf))
					buf = []
				parts.append(self._parse_hole(raw[i + 1 : end], tok))
				i = end + 1
				continue
			buf.append(c)
			i += 1
		if buf:
			parts.append("".join(buf))
		return InterpolatedString(tuple(parts), text=self.source[tok.start : tok.end], line=tok.line, column=tok.col)

	def _parse_hole(self, hole: str, tok: Token) -> Interpolation:
		expr_text, alignment, format_ = _split_hole(hole)
		sub = Parser(expr_text, line=tok.line, col=tok.col)
		expr = sub.parse_expression()
		if not sub.at_eof():
			raise sub.error("unexpected token in interpolation")
		return Interpolation(expr, alignment, format_, text=hole, line=tok.line, column=tok.col)

	# -- Lambdas -------------------------------------------------------------------

	def _at_lambda(self) -> bool:
		tok = self.current()
		offset = 0
		if tok.type == TK_IDENT and tok.value in ("async", "static"):
			nxt = self.peek()
			if nxt.type == TK_IDENT or nxt.is_op("("):
				offset = 1
		first = self.peek(offset)
		if first.type == TK_IDENT and first.value not in KEYWORDS:
			if self._no_lambda and offset == 0:
				return False
			return self.peek(offset + 1).is_op("=>")
		if first.is_op("(") and not (self._no_lambda and offset == 0):
			close = self._matching_paren(self.pos + offset)
			return close is not None and close + 1 < len(self.tokens) and self.tokens[close + 1].is_op("=>")
		return False

	def _matching_paren(self, index: int) -> int | None:
		depth = 0
		for i in range(index, len(self.tokens)):
			tok = self.tokens[i]
			if tok.is_op("("):
				depth += 1
			elif tok.is_op(")"):
				depth -= 1
				if depth == 0:
					return i
			elif tok.type == TK_EOF or tok.is_op(";") or tok.is_op("{") or tok.is_op("}"):
				return None
		return None

	def parse_lambda(self) -> Lambda:
		start = self.current()
		is_async = False
		while self.current().value in ("async", "static") and not self.peek().is_op("=>"):
			is_async = is_async or self.current().value == "async"
			self.advance()
		params: list[Parameter] = []
		if self.at("("):
			self.advance()
			while not self.at(")"):
				param_start = self.current()
				modifier = None
				if self.current().value in ("ref", "out", "in", "scoped"):
					modifier = self.advance().value
				type_ = None
				if not (self.at_ident() and self.peek().value in (",", ")")):
					type_ = self.parse_type()
				name = self.expect_ident().value
				params.append(Parameter(name, type_, modifier, **self.span(param_start)))
				if not self.accept(","):
					break
			self.expect(")")
		else:
			name_tok = self.expect_ident()
			params.append(Parameter(name_tok.value, **self.span(name_tok)))
		self.expect("=>")
		saved, self._no_lambda = self._no_lambda, False
		body: Expression | Block
		if self.at("{"):
			body = self.parse_block()
		else:
			body = self.parse_expression()
		self._no_lambda = saved
		return Lambda(tuple(params), body, is_async, **self.span(start))

	# -- Switch expressions and patterns -------------------------------------------------

	def _parse_switch_expression(self, start: Token, governing: Expression) -> SwitchExpression:
		self.expect("switch")
		self.expect("{")
		arms: list[SwitchArm] = []
		while not self.at("}"):
			arm_start = self.current()
			pattern = self.parse_pattern()
			guard = self._parse_guard()
			self.expect("=>")
			saved, self._no_lambda = self._no_lambda, False
			value = self.parse_expression()
			self._no_lambda = saved
			arms.append(SwitchArm(pattern, guard, value, **self.span(arm_start)))
			if not self.accept(","):
				break
		self.expect("}")
		return SwitchExpression(governing, tuple(arms), **self.span(start))

	def parse_pattern(self) -> Pattern:
		start = self.current()
		left = self._parse_and_pattern()
		while self.at("or"):
			self.advance()
			right = self._parse_and_pattern()
			left = BinaryPattern("or", left, right, **self.span(start))
		return left

	def _parse_and_pattern(self) -> Pattern:
		start = self.current()
		left = self._parse_not_pattern()
		while self.at("and"):
			self.advance()
			right = self._parse_not_pattern()
			left = BinaryPattern("and", left, right, **self.span(start))
		return left

	def _parse_not_pattern(self) -> Pattern:
		start = self.current()
		if self.at("not"):
			self.advance()
			inner = self._parse_not_pattern()
			return NotPattern(inner, **self.span(start))
		return self._parse_primary_pattern()

	def _parse_primary_pattern(self) -> Pattern:
		start = self.current()
		tok = start
		if tok.type == TK_IDENT and tok.value == "_" and not self.peek().is_op("."):
			self.advance()
			return DiscardPattern(**self.span(start))
		if tok.type == TK_IDENT and tok.value == "var" and self.peek().type == TK_IDENT:
			self.advance()
			name = self.advance().value
			return VarPattern(name, **self.span(start))
		if tok.type == TK_OP and tok.value in ("<", "<=", ">", ">="):
			self.advance()
			expr = self._parse_pattern_operand()
			return RelationalPattern(tok.value, expr, **self.span(start))
		if tok.is_op("("):
			self.advance()
			inner = self.parse_pattern()
			self.expect(")")
			return inner
		if tok.is_op("{"):
			return self._parse_property_pattern(start, None)
		if tok.is_op("["):
			self.advance()
			patterns: list[Pattern] = []
			while not self.at("]"):
				if self.at(".."):
					slice_start = self.advance()
					patterns.append(DiscardPattern(**self.span(slice_start)))
				else:
					patterns.append(self.parse_pattern())
				if not self.accept(","):
					break
			self.expect("]")
			return ListPattern(tuple(patterns), **self.span(start))
		if tok.type == TK_IDENT and tok.value not in KEYWORDS or tok.value in PREDEFINED_TYPES:
			mark = self.pos
			try:
				type_ = self.parse_type(allow_nullable=False)
				if self.at("{"):
					return self._parse_property_pattern(start, type_)
				if self.at_ident() and self.current().value not in _PATTERN_WORDS:
					name = self.advance().value
					return DeclarationPattern(type_, name, **self.span(start))
				if type_.name in PREDEFINED_TYPES or type_.args or type_.rank:
					return TypePattern(type_, **self.span(start))
			except ParseError:
				pass
			self.pos = mark
		expr = self._parse_pattern_operand()
		return ConstantPattern(expr, **self.span(start))

	def _parse_pattern_operand(self) -> Expression:
		saved, self._no_lambda = self._no_lambda, True
		try:
			return self.parse_shift()
		finally:
			self._no_lambda = saved

	def _parse_property_pattern(self, start: Token, type_: TypeRef | None) -> PropertyPattern:
		self.expect("{")
		subpatterns: list[Subpattern] = []
		while not self.at("}"):
			sub_start = self.current()
			name = self.expect_ident().value
			while self.at("."):
				self.advance()
				name += "." + self.expect_ident().value
			self.expect(":")
			pattern = self.parse_pattern()
			subpatterns.append(Subpattern(name, pattern, **self.span(sub_start)))
			if not self.accept(","):
				break
		self.expect("}")
		designation = None
		if self.at_ident() and self.current().value not in _PATTERN_WORDS:
			designation = self.advance().value
		return PropertyPattern(type_, tuple(subpatterns), designation, **self.span(start))


def _matching_brace(raw: str, index: int) -> int:
	"""Index of the `}` closing the interpolation hole that opens at `index`."""
	depth = 0
	i = index
	while i < len(raw):
		c = raw[i]
		if c in "\"'":
			i = _skip_quoted(raw, i)
			continue
		if c == "{":
			depth += 1
		elif c == "}":
			depth -= 1
			if depth == 0:
				return i
		i += 1
	raise ParseError("unterminated interpolation hole", 0, index)


def _skip_quoted(raw: str, index: int) -> int:
	quote = raw[index]
	i = index + 1
	while i < len(raw) and raw[i] != quote:
		if raw[i] == "\\":
			i += 1
		i += 1
	return i + 1


def _split_hole(hole: str) -> tuple[str, str | None, str | None]:
	"""Split `expr,alignment:format` at top-level separators."""
	depth = 0
	i = 0
	comma = colon = -1
	while i < len(hole):
		c = hole[i]
		if c in "\"'":
			i = _skip_quoted(hole, i)
			continue
		if c in "([{":
			depth += 1
		elif c in ")]}":
			depth -= 1
		elif c == "?" and depth == 0:
			# conditional operator inside a hole must be parenthesized in C#,
			# but `?.` and `??` are fine
			pass
		elif depth == 0 and c == "," and comma < 0 and colon < 0:
			comma = i
		elif depth == 0 and c == ":" and colon < 0 and not hole.startswith("::", i):
			colon = i
			break
		i += 1
	expr_end = comma if comma >= 0 else (colon if colon >= 0 else len(hole))
	alignment = None
	if comma >= 0:
		alignment = hole[comma + 1 : colon if colon >= 0 else len(hole)].strip()
	format_ = hole[colon + 1 :] if colon >= 0 else None
	return hole[:expr_end].strip(), alignment, format_


# =============================================================================
# Entry points
# =============================================================================


def parse_compilation_unit(source: str) -> CompilationUnit:
	"""Parse a complete C# source file."""
	return Parser(source).parse_compilation_unit()


def parse_statement(source: str) -> Statement:
	"""Parse exactly one statement."""
	parser = Parser(source)
	stmt = parser.parse_statement()
	if not parser.at_eof():
		raise parser.error(f"unexpected '{parser.current().value}' after statement")
	return stmt


def parse_statements(source: str) -> tuple[Statement, ...]:
	"""Parse a sequence of statements (a method body without braces)."""
	parser = Parser(source)
	stmts: list[Statement] = []
	while not parser.at_eof():
		stmts.append(parser.parse_statement())
	return tuple(stmts)


def parse_expression(source: str) -> Expression:
	"""Parse exactly one expression."""
	parser = Parser(source)
	expr = parser.parse_expression()
	if not parser.at_eof():
		raise parser.error(f"unexpected '{parser.current().value}' after expression")
	return expr
