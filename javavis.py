"""Front end for the Java step visualizer: lexer, AST, parser and syntax validation."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Tuple


# ---------------------------------------------------------------------------
# Errors


class ParseError(Exception):
	def __init__(self, message: str, line: int, hint: Optional[str] = None) -> None:
		super().__init__(message)
		self.message = message
		self.line = line
		self.hint = hint

	def __str__(self) -> str:
		return f"Line {self.line}: {self.message}"


class LexError(ParseError):
	pass


@dataclass
class SyntaxIssue:
	line: int
	message: str
	hint: Optional[str] = None


# ---------------------------------------------------------------------------
# Lexer


class TokenKind(Enum):
	CLASS = auto()
	VOID = auto()
	INT = auto()
	STATIC = auto()
	PUBLIC = auto()
	PRIVATE = auto()
	FOR = auto()
	IF = auto()
	ELSE = auto()
	NEW = auto()
	SYSTEM = auto()
	BOOLEAN = auto()
	DOUBLE = auto()
	STRING = auto()
	TRUE = auto()
	FALSE = auto()
	NULL = auto()
	RETURN = auto()
	WHILE = auto()
	DO = auto()
	BREAK = auto()
	CONTINUE = auto()
	CHAR = auto()
	LONG = auto()
	THIS = auto()
	FINAL = auto()
	INSTANCEOF = auto()
	SWITCH = auto()
	CASE = auto()
	DEFAULT = auto()
	TRY = auto()
	CATCH = auto()
	FINALLY = auto()
	THROW = auto()
	IDENT = auto()
	INTEGER_LITERAL = auto()
	LONG_LITERAL = auto()
	DOUBLE_LITERAL = auto()
	STRING_LITERAL = auto()
	CHAR_LITERAL = auto()
	ASSIGN = auto()
	PLUS = auto()
	MINUS = auto()
	STAR = auto()
	SLASH = auto()
	PERCENT = auto()
	LPAREN = auto()
	RPAREN = auto()
	LBRACE = auto()
	RBRACE = auto()
	LBRACKET = auto()
	RBRACKET = auto()
	SEMI = auto()
	COMMA = auto()
	DOT = auto()
	GT = auto()
	LT = auto()
	BANG = auto()
	QUESTION = auto()
	COLON = auto()
	EQ = auto()
	NEQ = auto()
	GTE = auto()
	LTE = auto()
	PLUS_PLUS = auto()
	MINUS_MINUS = auto()
	PLUS_ASSIGN = auto()
	MINUS_ASSIGN = auto()
	STAR_ASSIGN = auto()
	SLASH_ASSIGN = auto()
	PERCENT_ASSIGN = auto()
	AND_AND = auto()
	OR_OR = auto()
	EOF = auto()


KEYWORDS: Dict[str, TokenKind] = {
	"class": TokenKind.CLASS,
	"void": TokenKind.VOID,
	"int": TokenKind.INT,
	"static": TokenKind.STATIC,
	"public": TokenKind.PUBLIC,
	"private": TokenKind.PRIVATE,
	"for": TokenKind.FOR,
	"if": TokenKind.IF,
	"else": TokenKind.ELSE,
	"new": TokenKind.NEW,
	"System": TokenKind.SYSTEM,
	"boolean": TokenKind.BOOLEAN,
	"double": TokenKind.DOUBLE,
	"String": TokenKind.STRING,
	"true": TokenKind.TRUE,
	"false": TokenKind.FALSE,
	"null": TokenKind.NULL,
	"return": TokenKind.RETURN,
	"while": TokenKind.WHILE,
	"do": TokenKind.DO,
	"break": TokenKind.BREAK,
	"continue": TokenKind.CONTINUE,
	"char": TokenKind.CHAR,
	"long": TokenKind.LONG,
	"this": TokenKind.THIS,
	"final": TokenKind.FINAL,
	"instanceof": TokenKind.INSTANCEOF,
	"switch": TokenKind.SWITCH,
	"case": TokenKind.CASE,
	"default": TokenKind.DEFAULT,
	"try": TokenKind.TRY,
	"catch": TokenKind.CATCH,
	"finally": TokenKind.FINALLY,
	"throw": TokenKind.THROW,
}


TWO_CHAR_SYMBOLS: Dict[str, TokenKind] = {
	"==": TokenKind.EQ,
	"!=": TokenKind.NEQ,
	">=": TokenKind.GTE,
	"<=": TokenKind.LTE,
	"++": TokenKind.PLUS_PLUS,
	"--": TokenKind.MINUS_MINUS,
	"+=": TokenKind.PLUS_ASSIGN,
	"-=": TokenKind.MINUS_ASSIGN,
	"*=": TokenKind.STAR_ASSIGN,
	"/=": TokenKind.SLASH_ASSIGN,
	"%=": TokenKind.PERCENT_ASSIGN,
	"&&": TokenKind.AND_AND,
	"||": TokenKind.OR_OR,
}


SYMBOLS: Dict[str, TokenKind] = {
	"=": TokenKind.ASSIGN,
	"+": TokenKind.PLUS,
	"-": TokenKind.MINUS,
	"*": TokenKind.STAR,
	"/": TokenKind.SLASH,
	"%": TokenKind.PERCENT,
	"(": TokenKind.LPAREN,
	")": TokenKind.RPAREN,
	"{": TokenKind.LBRACE,
	"}": TokenKind.RBRACE,
	"[": TokenKind.LBRACKET,
	"]": TokenKind.RBRACKET,
	";": TokenKind.SEMI,
	",": TokenKind.COMMA,
	".": TokenKind.DOT,
	">": TokenKind.GT,
	"<": TokenKind.LT,
	"!": TokenKind.BANG,
	"?": TokenKind.QUESTION,
	":": TokenKind.COLON,
}


@dataclass(frozen=True)
class Token:
	kind: TokenKind
	value: str
	line: int
	column: int = 0


class Lexer:
	def __init__(self, source: str) -> None:
		self.source = source
		self.length = len(source)
		self.index = 0
		self.line = 1
		self.column = 1

	def tokenize(self) -> List[Token]:
		tokens: List[Token] = []
		while not self._is_eof():
			ch = self._peek()
			if ch in " \t\r\f":
				self._advance()
			elif ch == "\n":
				self._advance()
			elif ch == "/" and self._peek_next() == "/":
				self._consume_line_comment()
			elif ch == "/" and self._peek_next() == "*":
				self._consume_block_comment()
			elif ch.isalpha() or ch == "_":
				tokens.append(self._consume_identifier())
			elif ch.isdigit():
				tokens.append(self._consume_number())
			elif ch == '"':
				tokens.append(self._consume_string())
			elif ch == "'":
				tokens.append(self._consume_char())
			else:
				tokens.append(self._consume_symbol())
		tokens.append(Token(TokenKind.EOF, "EOF", self.line, self.column))
		return tokens

	def _consume_line_comment(self) -> None:
		while not self._is_eof() and self._peek() != "\n":
			self._advance()

	def _consume_block_comment(self) -> None:
		start_line = self.line
		self._advance()
		self._advance()
		while not self._is_eof():
			if self._peek() == "*" and self._peek_next() == "/":
				self._advance()
				self._advance()
				return
			self._advance()
		raise LexError("Unclosed block comment.", start_line)

	def _consume_identifier(self) -> Token:
		line, column = self.line, self.column
		lexeme = self._consume_while(lambda c: c.isalnum() or c == "_")
		kind = KEYWORDS.get(lexeme, TokenKind.IDENT)
		return Token(kind, lexeme, line, column)

	def _consume_number(self) -> Token:
		line, column = self.line, self.column
		start_index = self.index
		is_double = False
		while not self._is_eof():
			ch = self._peek()
			if ch.isdigit():
				self._advance()
			elif ch == "." and not is_double:
				is_double = True
				self._advance()
			else:
				break
		lexeme = self.source[start_index:self.index]
		if not self._is_eof() and self._peek() in "Ll" and not is_double:
			self._advance()
			return Token(TokenKind.LONG_LITERAL, lexeme, line, column)
		kind = TokenKind.DOUBLE_LITERAL if is_double else TokenKind.INTEGER_LITERAL
		return Token(kind, lexeme, line, column)

	def _consume_string(self) -> Token:
		line, column = self.line, self.column
		self._advance()  # opening quote
		start_index = self.index
		while not self._is_eof() and self._peek() != '"':
			if self._peek() == "\\" and self.index + 1 < self.length:
				self._advance()
			self._advance()
		if self._is_eof():
			raise LexError("Unclosed string literal.", line)
		value = self.source[start_index:self.index]
		self._advance()  # closing quote
		return Token(TokenKind.STRING_LITERAL, value, line, column)

	def _consume_char(self) -> Token:
		line, column = self.line, self.column
		self._advance()  # opening quote
		if self._is_eof() or self._peek() == "\n":
			raise LexError("Unclosed char literal.", line)
		if self._peek() == "'":
			raise LexError("Empty character literal.", line)
		start_index = self.index
		if self._advance() == "\\":
			if self._is_eof():
				raise LexError("Unclosed char literal.", line)
			self._advance()
		value = self.source[start_index:self.index]
		if self._is_eof() or self._peek() != "'":
			raise LexError("Unclosed char literal.", line)
		self._advance()
		return Token(TokenKind.CHAR_LITERAL, value, line, column)

	def _consume_symbol(self) -> Token:
		line, column = self.line, self.column
		candidate = self.source[self.index:self.index + 2]
		if candidate in TWO_CHAR_SYMBOLS:
			self._advance()
			self._advance()
			return Token(TWO_CHAR_SYMBOLS[candidate], candidate, line, column)
		ch = self._advance()
		if ch in SYMBOLS:
			return Token(SYMBOLS[ch], ch, line, column)
		raise LexError(f"Unexpected character '{ch}'", line)

	def _consume_while(self, predicate) -> str:
		start_index = self.index
		while not self._is_eof() and predicate(self._peek()):
			self._advance()
		return self.source[start_index:self.index]

	def _advance(self) -> str:
		ch = self.source[self.index]
		self.index += 1
		if ch == "\n":
			self.line += 1
			self.column = 1
		else:
			self.column += 1
		return ch

	def _peek(self) -> str:
		return self.source[self.index]

	def _peek_next(self) -> str:
		if self.index + 1 >= self.length:
			return ""
		return self.source[self.index + 1]

	def _is_eof(self) -> bool:
		return self.index >= self.length


def tokenize(source: str) -> List[Token]:
	return Lexer(source).tokenize()


# ---------------------------------------------------------------------------
# AST definitions


@dataclass
class ASTNode:
	line: int

	@property
	def kind(self) -> str:
		return self.__class__.__name__


class Statement(ASTNode):
	pass


class Expression(ASTNode):
	pass


@dataclass
class Program(ASTNode):
	body: List["ClassDeclaration"]


@dataclass
class ClassDeclaration(Statement):
	name: str
	body: List[Statement]

	def methods(self) -> Dict[str, "MethodDeclaration"]:
		return {m.name: m for m in self.body if isinstance(m, MethodDeclaration)}

	def static_fields(self) -> List["VariableDeclaration"]:
		return [f for f in self.body if isinstance(f, VariableDeclaration) and f.is_static]

	def instance_fields(self) -> List["VariableDeclaration"]:
		return [f for f in self.body if isinstance(f, VariableDeclaration) and not f.is_static]


@dataclass
class Param(ASTNode):
	type_name: str
	name: str


@dataclass
class MethodDeclaration(Statement):
	return_type: str
	name: str
	params: List[Param]
	body: List[Statement]


@dataclass
class VariableDeclaration(Statement):
	type_name: str
	name: str
	value: Optional[Expression] = None
	is_static: bool = False


@dataclass
class ExpressionStatement(Statement):
	expression: Expression


@dataclass
class BlockStatement(Statement):
	body: List[Statement]


@dataclass
class ForStatement(Statement):
	init: Optional[Statement]
	test: Optional[Expression]
	update: Optional[Expression]
	body: Statement


@dataclass
class WhileStatement(Statement):
	test: Expression
	body: Statement


@dataclass
class DoWhileStatement(Statement):
	test: Expression
	body: Statement


@dataclass
class IfStatement(Statement):
	test: Expression
	consequent: Statement
	alternate: Optional[Statement] = None


@dataclass
class ReturnStatement(Statement):
	argument: Optional[Expression] = None


@dataclass
class BreakStatement(Statement):
	pass


@dataclass
class ContinueStatement(Statement):
	pass


@dataclass
class BinaryExpr(Expression):
	left: Expression
	operator: str
	right: Expression


@dataclass
class LogicalExpr(Expression):
	left: Expression
	operator: str
	right: Expression


@dataclass
class UnaryExpr(Expression):
	operator: str
	argument: Expression


@dataclass
class ConditionalExpr(Expression):
	test: Expression
	consequent: Expression
	alternate: Expression


@dataclass
class Identifier(Expression):
	symbol: str


@dataclass
class NumericLiteral(Expression):
	value: int


@dataclass
class DoubleLiteral(Expression):
	value: float


@dataclass
class BooleanLiteral(Expression):
	value: bool


@dataclass
class StringLiteral(Expression):
	# Raw source text; escape sequences are translated when printed.
	value: str


@dataclass
class CharLiteral(Expression):
	value: str


@dataclass
class NullLiteral(Expression):
	pass


@dataclass
class AssignmentExpr(Expression):
	assignee: Expression
	value: Expression


@dataclass
class CompoundAssignmentExpr(Expression):
	assignee: Expression
	operator: str
	value: Expression


@dataclass
class MemberExpr(Expression):
	object: Expression
	property: Expression
	computed: bool = False


@dataclass
class CallExpr(Expression):
	callee: Expression
	args: List[Expression] = field(default_factory=list)


@dataclass
class NewExpr(Expression):
	class_name: str


@dataclass
class ArrayCreationExpr(Expression):
	element_type: str
	size: Optional[Expression] = None
	values: Optional[List[Expression]] = None


@dataclass
class PostfixExpr(Expression):
	operator: str
	argument: Identifier


@dataclass
class PrefixExpr(Expression):
	operator: str
	argument: Identifier


# ---------------------------------------------------------------------------
# Parser


TYPE_KINDS = {
	TokenKind.INT,
	TokenKind.DOUBLE,
	TokenKind.BOOLEAN,
	TokenKind.CHAR,
	TokenKind.LONG,
	TokenKind.VOID,
	TokenKind.STRING,
	TokenKind.IDENT,
}

MODIFIER_KINDS = {TokenKind.PUBLIC, TokenKind.PRIVATE, TokenKind.STATIC, TokenKind.FINAL}

COMPARISON_KINDS = {TokenKind.GT, TokenKind.LT, TokenKind.GTE, TokenKind.LTE, TokenKind.EQ, TokenKind.NEQ}

COMPOUND_ASSIGN_KINDS = {
	TokenKind.PLUS_ASSIGN,
	TokenKind.MINUS_ASSIGN,
	TokenKind.STAR_ASSIGN,
	TokenKind.SLASH_ASSIGN,
	TokenKind.PERCENT_ASSIGN,
}

# Lexically known, but no grammar behind them.
UNSUPPORTED_KINDS = {
	TokenKind.SWITCH,
	TokenKind.CASE,
	TokenKind.DEFAULT,
	TokenKind.TRY,
	TokenKind.CATCH,
	TokenKind.FINALLY,
	TokenKind.THROW,
	TokenKind.THIS,
	TokenKind.INSTANCEOF,
}


class Parser:
	def __init__(self, tokens: List[Token]) -> None:
		if not tokens or tokens[-1].kind != TokenKind.EOF:
			raise ValueError("Token stream must end with an EOF token.")
		self.tokens = tokens
		self.index = 0

	def parse(self) -> Program:
		classes: List[ClassDeclaration] = []
		while not self._is_at_end():
			if self._check(TokenKind.IDENT) and self._current().value in ("import", "package"):
				self._skip_directive()
				continue
			self._skip_modifiers()
			if not self._check(TokenKind.CLASS):
				self._error("Expected a class declaration.", self._current())
			classes.append(self._parse_class())
		return Program(line=1, body=classes)

	def _skip_directive(self) -> None:
		keyword = self._advance_token()
		while not self._check(TokenKind.SEMI):
			if self._is_at_end():
				self._error(f"Expected ';' after '{keyword.value}' directive.", self._current())
			self._advance_token()
		self._advance_token()

	def _skip_modifiers(self) -> List[TokenKind]:
		modifiers: List[TokenKind] = []
		while self._current().kind in MODIFIER_KINDS:
			modifiers.append(self._advance_token().kind)
		return modifiers

	def _parse_class(self) -> ClassDeclaration:
		class_token = self._expect(TokenKind.CLASS, "Expected 'class'.")
		name_token = self._expect(TokenKind.IDENT, "Expected class name.")
		self._expect(TokenKind.LBRACE, "Expected '{' after class name.")
		body: List[Statement] = []
		while not self._check(TokenKind.RBRACE) and not self._is_at_end():
			modifiers = self._skip_modifiers()
			shape = self._declaration_shape()
			if shape == "method":
				body.append(self._parse_method())
			elif shape == "variable":
				field_decl = self._parse_variable_declaration()
				field_decl.is_static = TokenKind.STATIC in modifiers
				body.append(field_decl)
			else:
				self._error("Expected a field or method declaration.", self._current())
		self._expect(TokenKind.RBRACE, "Expected '}' to close class body.")
		return ClassDeclaration(line=class_token.line, name=name_token.value, body=body)

	def _parse_method(self) -> MethodDeclaration:
		start = self._current()
		return_type = self._parse_type()
		name_token = self._expect(TokenKind.IDENT, "Expected method name.")
		self._expect(TokenKind.LPAREN, "Expected '(' after method name.")
		params: List[Param] = []
		if not self._check(TokenKind.RPAREN):
			params.append(self._parse_param())
			while self._match(TokenKind.COMMA):
				params.append(self._parse_param())
		self._expect(TokenKind.RPAREN, "Expected ')' to close parameter list.")
		body = self._parse_block()
		return MethodDeclaration(line=start.line, return_type=return_type, name=name_token.value, params=params, body=body.body)

	def _parse_param(self) -> Param:
		self._match(TokenKind.FINAL)
		start = self._current()
		if start.kind not in TYPE_KINDS or start.kind == TokenKind.VOID:
			self._error("Expected parameter type.", start)
		type_name = self._parse_type()
		name_token = self._expect(TokenKind.IDENT, "Expected param name.")
		return Param(line=start.line, type_name=type_name, name=name_token.value)

	def _parse_type(self) -> str:
		token = self._advance_token()
		type_name = token.value
		# `[` belongs to the type only when immediately closed: `int[] xs`.
		if self._check(TokenKind.LBRACKET) and self._peek(1).kind == TokenKind.RBRACKET:
			self._advance_token()
			self._advance_token()
			type_name += "[]"
		return type_name

	def _parse_block(self) -> BlockStatement:
		lbrace = self._expect(TokenKind.LBRACE, "Expected '{' to start a block.")
		statements: List[Statement] = []
		while not self._check(TokenKind.RBRACE) and not self._is_at_end():
			statements.append(self._parse_statement())
		self._expect(TokenKind.RBRACE, "Expected '}' to close a block.")
		return BlockStatement(line=lbrace.line, body=statements)

	def _parse_statement(self) -> Statement:
		token = self._current()
		if token.kind in UNSUPPORTED_KINDS:
			self._error(f"'{token.value}' is not supported by this interpreter.", token)
		if token.kind == TokenKind.CLASS:
			self._error("Nested class declarations are not supported.", token)
		if self._match(TokenKind.IF):
			self._expect(TokenKind.LPAREN, "Expected '(' after 'if'.")
			test = self._parse_expression()
			self._expect(TokenKind.RPAREN, "Expected ')' after if condition.")
			consequent = self._parse_statement()
			alternate = self._parse_statement() if self._match(TokenKind.ELSE) else None
			return IfStatement(line=token.line, test=test, consequent=consequent, alternate=alternate)
		if self._match(TokenKind.WHILE):
			self._expect(TokenKind.LPAREN, "Expected '(' after 'while'.")
			test = self._parse_expression()
			self._expect(TokenKind.RPAREN, "Expected ')' after while condition.")
			body = self._parse_statement()
			return WhileStatement(line=token.line, test=test, body=body)
		if self._match(TokenKind.DO):
			body = self._parse_statement()
			self._expect(TokenKind.WHILE, "Expected 'while' after 'do' block.")
			self._expect(TokenKind.LPAREN, "Expected '(' after 'while'.")
			test = self._parse_expression()
			self._expect(TokenKind.RPAREN, "Expected ')' after while condition.")
			self._expect(TokenKind.SEMI, "Expected ';' after do-while statement.")
			return DoWhileStatement(line=token.line, test=test, body=body)
		if self._match(TokenKind.FOR):
			return self._parse_for(token)
		if self._match(TokenKind.RETURN):
			argument = None if self._check(TokenKind.SEMI) else self._parse_expression()
			self._expect(TokenKind.SEMI, "Expected ';' after return statement.")
			return ReturnStatement(line=token.line, argument=argument)
		if self._match(TokenKind.BREAK):
			self._expect(TokenKind.SEMI, "Expected ';' after break statement.")
			return BreakStatement(line=token.line)
		if self._match(TokenKind.CONTINUE):
			self._expect(TokenKind.SEMI, "Expected ';' after continue statement.")
			return ContinueStatement(line=token.line)
		if self._check(TokenKind.LBRACE):
			return self._parse_block()
		if self._match(TokenKind.SEMI):
			return BlockStatement(line=token.line, body=[])
		if self._match(TokenKind.FINAL):
			if self._declaration_shape() != "variable":
				self._error("Expected a variable declaration after 'final'.", self._current())
			return self._parse_variable_declaration()
		shape = self._declaration_shape()
		if shape == "method":
			self._error("Method declarations are only allowed inside a class body.", token)
		if shape == "variable":
			return self._parse_variable_declaration()
		return self._parse_expression_statement()

	def _parse_for(self, for_token: Token) -> ForStatement:
		self._expect(TokenKind.LPAREN, "Expected '(' after 'for'.")
		init: Optional[Statement] = None
		if self._match(TokenKind.SEMI):
			init = None
		elif self._declaration_shape() == "variable":
			init = self._parse_variable_declaration()
		else:
			init = self._parse_expression_statement()
		test = None if self._check(TokenKind.SEMI) else self._parse_expression()
		self._expect(TokenKind.SEMI, "Expected ';' after for loop condition.")
		update = None if self._check(TokenKind.RPAREN) else self._parse_expression()
		self._expect(TokenKind.RPAREN, "Expected ')' after for loop clauses.")
		body = self._parse_statement()
		return ForStatement(line=for_token.line, init=init, test=test, update=update, body=body)

	def _parse_variable_declaration(self) -> VariableDeclaration:
		start = self._current()
		type_name = self._parse_type()
		name_token = self._expect(TokenKind.IDENT, "Expected variable name.")
		value: Optional[Expression] = None
		if self._match(TokenKind.ASSIGN):
			value = self._parse_expression()
		self._expect(TokenKind.SEMI, "Expected ';' after variable declaration.")
		return VariableDeclaration(line=start.line, type_name=type_name, name=name_token.value, value=value)

	def _parse_expression_statement(self) -> ExpressionStatement:
		expression = self._parse_expression()
		self._expect(TokenKind.SEMI, "Expected ';' after expression.")
		return ExpressionStatement(line=expression.line, expression=expression)

	def _declaration_shape(self) -> Optional[str]:
		"""Classify the statement at the cursor as "variable", "method" or None.

		Looks at most four tokens ahead and never consumes any:
		`T name`, `T[] name`, followed by `(` for a method.
		"""
		if self._current().kind not in TYPE_KINDS:
			return None
		peek1 = self._peek(1)
		is_scalar = peek1.kind == TokenKind.IDENT
		is_array = (
			peek1.kind == TokenKind.LBRACKET
			and self._peek(2).kind == TokenKind.RBRACKET
			and self._peek(3).kind == TokenKind.IDENT
		)
		if not (is_scalar or is_array):
			return None
		after_name = self._peek(4 if is_array else 2)
		return "method" if after_name.kind == TokenKind.LPAREN else "variable"

	# Expressions, lowest binding first ---------------------------------------

	def _parse_expression(self) -> Expression:
		return self._parse_assignment()

	def _parse_assignment(self) -> Expression:
		left = self._parse_conditional()
		if self._check(TokenKind.ASSIGN):
			op = self._advance_token()
			self._require_assignable(left, op)
			value = self._parse_assignment()
			return AssignmentExpr(line=left.line, assignee=left, value=value)
		if self._current().kind in COMPOUND_ASSIGN_KINDS:
			op = self._advance_token()
			self._require_assignable(left, op)
			value = self._parse_assignment()
			return CompoundAssignmentExpr(line=left.line, assignee=left, operator=op.value, value=value)
		return left

	def _require_assignable(self, target: Expression, op: Token) -> None:
		if isinstance(target, (Identifier, MemberExpr)):
			return
		self._error("Invalid assignment target.", op)

	def _parse_conditional(self) -> Expression:
		test = self._parse_logical_or()
		if self._match(TokenKind.QUESTION):
			consequent = self._parse_expression()
			self._expect(TokenKind.COLON, "Expected ':' in conditional expression.")
			alternate = self._parse_conditional()
			return ConditionalExpr(line=test.line, test=test, consequent=consequent, alternate=alternate)
		return test

	def _parse_logical_or(self) -> Expression:
		left = self._parse_logical_and()
		while self._check(TokenKind.OR_OR):
			operator = self._advance_token()
			right = self._parse_logical_and()
			left = LogicalExpr(line=left.line, left=left, operator=operator.value, right=right)
		return left

	def _parse_logical_and(self) -> Expression:
		left = self._parse_comparison()
		while self._check(TokenKind.AND_AND):
			operator = self._advance_token()
			right = self._parse_comparison()
			left = LogicalExpr(line=left.line, left=left, operator=operator.value, right=right)
		return left

	def _parse_comparison(self) -> Expression:
		left = self._parse_additive()
		while self._current().kind in COMPARISON_KINDS:
			operator = self._advance_token()
			right = self._parse_additive()
			left = BinaryExpr(line=left.line, left=left, operator=operator.value, right=right)
		return left

	def _parse_additive(self) -> Expression:
		left = self._parse_multiplicative()
		while self._check(TokenKind.PLUS) or self._check(TokenKind.MINUS):
			operator = self._advance_token()
			right = self._parse_multiplicative()
			left = BinaryExpr(line=left.line, left=left, operator=operator.value, right=right)
		return left

	def _parse_multiplicative(self) -> Expression:
		left = self._parse_unary()
		while self._check(TokenKind.STAR) or self._check(TokenKind.SLASH) or self._check(TokenKind.PERCENT):
			operator = self._advance_token()
			right = self._parse_unary()
			left = BinaryExpr(line=left.line, left=left, operator=operator.value, right=right)
		return left

	def _parse_unary(self) -> Expression:
		if self._check(TokenKind.BANG) or self._check(TokenKind.MINUS):
			operator = self._advance_token()
			argument = self._parse_unary()
			return UnaryExpr(line=operator.line, operator=operator.value, argument=argument)
		if self._check(TokenKind.PLUS_PLUS) or self._check(TokenKind.MINUS_MINUS):
			operator = self._advance_token()
			name_token = self._expect(TokenKind.IDENT, f"Expected a variable name after prefix '{operator.value}'.")
			argument = Identifier(line=name_token.line, symbol=name_token.value)
			return PrefixExpr(line=operator.line, operator=operator.value, argument=argument)
		return self._parse_call_member()

	def _parse_call_member(self) -> Expression:
		expr = self._parse_primary()
		while True:
			if self._match(TokenKind.LPAREN):
				args: List[Expression] = []
				if not self._check(TokenKind.RPAREN):
					args.append(self._parse_expression())
					while self._match(TokenKind.COMMA):
						args.append(self._parse_expression())
				self._expect(TokenKind.RPAREN, "Expected ')' to close arguments.")
				expr = CallExpr(line=expr.line, callee=expr, args=args)
			elif self._match(TokenKind.DOT):
				name_token = self._expect(TokenKind.IDENT, "Expected member name after '.'.")
				prop = Identifier(line=name_token.line, symbol=name_token.value)
				expr = MemberExpr(line=expr.line, object=expr, property=prop, computed=False)
			elif self._match(TokenKind.LBRACKET):
				index = self._parse_expression()
				self._expect(TokenKind.RBRACKET, "Expected ']' for computed property.")
				expr = MemberExpr(line=expr.line, object=expr, property=index, computed=True)
			else:
				return expr

	def _parse_primary(self) -> Expression:
		token = self._current()
		kind = token.kind
		if kind == TokenKind.IDENT:
			self._advance_token()
			ident = Identifier(line=token.line, symbol=token.value)
			if self._check(TokenKind.PLUS_PLUS) or self._check(TokenKind.MINUS_MINUS):
				operator = self._advance_token()
				return PostfixExpr(line=token.line, operator=operator.value, argument=ident)
			return ident
		if kind == TokenKind.SYSTEM:
			self._advance_token()
			return Identifier(line=token.line, symbol=token.value)
		if kind in (TokenKind.INTEGER_LITERAL, TokenKind.LONG_LITERAL):
			self._advance_token()
			return NumericLiteral(line=token.line, value=int(token.value))
		if kind == TokenKind.DOUBLE_LITERAL:
			self._advance_token()
			return DoubleLiteral(line=token.line, value=float(token.value))
		if kind == TokenKind.STRING_LITERAL:
			self._advance_token()
			return StringLiteral(line=token.line, value=token.value)
		if kind == TokenKind.CHAR_LITERAL:
			self._advance_token()
			return CharLiteral(line=token.line, value=token.value)
		if kind in (TokenKind.TRUE, TokenKind.FALSE):
			self._advance_token()
			return BooleanLiteral(line=token.line, value=kind == TokenKind.TRUE)
		if kind == TokenKind.NULL:
			self._advance_token()
			return NullLiteral(line=token.line)
		if kind == TokenKind.NEW:
			return self._parse_new()
		if kind == TokenKind.LBRACE:
			return self._parse_array_literal("int")
		if kind == TokenKind.LPAREN:
			self._advance_token()
			expr = self._parse_expression()
			self._expect(TokenKind.RPAREN, "Expected ')' to close grouped expression.")
			return expr
		if kind in UNSUPPORTED_KINDS:
			self._error(f"'{token.value}' is not supported by this interpreter.", token)
		self._error(f"Unexpected token: {token.value!r}", token)

	def _parse_new(self) -> Expression:
		new_token = self._advance_token()
		type_token = self._current()
		if type_token.kind not in TYPE_KINDS or type_token.kind == TokenKind.VOID:
			self._error("Expected class or type name after 'new'.", type_token)
		self._advance_token()
		if self._match(TokenKind.LPAREN):
			if type_token.kind != TokenKind.IDENT:
				self._error("Invalid 'new' expression.", new_token)
			if not self._check(TokenKind.RPAREN):
				self._error("Constructor arguments are not supported.", self._current())
			self._advance_token()
			return NewExpr(line=new_token.line, class_name=type_token.value)
		if self._match(TokenKind.LBRACKET):
			if self._match(TokenKind.RBRACKET):
				if not self._check(TokenKind.LBRACE):
					self._error("Expected array initializer after 'new " + type_token.value + "[]'.", self._current())
				literal = self._parse_array_literal(type_token.value)
				literal.line = new_token.line
				return literal
			size = self._parse_expression()
			self._expect(TokenKind.RBRACKET, "Expected ']' after array size.")
			return ArrayCreationExpr(line=new_token.line, element_type=type_token.value, size=size)
		self._error("Invalid 'new' expression.", new_token)

	def _parse_array_literal(self, element_type: str) -> ArrayCreationExpr:
		lbrace = self._advance_token()
		values: List[Expression] = []
		if not self._check(TokenKind.RBRACE):
			values.append(self._parse_expression())
			while self._match(TokenKind.COMMA):
				if self._check(TokenKind.RBRACE):
					break
				values.append(self._parse_expression())
		self._expect(TokenKind.RBRACE, "Expected '}' to close array literal.")
		return ArrayCreationExpr(line=lbrace.line, element_type=element_type, values=values)

	# Utility parsing helpers -------------------------------------------------

	def _current(self) -> Token:
		return self.tokens[self.index]

	def _peek(self, offset: int) -> Token:
		position = min(self.index + offset, len(self.tokens) - 1)
		return self.tokens[position]

	def _match(self, kind: TokenKind) -> bool:
		if self._check(kind):
			self.index += 1
			return True
		return False

	def _check(self, kind: TokenKind) -> bool:
		return self.tokens[self.index].kind == kind

	def _advance_token(self) -> Token:
		token = self.tokens[self.index]
		if not self._is_at_end():
			self.index += 1
		return token

	def _expect(self, kind: TokenKind, message: str) -> Token:
		if self._check(kind):
			return self._advance_token()
		got = self._current()
		self._error(message, got, hint=self._hint_for_expect(kind, got))

	def _is_at_end(self) -> bool:
		return self.tokens[self.index].kind == TokenKind.EOF

	def _error(self, message: str, token: Token, hint: Optional[str] = None) -> NoReturn:
		raise ParseError(message, token.line, hint)

	def _hint_for_expect(self, expected: TokenKind, got: Token) -> Optional[str]:
		if expected == TokenKind.SEMI:
			return "Statements and declarations must end with ';'."
		if expected == TokenKind.LBRACE:
			return "Blocks start with '{'. A method header must be followed by a block."
		if expected == TokenKind.RBRACE:
			return "Blocks end with '}'. Check for a missing closing brace or an extra '{' earlier."
		if expected == TokenKind.RPAREN:
			return "Missing ')'. Check calls and conditions like: if (cond) { ... }"
		if expected == TokenKind.LPAREN:
			return "Missing '('. Conditions require parentheses like: while (i < n) { ... }"
		if expected == TokenKind.IDENT and got.kind in KEYWORDS.values():
			return f"'{got.value}' is a keyword and can't be used as a name."
		return None


def parse(tokens: List[Token]) -> Program:
	return Parser(tokens).parse()


# ---------------------------------------------------------------------------
# Pipeline and syntax validation


@dataclass
class CompilationArtifacts:
	tokens: List[Token]
	ast: Program
	duration_ms: float


def compile_source(source: str) -> CompilationArtifacts:
	start = time.perf_counter()
	tokens = tokenize(source)
	ast = parse(tokens)
	duration_ms = (time.perf_counter() - start) * 1000
	return CompilationArtifacts(tokens=tokens, ast=ast, duration_ms=duration_ms)


def validate_java_syntax(code: str) -> Optional[SyntaxIssue]:
	"""Lex and parse `code` without running it.

	Returns None when the code is structurally valid (or blank), otherwise the
	first problem found.
	"""
	if not code.strip():
		return None
	try:
		parse(tokenize(code))
	except ParseError as err:
		return SyntaxIssue(line=err.line, message=err.message, hint=err.hint)
	except Exception as err:  # pragma: no cover
		return SyntaxIssue(line=1, message=f"Unable to parse code: {err}")
	return None


def describe_tokens(tokens: List[Token]) -> List[Tuple[str, str, int]]:
	return [(t.kind.name, t.value, t.line) for t in tokens if t.kind != TokenKind.EOF]


if __name__ == "__main__":
	if len(sys.argv) < 2:
		print("Usage: javavis.py <file.java> [--tokens]")
		sys.exit(1)
	source = Path(sys.argv[1]).read_text(encoding="utf-8")
	issue = validate_java_syntax(source)
	if issue is not None:
		print(f"[ERROR] line {issue.line}: {issue.message}")
		if issue.hint:
			print(f"        hint: {issue.hint}")
		sys.exit(1)
	artifacts = compile_source(source)
	if "--tokens" in sys.argv[2:]:
		for kind, value, line in describe_tokens(artifacts.tokens):
			print(f"{line:>4}  {kind:<16} {value}")
	print(f"OK | Classes: {len(artifacts.ast.body)} | Tokens: {len(artifacts.tokens)} | Time: {artifacts.duration_ms:.2f} ms")
