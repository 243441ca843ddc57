import pytest

from javavis import LexError, TokenKind, tokenize


def kinds(source):
	return [t.kind for t in tokenize(source)]


def test_declaration_tokens():
	assert kinds("int x = 10;") == [
		TokenKind.INT,
		TokenKind.IDENT,
		TokenKind.ASSIGN,
		TokenKind.INTEGER_LITERAL,
		TokenKind.SEMI,
		TokenKind.EOF,
	]


def test_empty_source_is_just_eof():
	tokens = tokenize("")
	assert len(tokens) == 1
	assert tokens[0].kind == TokenKind.EOF


def test_two_char_operators_win_over_one_char():
	assert kinds("a >= b == c")[1] == TokenKind.GTE
	assert kinds("a >= b == c")[3] == TokenKind.EQ
	assert kinds("x += 1")[1] == TokenKind.PLUS_ASSIGN
	assert kinds("i++")[1] == TokenKind.PLUS_PLUS
	assert kinds("a && b || c")[1:4:2] == [TokenKind.AND_AND, TokenKind.OR_OR]
	assert kinds("a = !b")[1:3] == [TokenKind.ASSIGN, TokenKind.BANG]


def test_keywords_and_identifiers():
	tokens = tokenize("System String null counter _tmp1")
	assert [t.kind for t in tokens[:-1]] == [
		TokenKind.SYSTEM,
		TokenKind.STRING,
		TokenKind.NULL,
		TokenKind.IDENT,
		TokenKind.IDENT,
	]
	assert tokens[4].value == "_tmp1"


def test_number_literals():
	tokens = tokenize("7 3.14 42L")
	assert [(t.kind, t.value) for t in tokens[:-1]] == [
		(TokenKind.INTEGER_LITERAL, "7"),
		(TokenKind.DOUBLE_LITERAL, "3.14"),
		(TokenKind.LONG_LITERAL, "42"),
	]


def test_string_keeps_raw_escapes():
	token = tokenize('"a\\nb"')[0]
	assert token.kind == TokenKind.STRING_LITERAL
	assert token.value == "a\\nb"


def test_escaped_quote_does_not_end_string():
	token = tokenize('"say \\"hi\\"" ;')[0]
	assert token.value == 'say \\"hi\\"'


def test_multiline_string_reports_start_line():
	tokens = tokenize('x\n"ab\ncd" y')
	assert tokens[1].kind == TokenKind.STRING_LITERAL
	assert tokens[1].line == 2
	assert tokens[2].line == 3


def test_char_literals():
	assert tokenize("'a'")[0].value == "a"
	escaped = tokenize("'\\n'")[0]
	assert escaped.kind == TokenKind.CHAR_LITERAL
	assert escaped.value == "\\n"


def test_comments_are_skipped_and_lines_counted():
	tokens = tokenize("// header\nint /* spans\n two lines */ z;")
	assert tokens[0].kind == TokenKind.INT
	assert tokens[0].line == 2
	assert tokens[1].value == "z"
	assert tokens[1].line == 3


@pytest.mark.parametrize(
	"source, message",
	[
		('x = "open', "Unclosed string literal."),
		("c = '';", "Empty character literal."),
		("c = 'ab';", "Unclosed char literal."),
		("/* never closed", "Unclosed block comment."),
		("int x = #;", "Unexpected character '#'"),
	],
)
def test_lex_errors(source, message):
	with pytest.raises(LexError) as err:
		tokenize(source)
	assert err.value.message == message
	assert err.value.line == 1


def test_lex_error_line_number():
	with pytest.raises(LexError) as err:
		tokenize("int a;\nint b;\nint c = @;")
	assert err.value.line == 3
