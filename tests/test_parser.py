import pytest

from javavis import (
	ArrayCreationExpr,
	AssignmentExpr,
	BinaryExpr,
	CallExpr,
	CompoundAssignmentExpr,
	ConditionalExpr,
	ExpressionStatement,
	ForStatement,
	Identifier,
	LogicalExpr,
	MemberExpr,
	MethodDeclaration,
	NewExpr,
	NumericLiteral,
	ParseError,
	PostfixExpr,
	PrefixExpr,
	VariableDeclaration,
	parse,
	tokenize,
)

from conftest import wrap_main


def parse_source(source):
	return parse(tokenize(source))


def main_body(body, members=""):
	program = parse_source(wrap_main(body, members))
	main_class = [c for c in program.body if c.name == "Main"][0]
	return main_class.methods()["main"].body


def first_value(body):
	stmt = main_body(body)[0]
	if isinstance(stmt, VariableDeclaration):
		return stmt.value
	return stmt.expression


def test_program_structure():
	program = parse_source(
		"class Point { int x; }\n"
		"public class Main {\n"
		"\tstatic int count = 0;\n"
		"\tstatic int add(int a, int b) { return a + b; }\n"
		"\tpublic static void main(String[] args) { }\n"
		"}\n"
	)
	assert [c.name for c in program.body] == ["Point", "Main"]
	main_class = program.body[1]
	assert main_class.line == 2
	assert [f.name for f in main_class.static_fields()] == ["count"]
	assert [f.name for f in program.body[0].instance_fields()] == ["x"]
	methods = main_class.methods()
	assert set(methods) == {"add", "main"}
	add = methods["add"]
	assert isinstance(add, MethodDeclaration)
	assert add.return_type == "int"
	assert [(p.type_name, p.name) for p in add.params] == [("int", "a"), ("int", "b")]
	assert methods["main"].params[0].type_name == "String[]"


def test_import_lines_are_skipped():
	program = parse_source("import java.util.*;\n" + wrap_main("int x = 1;"))
	assert program.body[0].name == "Main"


def test_multiplication_binds_tighter_than_addition():
	value = first_value("int x = 1 + 2 * 3;")
	assert isinstance(value, BinaryExpr)
	assert value.operator == "+"
	assert isinstance(value.right, BinaryExpr)
	assert value.right.operator == "*"
	assert value.kind == "BinaryExpr"


def test_logical_precedence():
	value = first_value("boolean r = a < b && c || d;")
	assert isinstance(value, LogicalExpr)
	assert value.operator == "||"
	assert isinstance(value.left, LogicalExpr)
	assert value.left.operator == "&&"
	assert isinstance(value.left.left, BinaryExpr)


def test_assignment_is_right_associative():
	value = first_value("a = b = 3;")
	assert isinstance(value, AssignmentExpr)
	assert isinstance(value.assignee, Identifier)
	assert isinstance(value.value, AssignmentExpr)


def test_compound_assignment_and_increments():
	body = main_body("x += 2;\ni++;\n--i;")
	assert isinstance(body[0].expression, CompoundAssignmentExpr)
	assert body[0].expression.operator == "+="
	assert isinstance(body[1].expression, PostfixExpr)
	assert body[1].expression.operator == "++"
	assert isinstance(body[2].expression, PrefixExpr)
	assert body[2].expression.argument.symbol == "i"


def test_conditional_expression():
	value = first_value("int m = a > b ? a : b;")
	assert isinstance(value, ConditionalExpr)
	assert isinstance(value.test, BinaryExpr)


def test_array_declarations():
	body = main_body("int[] a = new int[5];\nint[] b = new int[]{1, 2};\nString[] s = {\"x\"};")
	assert body[0].type_name == "int[]"
	assert isinstance(body[0].value, ArrayCreationExpr)
	assert body[0].value.element_type == "int"
	assert isinstance(body[0].value.size, NumericLiteral)
	assert len(body[1].value.values) == 2
	assert body[2].value.element_type == "int"
	assert body[2].value.values[0].value == "x"


def test_new_object():
	value = first_value("Point p = new Point();")
	assert isinstance(value, NewExpr)
	assert value.class_name == "Point"


@pytest.mark.parametrize(
	"body, message",
	[
		("Point p = new Point(1);", "Constructor arguments are not supported."),
		("int x = new int();", "Invalid 'new' expression."),
		("int x = new int;", "Invalid 'new' expression."),
	],
)
def test_invalid_new(body, message):
	with pytest.raises(ParseError) as err:
		main_body(body)
	assert err.value.message == message


def test_console_call_shape():
	stmt = main_body('System.out.println("hi");')[0]
	assert isinstance(stmt, ExpressionStatement)
	call = stmt.expression
	assert isinstance(call, CallExpr)
	assert isinstance(call.callee, MemberExpr)
	assert call.callee.property.symbol == "println"
	assert call.callee.object.object.symbol == "System"
	assert call.callee.object.property.symbol == "out"


def test_indexing_is_computed_member():
	value = first_value("int v = arr[i + 1];")
	assert isinstance(value, MemberExpr)
	assert value.computed
	assert isinstance(value.property, BinaryExpr)


def test_for_loop_clauses_are_optional():
	loop = main_body("for (;;) { break; }")[0]
	assert isinstance(loop, ForStatement)
	assert loop.init is None and loop.test is None and loop.update is None

	loop = main_body("for (i = 0; i < 3; i++) { }")[0]
	assert isinstance(loop.init, ExpressionStatement)
	assert isinstance(loop.update, PostfixExpr)

	loop = main_body("for (int i = 0; i < 3; i += 1) { }")[0]
	assert isinstance(loop.init, VariableDeclaration)
	assert isinstance(loop.update, CompoundAssignmentExpr)


def test_missing_semicolon_has_hint():
	with pytest.raises(ParseError) as err:
		parse_source("public class Main {\n\tpublic static void main(String[] args) {\n\t\tint x = 1\n\t}\n}\n")
	assert err.value.line == 4
	assert err.value.message == "Expected ';' after variable declaration."
	assert err.value.hint == "Statements and declarations must end with ';'."


def test_invalid_assignment_target():
	with pytest.raises(ParseError) as err:
		main_body("1 = x;")
	assert err.value.message == "Invalid assignment target."


@pytest.mark.parametrize("keyword", ["switch", "try", "throw"])
def test_unsupported_keywords(keyword):
	with pytest.raises(ParseError) as err:
		main_body(keyword + " (x) { }")
	assert err.value.message == f"'{keyword}' is not supported by this interpreter."


def test_method_declaration_inside_method_is_rejected():
	with pytest.raises(ParseError) as err:
		main_body("int helper() { return 1; }")
	assert "only allowed inside a class body" in err.value.message


def test_top_level_statement_is_rejected():
	with pytest.raises(ParseError) as err:
		parse_source("int x = 1;")
	assert err.value.message == "Expected a class declaration."


def test_parse_errors_carry_the_offending_token():
	with pytest.raises(ParseError) as err:
		main_body("int x = );")
	assert err.value.message == "Unexpected token: ')'"
	assert err.value.line == 3
