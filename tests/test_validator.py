import pytest

from javavis import ParseError, SyntaxIssue, compile_source, validate_java_syntax

from conftest import wrap_main


SAMPLES = [
	wrap_main('System.out.println("ok");'),
	wrap_main("int x = 1\n"),
	wrap_main("int[] a = new int[3];\nfor (int i = 0; i < a.length; i++) { a[i] = i * i; }"),
	wrap_main("while (true) {"),
	wrap_main("String s = \"unterminated;"),
	wrap_main("Foo f = new Foo(3);"),
	"class Helper { }\n" + wrap_main("Helper h = new Helper();"),
	"public class Main { void broken( { } }",
]


def test_blank_code_is_valid():
	assert validate_java_syntax("") is None
	assert validate_java_syntax("   \n\t\n") is None


def test_valid_program():
	assert validate_java_syntax(wrap_main("int x = 1 + 2;")) is None


def test_missing_semicolon_reports_line_and_hint():
	issue = validate_java_syntax("public class Main {\n\tpublic static void main(String[] args) {\n\t\tint x = 1\n\t\tint y = 2;\n\t}\n}\n")
	assert isinstance(issue, SyntaxIssue)
	assert issue.line == 4
	assert "';'" in issue.message
	assert issue.hint is not None


def test_unclosed_brace():
	issue = validate_java_syntax("public class Main {\n\tpublic static void main(String[] args) {\n\t\tint x = 1;\n\t}\n")
	assert issue is not None
	assert "'}'" in issue.message


def test_lex_errors_surface_as_issues():
	issue = validate_java_syntax("public class Main {\n\tpublic static void main(String[] args) {\n\t\tint x = #;\n\t}\n}\n")
	assert issue == SyntaxIssue(line=3, message="Unexpected character '#'")


@pytest.mark.parametrize("source", SAMPLES)
def test_validator_agrees_with_parser(source):
	issue = validate_java_syntax(source)
	try:
		compile_source(source)
	except ParseError as err:
		assert issue is not None
		assert (issue.line, issue.message) == (err.line, err.message)
	else:
		assert issue is None
