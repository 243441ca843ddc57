import math

import pytest

from webapp.runtime import (
	ArrayCell,
	CharValue,
	DoubleValue,
	DuplicateDeclaration,
	Environments,
	ExecutionStep,
	Heap,
	IntValue,
	ObjectCell,
	StringValue,
	UnknownVariable,
	changed_heap_ids,
	changed_variables,
	format_double,
	format_printf,
	interpret_escapes,
	render_value,
	to_java_string,
)


@pytest.fixture
def envs():
	return Environments()


def test_declare_and_lookup(envs):
	root = envs.new_scope()
	envs.declare(root, "x", IntValue(1))
	assert envs.lookup(root, "x") == IntValue(1)


def test_duplicate_declaration_in_same_scope(envs):
	root = envs.new_scope()
	envs.declare(root, "x", IntValue(1))
	with pytest.raises(DuplicateDeclaration) as err:
		envs.declare(root, "x", IntValue(2))
	assert err.value.message == 'Variable "x" has already been declared.'


def test_shadowing_in_child_scope(envs):
	root = envs.new_scope()
	child = envs.new_scope(root)
	envs.declare(root, "x", IntValue(1))
	envs.declare(child, "x", IntValue(2))
	assert envs.lookup(child, "x") == IntValue(2)
	assert envs.lookup(root, "x") == IntValue(1)


def test_assign_updates_owning_scope(envs):
	root = envs.new_scope()
	child = envs.new_scope(root)
	envs.declare(root, "total", IntValue(0))
	envs.assign(child, "total", IntValue(5))
	assert envs.lookup(root, "total") == IntValue(5)
	assert envs.get_snapshot(child) == {}


def test_unknown_variable(envs):
	root = envs.new_scope()
	with pytest.raises(UnknownVariable) as err:
		envs.lookup(root, "missing")
	assert err.value.message == 'Variable "missing" not found.'
	with pytest.raises(UnknownVariable):
		envs.assign(root, "missing", IntValue(1))


def test_snapshot_is_own_bindings_in_order(envs):
	root = envs.new_scope()
	child = envs.new_scope(root)
	envs.declare(root, "outer", IntValue(1))
	envs.declare(child, "b", IntValue(2))
	envs.declare(child, "a", IntValue(3))
	snapshot = envs.get_snapshot(child)
	assert list(snapshot) == ["b", "a"]
	snapshot["b"] = IntValue(99)
	assert envs.lookup(child, "b") == IntValue(2)


def test_declared_type_coerces_assignments(envs):
	root = envs.new_scope()
	envs.declare(root, "d", IntValue(3), "double")
	assert envs.lookup(root, "d") == DoubleValue(3.0)
	envs.declare(root, "c", IntValue(98), "char")
	assert envs.lookup(root, "c") == CharValue("b")
	envs.declare(root, "n", IntValue(0), "int")
	envs.assign(root, "n", DoubleValue(2.9))
	assert envs.lookup(root, "n") == IntValue(2)


def test_heap_handles_and_rendering():
	heap = Heap()
	first = heap.allocate(ArrayCell("int", [IntValue(1), IntValue(2)]))
	second = heap.allocate(ObjectCell("Point", {"x": IntValue(3)}))
	assert (first.index, second.index) == (0, 1)
	assert render_value(second) == {"__ref__": "heap_1"}
	assert heap.snapshot() == {
		"heap_0": {"type": "array", "elementType": "int", "values": [1, 2]},
		"heap_1": {"type": "object", "className": "Point", "fields": {"x": 3}},
	}
	assert to_java_string(first, heap) == "int[]@heap_0"
	assert to_java_string(second, heap) == "Point@heap_1"


@pytest.mark.parametrize(
	"number, text",
	[
		(3.0, "3.0"),
		(0.1, "0.1"),
		(2.5, "2.5"),
		(-0.0, "-0.0"),
		(1e7, "1.0E7"),
		(123456789.0, "1.23456789E8"),
		(0.00015, "1.5E-4"),
		(math.inf, "Infinity"),
		(-math.inf, "-Infinity"),
		(math.nan, "NaN"),
	],
)
def test_format_double(number, text):
	assert format_double(number) == text


def test_non_finite_doubles_render_as_text():
	assert render_value(DoubleValue(math.inf)) == "Infinity"
	assert render_value(DoubleValue(1.5)) == 1.5


def test_interpret_escapes_single_pass():
	assert interpret_escapes("a\\nb") == "a\nb"
	assert interpret_escapes("tab\\there") == "tab\there"
	assert interpret_escapes("\\\\n") == "\\n"
	assert interpret_escapes('say \\"hi\\"') == 'say "hi"'
	assert interpret_escapes("keep \\q") == "keep \\q"


def test_format_printf():
	heap = Heap()
	args = [IntValue(3), DoubleValue(2.5), StringValue("x")]
	assert format_printf("%d-%.2f-%s%n%%", args, heap) == "3-2.50-x\n%"
	assert format_printf("%f", [IntValue(1)], heap) == "1.000000"
	assert format_printf("%d and %d", [IntValue(1)], heap) == "1 and "


def _step(variables, heap):
	return ExecutionStep(line_number=1, variables=variables, heap=heap, call_stack=())


def test_changed_variables_and_heap():
	cell_before = {"type": "array", "elementType": "int", "values": [0]}
	cell_after = {"type": "array", "elementType": "int", "values": [7]}
	ref = {"__ref__": "heap_0"}
	first = _step({"a": ref, "n": 1}, {"heap_0": cell_before})
	second = _step({"a": ref, "n": 1, "m": 2}, {"heap_0": cell_after})
	assert changed_variables(first, None) == []
	assert changed_heap_ids(second, first) == ["heap_0"]
	assert changed_variables(second, first) == ["a", "m"]


def test_step_json_shape():
	step = ExecutionStep(line_number=4, variables={"x": 1}, heap={}, call_stack=(), console_output="hi\n")
	data = step.to_json()
	assert data == {"lineNumber": 4, "variables": {"x": 1}, "heap": {}, "callStack": [], "consoleOutput": "hi\n"}
	data["variables"]["x"] = 2
	assert step.variables == {"x": 1}
