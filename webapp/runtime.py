"""Runtime model shared by the interpreter and the web layer.

Values are a closed set of small frozen dataclasses. Objects and arrays live in
a heap arena addressed by integer handles, and lexical scopes live in an
environment arena whose records point at their parent by index.
"""

from __future__ import annotations

import copy
import math
import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Tuple, Union

from javavis import MethodDeclaration


# ---------------------------------------------------------------------------
# Errors


class RuntimeIssue(Exception):
	def __init__(self, message: str, line: Optional[int] = None) -> None:
		super().__init__(message)
		self.message = message
		self.line = line

	def __str__(self) -> str:
		return self.message


class DuplicateDeclaration(RuntimeIssue):
	def __init__(self, name: str, line: Optional[int] = None) -> None:
		super().__init__(f'Variable "{name}" has already been declared.', line)
		self.name = name


class UnknownVariable(RuntimeIssue):
	def __init__(self, name: str, line: Optional[int] = None) -> None:
		super().__init__(f'Variable "{name}" not found.', line)
		self.name = name


class EntryPointNotFound(RuntimeIssue):
	pass


class InvalidOperand(RuntimeIssue):
	pass


class StepLimitExceeded(RuntimeIssue):
	def __init__(self, limit: int, line: Optional[int] = None) -> None:
		super().__init__(
			f"Execution step limit reached ({limit}). The program may contain an infinite loop.",
			line,
		)
		self.limit = limit


# ---------------------------------------------------------------------------
# Values


@dataclass(frozen=True)
class IntValue:
	value: int


@dataclass(frozen=True)
class DoubleValue:
	value: float


@dataclass(frozen=True)
class BoolValue:
	value: bool


@dataclass(frozen=True)
class CharValue:
	value: str


@dataclass(frozen=True)
class StringValue:
	# Raw text; escapes are only translated on console output.
	value: str


@dataclass(frozen=True)
class NullValue:
	pass


@dataclass(frozen=True)
class RefValue:
	index: int


@dataclass(frozen=True)
class VoidValue:
	pass


@dataclass(frozen=True, eq=False)
class ClassValue:
	name: str
	methods: Dict[str, MethodDeclaration]


Value = Union[IntValue, DoubleValue, BoolValue, CharValue, StringValue, NullValue, RefValue, VoidValue, ClassValue]

NULL = NullValue()
VOID = VoidValue()
TRUE = BoolValue(True)
FALSE = BoolValue(False)


def is_numeric(value: Value) -> bool:
	return isinstance(value, (IntValue, DoubleValue, CharValue))


def is_integral(value: Value) -> bool:
	return isinstance(value, (IntValue, CharValue))


def as_number(value: Value) -> Union[int, float]:
	if isinstance(value, CharValue):
		return ord(value.value)
	if isinstance(value, (IntValue, DoubleValue)):
		return value.value
	raise InvalidOperand(f"Expected a number, got {type_label(value)}.")


def type_label(value: Value) -> str:
	if isinstance(value, IntValue):
		return "int"
	if isinstance(value, DoubleValue):
		return "double"
	if isinstance(value, BoolValue):
		return "boolean"
	if isinstance(value, CharValue):
		return "char"
	if isinstance(value, StringValue):
		return "String"
	if isinstance(value, NullValue):
		return "null"
	if isinstance(value, RefValue):
		return "reference"
	if isinstance(value, ClassValue):
		return "class"
	return "void"


def default_value(type_name: str) -> Value:
	if type_name in ("int", "long"):
		return IntValue(0)
	if type_name == "double":
		return DoubleValue(0.0)
	if type_name == "boolean":
		return FALSE
	if type_name == "char":
		return CharValue("\0")
	return NULL


def coerce(value: Value, type_name: Optional[str]) -> Value:
	"""Apply Java's assignment conversions for the primitive declared types."""
	if type_name == "double" and isinstance(value, (IntValue, CharValue)):
		return DoubleValue(float(as_number(value)))
	if type_name in ("int", "long"):
		if isinstance(value, DoubleValue):
			if math.isnan(value.value):
				return IntValue(0)
			if math.isinf(value.value):
				raise InvalidOperand("Cannot convert an infinite double to int.")
			return IntValue(int(value.value))
		if isinstance(value, CharValue):
			return IntValue(ord(value.value))
	if type_name == "char" and isinstance(value, IntValue) and 0 <= value.value <= 0x10FFFF:
		return CharValue(chr(value.value))
	return value


# ---------------------------------------------------------------------------
# Heap arena


@dataclass
class ArrayCell:
	element_type: str
	values: List[Value]


@dataclass
class ObjectCell:
	class_name: str
	fields: Dict[str, Value] = field(default_factory=dict)


HeapCell = Union[ArrayCell, ObjectCell]


def heap_id(index: int) -> str:
	return f"heap_{index}"


class Heap:
	"""Append-only store of arrays and objects. Cells are never freed."""

	def __init__(self) -> None:
		self._cells: List[HeapCell] = []

	def allocate(self, cell: HeapCell) -> RefValue:
		self._cells.append(cell)
		return RefValue(len(self._cells) - 1)

	def get(self, ref: RefValue) -> HeapCell:
		return self._cells[ref.index]

	def __len__(self) -> int:
		return len(self._cells)

	def snapshot(self) -> Dict[str, Dict[str, Any]]:
		return {heap_id(i): render_cell(cell) for i, cell in enumerate(self._cells)}


def render_value(value: Value) -> Any:
	"""JSON-ready rendering of a value for a trace step."""
	if isinstance(value, (IntValue, BoolValue, CharValue, StringValue)):
		return value.value
	if isinstance(value, DoubleValue):
		if math.isfinite(value.value):
			return value.value
		return format_double(value.value)
	if isinstance(value, RefValue):
		return {"__ref__": heap_id(value.index)}
	if isinstance(value, ClassValue):
		return {"type": "class", "name": value.name, "methods": sorted(value.methods)}
	return None


def render_cell(cell: HeapCell) -> Dict[str, Any]:
	if isinstance(cell, ArrayCell):
		return {
			"type": "array",
			"elementType": cell.element_type,
			"values": [render_value(v) for v in cell.values],
		}
	return {
		"type": "object",
		"className": cell.class_name,
		"fields": {name: render_value(v) for name, v in cell.fields.items()},
	}


# ---------------------------------------------------------------------------
# Environment arena


@dataclass
class EnvironmentRecord:
	parent: Optional[int]
	bindings: Dict[str, Value] = field(default_factory=dict)
	types: Dict[str, str] = field(default_factory=dict)


class Environments:
	"""Lexical scopes stored in a list; a scope handle is its index.

	Scopes are opened and closed in strict LIFO order (blocks nest, calls
	stack), so releasing the newest record is enough to reclaim space.
	"""

	def __init__(self) -> None:
		self._records: List[EnvironmentRecord] = []

	def new_scope(self, parent: Optional[int] = None) -> int:
		self._records.append(EnvironmentRecord(parent=parent))
		return len(self._records) - 1

	def release(self, env: int) -> None:
		if env == len(self._records) - 1:
			self._records.pop()

	def declare(self, env: int, name: str, value: Value, type_name: Optional[str] = None) -> Value:
		record = self._records[env]
		if name in record.bindings:
			raise DuplicateDeclaration(name)
		value = coerce(value, type_name)
		record.bindings[name] = value
		if type_name is not None:
			record.types[name] = type_name
		return value

	def assign(self, env: int, name: str, value: Value) -> Value:
		record = self._records[self.resolve(env, name)]
		value = coerce(value, record.types.get(name))
		record.bindings[name] = value
		return value

	def lookup(self, env: int, name: str) -> Value:
		return self._records[self.resolve(env, name)].bindings[name]

	def resolve(self, env: int, name: str) -> int:
		current: Optional[int] = env
		while current is not None:
			record = self._records[current]
			if name in record.bindings:
				return current
			current = record.parent
		raise UnknownVariable(name)

	def get_snapshot(self, env: int) -> Dict[str, Value]:
		return dict(self._records[env].bindings)


# ---------------------------------------------------------------------------
# Control flow and trace records


class Flow(Enum):
	NORMAL = auto()
	BREAK = auto()
	CONTINUE = auto()
	RETURN = auto()


@dataclass(frozen=True)
class Completion:
	flow: Flow
	value: Value = VOID

	@property
	def abrupt(self) -> bool:
		return self.flow is not Flow.NORMAL


NORMAL_COMPLETION = Completion(Flow.NORMAL)
BREAK_COMPLETION = Completion(Flow.BREAK)
CONTINUE_COMPLETION = Completion(Flow.CONTINUE)


@dataclass(frozen=True)
class StackFrameInfo:
	method_name: str
	line: int


@dataclass(frozen=True)
class ExecutionStep:
	line_number: int
	variables: Dict[str, Any]
	heap: Dict[str, Dict[str, Any]]
	call_stack: Tuple[StackFrameInfo, ...]
	console_output: Optional[str] = None
	event: Optional[str] = None

	def to_json(self) -> Dict[str, Any]:
		data: Dict[str, Any] = {
			"lineNumber": self.line_number,
			"variables": copy.deepcopy(self.variables),
			"heap": copy.deepcopy(self.heap),
			"callStack": [{"methodName": f.method_name, "line": f.line} for f in self.call_stack],
		}
		if self.console_output is not None:
			data["consoleOutput"] = self.console_output
		if self.event is not None:
			data["event"] = self.event
		return data


def changed_variables(step: ExecutionStep, previous: Optional[ExecutionStep]) -> List[str]:
	"""Names whose value differs from `previous`, including references whose target cell changed."""
	if previous is None:
		return []
	changed_cells = set(changed_heap_ids(step, previous))
	names: List[str] = []
	for name, rendered in step.variables.items():
		if name not in previous.variables or previous.variables[name] != rendered:
			names.append(name)
		elif isinstance(rendered, dict) and rendered.get("__ref__") in changed_cells:
			names.append(name)
	return names


def changed_heap_ids(step: ExecutionStep, previous: Optional[ExecutionStep]) -> List[str]:
	if previous is None:
		return []
	return [hid for hid, cell in step.heap.items() if previous.heap.get(hid) != cell]


# ---------------------------------------------------------------------------
# Java-style formatting


ESCAPES = {
	"n": "\n",
	"t": "\t",
	"r": "\r",
	"b": "\b",
	"f": "\f",
	"'": "'",
	'"': '"',
	"\\": "\\",
}

_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_FORMAT_RE = re.compile(r"%(\.\d+)?([dfsn%])")


def interpret_escapes(text: str) -> str:
	"""Translate backslash escapes in one left-to-right pass; unknown ones are kept."""
	return _ESCAPE_RE.sub(lambda m: ESCAPES.get(m.group(1), m.group(0)), text)


def decode_char(raw: str) -> str:
	if raw.startswith("\\") and len(raw) == 2:
		return ESCAPES.get(raw[1], raw[1])
	return raw


def format_double(number: float) -> str:
	"""Render a double the way Java's Double.toString does."""
	if math.isnan(number):
		return "NaN"
	if math.isinf(number):
		return "Infinity" if number > 0 else "-Infinity"
	if number == 0:
		return "-0.0" if math.copysign(1.0, number) < 0 else "0.0"
	magnitude = abs(number)
	if 1e-3 <= magnitude < 1e7:
		text = repr(number)
		if "e" in text or "E" in text:
			text = format(Decimal(text), "f")
		return text if "." in text else text + ".0"
	digits = Decimal(repr(number)).normalize()
	sign, coefficient, exponent = digits.as_tuple()
	mantissa = "".join(str(d) for d in coefficient)
	power = len(mantissa) - 1 + exponent
	fraction = mantissa[1:] or "0"
	return f"{'-' if sign else ''}{mantissa[0]}.{fraction}E{power}"


def to_java_string(value: Value, heap: Heap) -> str:
	if isinstance(value, BoolValue):
		return "true" if value.value else "false"
	if isinstance(value, IntValue):
		return str(value.value)
	if isinstance(value, DoubleValue):
		return format_double(value.value)
	if isinstance(value, (CharValue, StringValue)):
		return value.value
	if isinstance(value, NullValue):
		return "null"
	if isinstance(value, RefValue):
		cell = heap.get(value)
		if isinstance(cell, ArrayCell):
			return f"{cell.element_type}[]@{heap_id(value.index)}"
		return f"{cell.class_name}@{heap_id(value.index)}"
	if isinstance(value, ClassValue):
		return f"class {value.name}"
	return ""


def to_raw_text(value: Value, heap: Heap) -> str:
	"""Text for joining into raw string text, where a backslash char must stay literal."""
	if isinstance(value, CharValue):
		return value.value.replace("\\", "\\\\")
	return to_java_string(value, heap)


def format_printf(template: str, args: List[Value], heap: Heap) -> str:
	"""Minimal printf: %d, %f (with optional .N precision), %s, %n and %%."""
	remaining = iter(args)

	def substitute(match: "re.Match[str]") -> str:
		precision, conversion = match.group(1), match.group(2)
		if conversion == "n":
			return "\n"
		if conversion == "%":
			return "%"
		arg = next(remaining, None)
		if arg is None:
			return ""
		if conversion == "f" and is_numeric(arg):
			digits = int(precision[1:]) if precision else 6
			return f"{float(as_number(arg)):.{digits}f}"
		if conversion == "d" and is_integral(arg):
			return str(as_number(arg))
		return to_java_string(arg, heap)

	return _FORMAT_RE.sub(substitute, template)
