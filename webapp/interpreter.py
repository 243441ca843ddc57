from __future__ import annotations

import logging
import math
import sys
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Union

from javavis import (
	ArrayCreationExpr,
	AssignmentExpr,
	BinaryExpr,
	BlockStatement,
	BooleanLiteral,
	BreakStatement,
	CallExpr,
	CharLiteral,
	ClassDeclaration,
	CompoundAssignmentExpr,
	ConditionalExpr,
	ContinueStatement,
	DoubleLiteral,
	DoWhileStatement,
	Expression,
	ExpressionStatement,
	ForStatement,
	Identifier,
	IfStatement,
	LogicalExpr,
	MemberExpr,
	MethodDeclaration,
	NewExpr,
	NullLiteral,
	NumericLiteral,
	PostfixExpr,
	PrefixExpr,
	Program,
	ReturnStatement,
	Statement,
	StringLiteral,
	UnaryExpr,
	VariableDeclaration,
	WhileStatement,
	compile_source,
)
from webapp.runtime import (
	BREAK_COMPLETION,
	CONTINUE_COMPLETION,
	FALSE,
	NORMAL_COMPLETION,
	NULL,
	TRUE,
	VOID,
	ArrayCell,
	BoolValue,
	CharValue,
	ClassValue,
	Completion,
	DoubleValue,
	Environments,
	EntryPointNotFound,
	ExecutionStep,
	Flow,
	Heap,
	IntValue,
	InvalidOperand,
	NullValue,
	ObjectCell,
	RefValue,
	RuntimeIssue,
	StackFrameInfo,
	StepLimitExceeded,
	StringValue,
	UnknownVariable,
	Value,
	as_number,
	coerce,
	decode_char,
	default_value,
	format_printf,
	interpret_escapes,
	is_integral,
	is_numeric,
	render_value,
	to_raw_text,
	type_label,
)


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

MAX_STEPS = 25_000
MAX_CALL_DEPTH = 3_000
# Upper bound on Python frames spent per nested Java call, statement nesting included.
_FRAMES_PER_CALL = 40
_RECURSION_LIMIT = 1_000 + MAX_CALL_DEPTH * _FRAMES_PER_CALL
NOT_DECLARED = "not-declared"
VARIABLE_MODES = ("local", "all")
CONSOLE_METHODS = ("println", "print", "printf")


@dataclass
class StackFrame:
	method_name: str
	line: int
	env: int
	class_name: str


@dataclass
class _VariableSlot:
	envs: Environments
	env: int
	name: str

	def read(self) -> Value:
		return self.envs.lookup(self.env, self.name)

	def write(self, value: Value) -> Value:
		return self.envs.assign(self.env, self.name, value)


@dataclass
class _ArraySlot:
	cell: ArrayCell
	index: int

	def read(self) -> Value:
		return self.cell.values[self.index]

	def write(self, value: Value) -> Value:
		value = coerce(value, self.cell.element_type)
		self.cell.values[self.index] = value
		return value


@dataclass
class _FieldSlot:
	cell: ObjectCell
	name: str

	def read(self) -> Value:
		if self.name not in self.cell.fields:
			raise InvalidOperand(f"Field '{self.name}' of {self.cell.class_name} has not been assigned.")
		return self.cell.fields[self.name]

	def write(self, value: Value) -> Value:
		self.cell.fields[self.name] = value
		return value


@dataclass
class _LengthSlot:
	length: int

	def read(self) -> Value:
		return IntValue(self.length)

	def write(self, value: Value) -> Value:
		raise InvalidOperand("Cannot assign to the final field 'length' of an array.")


_Slot = Union[_VariableSlot, _ArraySlot, _FieldSlot, _LengthSlot]


_limit_lock = threading.Lock()
_active_runs = 0
_saved_limit = 0


@contextmanager
def _recursion_headroom(limit: int) -> Iterator[None]:
	"""Raise the interpreter recursion limit while any run is active, then restore it."""
	global _active_runs, _saved_limit
	with _limit_lock:
		if _active_runs == 0:
			_saved_limit = sys.getrecursionlimit()
		_active_runs += 1
		if sys.getrecursionlimit() < limit:
			sys.setrecursionlimit(limit)
	try:
		yield
	finally:
		with _limit_lock:
			_active_runs -= 1
			if _active_runs == 0:
				sys.setrecursionlimit(_saved_limit)


class Interpreter:
	"""
	Tree-walking interpreter that records an ExecutionStep after every
	observable operation.

	An instance runs exactly one program; create a new one per run.
	"""

	def __init__(self, *, max_steps: int = MAX_STEPS, variables: str = "local") -> None:
		if max_steps < 1:
			raise ValueError("max_steps must be positive.")
		if variables not in VARIABLE_MODES:
			raise ValueError(f"variables must be one of {VARIABLE_MODES}, got {variables!r}.")
		self._max_steps = max_steps
		self._variables_mode = variables

		self._trace: List[ExecutionStep] = []
		self._heap = Heap()
		self._envs = Environments()
		self._global_env = self._envs.new_scope(None)
		self._current_env = self._global_env
		self._classes: Dict[str, ClassValue] = {}
		self._class_decls: Dict[str, ClassDeclaration] = {}
		self._call_stack: List[StackFrame] = []
		# Insertion-ordered set of every name declared during the run.
		self._declared_names: Dict[str, None] = {}
		self._iterations = 0
		self._current_line = 0
		self._started = False

	def run(self, program: Program) -> List[ExecutionStep]:
		if self._started:
			raise RuntimeError("Interpreter instances run a single program; create a new one.")
		self._started = True
		logger.debug("Starting run: %d class(es), max_steps=%d", len(program.body), self._max_steps)
		try:
			with _recursion_headroom(_RECURSION_LIMIT):
				self._execute_program(program)
		except RuntimeIssue as issue:
			if issue.line is None:
				issue.line = self._current_line or None
			logger.debug("Run failed at line %s: %s", issue.line, issue.message)
			raise
		except RecursionError:
			raise RuntimeIssue("Call stack overflow (StackOverflowError).", self._current_line or None) from None
		logger.debug("Run finished with %d step(s).", len(self._trace))
		return list(self._trace)

	def _execute_program(self, program: Program) -> None:
		self._declare_classes(program)
		main_class = self._classes.get("Main")
		main = main_class.methods.get("main") if main_class else None
		if main is None:
			raise EntryPointNotFound("Main.main method not found.")
		self._initialize_static_fields(program)
		frame = StackFrame("main", main.line, self._current_env, "Main")
		activation = self._envs.new_scope(self._global_env)
		self._run_frame(frame, main, activation)

	def _declare_classes(self, program: Program) -> None:
		for decl in program.body:
			value = ClassValue(name=decl.name, methods=decl.methods())
			self._current_line = decl.line
			self._envs.declare(self._global_env, decl.name, value)
			self._classes[decl.name] = value
			self._class_decls[decl.name] = decl

	def _initialize_static_fields(self, program: Program) -> None:
		for decl in program.body:
			fields = decl.static_fields()
			if not fields:
				continue
			self._call_stack.append(StackFrame("<clinit>", decl.line, self._global_env, decl.name))
			try:
				for field_decl in fields:
					self._execute(field_decl)
			finally:
				self._call_stack.pop()

	# Trace recording -------------------------------------------------------

	def _record(self, line: int, *, console_output: Optional[str] = None, event: Optional[str] = None) -> None:
		if len(self._trace) >= self._max_steps:
			raise StepLimitExceeded(self._max_steps, line)
		self._trace.append(
			ExecutionStep(
				line_number=line,
				variables=self._snapshot_variables(),
				heap=self._heap.snapshot(),
				call_stack=tuple(StackFrameInfo(f.method_name, f.line) for f in self._call_stack),
				console_output=console_output,
				event=event,
			)
		)

	def _snapshot_variables(self) -> Dict[str, object]:
		if self._variables_mode == "local":
			bindings = self._envs.get_snapshot(self._current_env)
			return {name: render_value(v) for name, v in bindings.items() if not isinstance(v, ClassValue)}
		snapshot: Dict[str, object] = {}
		for name in self._declared_names:
			try:
				value = self._envs.lookup(self._current_env, name)
			except UnknownVariable:
				snapshot[name] = NOT_DECLARED
				continue
			if not isinstance(value, ClassValue):
				snapshot[name] = render_value(value)
		return snapshot

	def _tick_iteration(self, line: int) -> None:
		self._iterations += 1
		if self._iterations > self._max_steps:
			raise StepLimitExceeded(self._max_steps, line)

	# Scopes and calls ------------------------------------------------------

	@contextmanager
	def _scope(self) -> Iterator[int]:
		previous = self._current_env
		env = self._envs.new_scope(previous)
		self._current_env = env
		try:
			yield env
		finally:
			self._current_env = previous
			self._envs.release(env)

	def _run_frame(self, frame: StackFrame, method: MethodDeclaration, activation: int) -> Value:
		self._call_stack.append(frame)
		self._current_env = activation
		try:
			for stmt in method.body:
				completion = self._execute(stmt)
				if completion.flow is Flow.RETURN:
					return completion.value
				if completion.abrupt:
					keyword = "break" if completion.flow is Flow.BREAK else "continue"
					raise RuntimeIssue(f"'{keyword}' used outside of a loop.")
			return VOID
		finally:
			self._call_stack.pop()
			self._current_env = frame.env
			self._envs.release(activation)

	def _invoke(self, method: MethodDeclaration, class_name: str, args: List[Value], line: int) -> Value:
		if len(args) != len(method.params):
			raise RuntimeIssue(
				f"Method '{method.name}' expected {len(method.params)} argument(s), got {len(args)}.", line
			)
		if len(self._call_stack) >= MAX_CALL_DEPTH:
			raise RuntimeIssue("Call stack overflow (StackOverflowError).", line)
		activation = self._envs.new_scope(self._global_env)
		for param, arg in zip(method.params, args):
			self._envs.declare(activation, param.name, arg, param.type_name)
			self._declared_names.setdefault(param.name)
		frame = StackFrame(method.name, method.line, self._current_env, class_name)
		return self._run_frame(frame, method, activation)

	# Statements ------------------------------------------------------------

	def _execute(self, stmt: Statement) -> Completion:
		self._current_line = stmt.line
		if isinstance(stmt, VariableDeclaration):
			self._execute_declaration(stmt)
			return NORMAL_COMPLETION
		if isinstance(stmt, ExpressionStatement):
			self._evaluate(stmt.expression)
			return NORMAL_COMPLETION
		if isinstance(stmt, BlockStatement):
			with self._scope():
				return self._execute_all(stmt.body)
		if isinstance(stmt, IfStatement):
			if self._condition(stmt.test):
				return self._execute(stmt.consequent)
			if stmt.alternate is not None:
				return self._execute(stmt.alternate)
			return NORMAL_COMPLETION
		if isinstance(stmt, WhileStatement):
			return self._execute_while(stmt)
		if isinstance(stmt, DoWhileStatement):
			return self._execute_do_while(stmt)
		if isinstance(stmt, ForStatement):
			return self._execute_for(stmt)
		if isinstance(stmt, ReturnStatement):
			value = self._evaluate(stmt.argument) if stmt.argument is not None else VOID
			self._record(stmt.line, event="return")
			return Completion(Flow.RETURN, value)
		if isinstance(stmt, BreakStatement):
			self._record(stmt.line)
			return BREAK_COMPLETION
		if isinstance(stmt, ContinueStatement):
			self._record(stmt.line)
			return CONTINUE_COMPLETION
		if isinstance(stmt, (ClassDeclaration, MethodDeclaration)):
			raise RuntimeIssue(f"Unexpected {stmt.kind} inside a method body.", stmt.line)
		raise RuntimeIssue(f"Unsupported statement: {stmt.kind}", stmt.line)

	def _execute_all(self, statements: List[Statement]) -> Completion:
		for stmt in statements:
			completion = self._execute(stmt)
			if completion.abrupt:
				return completion
		return NORMAL_COMPLETION

	def _execute_declaration(self, decl: VariableDeclaration) -> None:
		if decl.value is None:
			value = default_value(decl.type_name)
		elif isinstance(decl.value, ArrayCreationExpr) and decl.value.values is not None and decl.type_name.endswith("[]"):
			value = self._create_array(decl.value, decl.type_name[:-2])
		else:
			value = self._evaluate(decl.value)
		self._envs.declare(self._current_env, decl.name, value, decl.type_name)
		self._declared_names.setdefault(decl.name)
		self._record(decl.line)

	def _execute_while(self, stmt: WhileStatement) -> Completion:
		while True:
			self._tick_iteration(stmt.line)
			if not self._condition(stmt.test):
				return NORMAL_COMPLETION
			completion = self._execute(stmt.body)
			if completion.flow is Flow.BREAK:
				return NORMAL_COMPLETION
			if completion.flow is Flow.RETURN:
				return completion

	def _execute_do_while(self, stmt: DoWhileStatement) -> Completion:
		while True:
			self._tick_iteration(stmt.line)
			completion = self._execute(stmt.body)
			if completion.flow is Flow.BREAK:
				return NORMAL_COMPLETION
			if completion.flow is Flow.RETURN:
				return completion
			if not self._condition(stmt.test):
				return NORMAL_COMPLETION

	def _execute_for(self, stmt: ForStatement) -> Completion:
		with self._scope():
			if stmt.init is not None:
				self._execute(stmt.init)
			while True:
				self._tick_iteration(stmt.line)
				if stmt.test is not None and not self._condition(stmt.test):
					return NORMAL_COMPLETION
				completion = self._execute(stmt.body)
				if completion.flow is Flow.BREAK:
					return NORMAL_COMPLETION
				if completion.flow is Flow.RETURN:
					return completion
				if stmt.update is not None:
					self._evaluate(stmt.update)

	def _condition(self, expr: Expression) -> bool:
		value = self._evaluate(expr)
		if not isinstance(value, BoolValue):
			raise InvalidOperand(f"Condition must be a boolean, got {type_label(value)}.", expr.line)
		return value.value

	# Expressions -----------------------------------------------------------

	def _evaluate(self, expr: Expression) -> Value:
		if isinstance(expr, NumericLiteral):
			return IntValue(expr.value)
		if isinstance(expr, DoubleLiteral):
			return DoubleValue(expr.value)
		if isinstance(expr, BooleanLiteral):
			return TRUE if expr.value else FALSE
		if isinstance(expr, StringLiteral):
			return StringValue(expr.value)
		if isinstance(expr, CharLiteral):
			return CharValue(decode_char(expr.value))
		if isinstance(expr, NullLiteral):
			return NULL
		if isinstance(expr, Identifier):
			return self._envs.lookup(self._current_env, expr.symbol)
		if isinstance(expr, BinaryExpr):
			left = self._evaluate(expr.left)
			right = self._evaluate(expr.right)
			result = self._binary(expr.operator, left, right, expr.line)
			self._record(expr.line)
			return result
		if isinstance(expr, LogicalExpr):
			return self._evaluate_logical(expr)
		if isinstance(expr, UnaryExpr):
			result = self._unary(expr.operator, self._evaluate(expr.argument), expr.line)
			self._record(expr.line)
			return result
		if isinstance(expr, ConditionalExpr):
			chosen = expr.consequent if self._condition(expr.test) else expr.alternate
			value = self._evaluate(chosen)
			self._record(expr.line)
			return value
		if isinstance(expr, AssignmentExpr):
			slot = self._locate(expr.assignee)
			stored = slot.write(self._evaluate(expr.value))
			self._record(expr.line)
			return stored
		if isinstance(expr, CompoundAssignmentExpr):
			slot = self._locate(expr.assignee)
			current = slot.read()
			result = self._binary(expr.operator[:-1], current, self._evaluate(expr.value), expr.line)
			stored = slot.write(self._narrow_like(current, result))
			self._record(expr.line)
			return stored
		if isinstance(expr, (PostfixExpr, PrefixExpr)):
			return self._evaluate_increment(expr)
		if isinstance(expr, MemberExpr):
			return self._locate(expr).read()
		if isinstance(expr, CallExpr):
			return self._evaluate_call(expr)
		if isinstance(expr, NewExpr):
			if expr.class_name not in self._classes:
				raise RuntimeIssue(f"Unknown class '{expr.class_name}'.", expr.line)
			ref = self._heap.allocate(self._instantiate(expr.class_name))
			self._record(expr.line, event="allocation")
			return ref
		if isinstance(expr, ArrayCreationExpr):
			return self._create_array(expr, expr.element_type)
		raise RuntimeIssue(f"Unsupported expression: {expr.kind}", expr.line)

	def _evaluate_logical(self, expr: LogicalExpr) -> Value:
		left = self._condition(expr.left)
		if expr.operator == "&&":
			result = left and self._condition(expr.right)
		else:
			result = left or self._condition(expr.right)
		self._record(expr.line)
		return TRUE if result else FALSE

	def _evaluate_increment(self, expr: Union[PostfixExpr, PrefixExpr]) -> Value:
		slot = _VariableSlot(self._envs, self._current_env, expr.argument.symbol)
		current = slot.read()
		if not is_numeric(current):
			raise InvalidOperand(f"Operator '{expr.operator}' requires a number, got {type_label(current)}.", expr.line)
		delta = 1 if expr.operator == "++" else -1
		if isinstance(current, DoubleValue):
			updated: Value = DoubleValue(current.value + delta)
		elif isinstance(current, CharValue):
			updated = CharValue(chr(ord(current.value) + delta))
		else:
			updated = IntValue(current.value + delta)
		updated = slot.write(updated)
		self._record(expr.line)
		return current if isinstance(expr, PostfixExpr) else updated

	def _instantiate(self, class_name: str) -> ObjectCell:
		cell = ObjectCell(class_name=class_name)
		decl = self._class_decls[class_name]
		if len(self._call_stack) >= MAX_CALL_DEPTH:
			raise RuntimeIssue("Call stack overflow (StackOverflowError).", self._current_line or None)
		previous = self._current_env
		# Field initializers see globals only, never the caller's locals.
		self._current_env = self._global_env
		self._call_stack.append(StackFrame("<init>", decl.line, previous, class_name))
		try:
			for field_decl in decl.instance_fields():
				if field_decl.value is None:
					value = default_value(field_decl.type_name)
				else:
					value = self._evaluate(field_decl.value)
				cell.fields[field_decl.name] = coerce(value, field_decl.type_name)
		finally:
			self._current_env = previous
			self._call_stack.pop()
		return cell

	def _create_array(self, expr: ArrayCreationExpr, element_type: str) -> RefValue:
		if expr.values is not None:
			values = [coerce(self._evaluate(v), element_type) for v in expr.values]
		else:
			size = self._evaluate(expr.size) if expr.size is not None else IntValue(0)
			if not is_integral(size):
				raise InvalidOperand(f"Array size must be an int, got {type_label(size)}.", expr.line)
			length = as_number(size)
			if length < 0:
				raise RuntimeIssue(f"Negative array size: {length}.", expr.line)
			values = [default_value(element_type) for _ in range(length)]
		ref = self._heap.allocate(ArrayCell(element_type=element_type, values=values))
		self._record(expr.line, event="allocation")
		return ref

	def _locate(self, target: Expression) -> _Slot:
		if isinstance(target, Identifier):
			self._envs.resolve(self._current_env, target.symbol)
			return _VariableSlot(self._envs, self._current_env, target.symbol)
		if isinstance(target, MemberExpr):
			container = self._evaluate(target.object)
			if target.computed:
				index = self._evaluate(target.property)
				cell = self._dereference(container, "index into", target.line)
				if not isinstance(cell, ArrayCell):
					raise InvalidOperand(f"Cannot index into a {cell.class_name} object.", target.line)
				if not is_integral(index):
					raise InvalidOperand(f"Array index must be an int, got {type_label(index)}.", target.line)
				position = as_number(index)
				if not 0 <= position < len(cell.values):
					raise RuntimeIssue(
						f"Index {position} out of bounds for length {len(cell.values)}", target.line
					)
				return _ArraySlot(cell, position)
			name = target.property.symbol if isinstance(target.property, Identifier) else ""
			cell = self._dereference(container, f"access '{name}' on", target.line)
			if isinstance(cell, ArrayCell):
				if name == "length":
					return _LengthSlot(len(cell.values))
				raise InvalidOperand(f"Arrays have no member '{name}'.", target.line)
			return _FieldSlot(cell, name)
		raise InvalidOperand("Invalid assignment target.", target.line)

	def _dereference(self, value: Value, action: str, line: int) -> Union[ArrayCell, ObjectCell]:
		if isinstance(value, NullValue):
			raise InvalidOperand(f"Cannot {action} null.", line)
		if not isinstance(value, RefValue):
			raise InvalidOperand(f"Cannot {action} a value of type {type_label(value)}.", line)
		return self._heap.get(value)

	def _evaluate_call(self, call: CallExpr) -> Value:
		callee = call.callee
		if _is_console_call(callee):
			return self._console(callee.property.symbol, call)
		if isinstance(callee, Identifier):
			class_name = self._call_stack[-1].class_name if self._call_stack else "Main"
			method = self._classes[class_name].methods.get(callee.symbol)
			if method is None:
				raise RuntimeIssue(f"Unknown method '{callee.symbol}'.", call.line)
			args = [self._evaluate(a) for a in call.args]
			return self._invoke(method, class_name, args, call.line)
		if isinstance(callee, MemberExpr) and not callee.computed:
			name = callee.property.symbol
			receiver = self._evaluate(callee.object)
			if isinstance(receiver, ClassValue):
				raise InvalidOperand("Static calls through a class name are not supported.", call.line)
			cell = self._dereference(receiver, f"invoke '{name}' on", call.line)
			if not isinstance(cell, ObjectCell):
				raise InvalidOperand(f"Cannot call method '{name}' on an array.", call.line)
			method = self._classes[cell.class_name].methods.get(name)
			if method is None:
				raise RuntimeIssue(f"Class '{cell.class_name}' has no method '{name}'.", call.line)
			args = [self._evaluate(a) for a in call.args]
			return self._invoke(method, cell.class_name, args, call.line)
		raise InvalidOperand("Expression is not callable.", call.line)

	def _console(self, method: str, call: CallExpr) -> Value:
		if method not in CONSOLE_METHODS:
			raise InvalidOperand(f"System.out.{method} is not supported.", call.line)
		args = [self._evaluate(a) for a in call.args]
		if method == "printf":
			if args:
				template = interpret_escapes(to_raw_text(args[0], self._heap))
				output = format_printf(template, args[1:], self._heap)
			else:
				output = ""
		else:
			text = interpret_escapes(to_raw_text(args[0], self._heap)) if args else ""
			output = text + "\n" if method == "println" else text
		self._record(call.line, console_output=output)
		return VOID

	# Operators -------------------------------------------------------------

	def _binary(self, op: str, left: Value, right: Value, line: int) -> Value:
		if op == "+" and not (is_numeric(left) and is_numeric(right)):
			return StringValue(to_raw_text(left, self._heap) + to_raw_text(right, self._heap))
		if op in ("+", "-", "*", "/", "%"):
			return self._arithmetic(op, left, right, line)
		if op in ("==", "!="):
			equal = self._equals(left, right)
			return BoolValue(equal if op == "==" else not equal)
		if op in ("<", ">", "<=", ">="):
			if not (is_numeric(left) and is_numeric(right)):
				raise InvalidOperand(
					f"Operator '{op}' cannot be applied to {type_label(left)} and {type_label(right)}.", line
				)
			a, b = as_number(left), as_number(right)
			if op == "<":
				return BoolValue(a < b)
			if op == ">":
				return BoolValue(a > b)
			if op == "<=":
				return BoolValue(a <= b)
			return BoolValue(a >= b)
		raise InvalidOperand(f"Unsupported operator: {op}", line)

	def _arithmetic(self, op: str, left: Value, right: Value, line: int) -> Value:
		if not (is_numeric(left) and is_numeric(right)):
			raise InvalidOperand(
				f"Operator '{op}' cannot be applied to {type_label(left)} and {type_label(right)}.", line
			)
		a, b = as_number(left), as_number(right)
		if is_integral(left) and is_integral(right):
			if op == "+":
				return IntValue(a + b)
			if op == "-":
				return IntValue(a - b)
			if op == "*":
				return IntValue(a * b)
			if b == 0:
				raise RuntimeIssue("Division by zero.", line)
			quotient = abs(a) // abs(b)
			if op == "/":
				return IntValue(quotient if (a < 0) == (b < 0) else -quotient)
			remainder = abs(a) % abs(b)
			return IntValue(remainder if a >= 0 else -remainder)
		x, y = float(a), float(b)
		if op == "+":
			return DoubleValue(x + y)
		if op == "-":
			return DoubleValue(x - y)
		if op == "*":
			return DoubleValue(x * y)
		if op == "/":
			return DoubleValue(_ieee_divide(x, y))
		if y == 0.0:
			return DoubleValue(math.nan)
		return DoubleValue(math.fmod(x, y))

	def _equals(self, left: Value, right: Value) -> bool:
		if is_numeric(left) and is_numeric(right):
			return as_number(left) == as_number(right)
		if isinstance(left, BoolValue) and isinstance(right, BoolValue):
			return left.value == right.value
		if isinstance(left, StringValue) and isinstance(right, StringValue):
			return left.value == right.value
		if isinstance(left, NullValue) or isinstance(right, NullValue):
			return isinstance(left, NullValue) and isinstance(right, NullValue)
		if isinstance(left, RefValue) and isinstance(right, RefValue):
			return left.index == right.index
		if isinstance(left, ClassValue) and isinstance(right, ClassValue):
			return left.name == right.name
		return False

	def _unary(self, op: str, value: Value, line: int) -> Value:
		if op == "!":
			if not isinstance(value, BoolValue):
				raise InvalidOperand(f"Operator '!' requires a boolean, got {type_label(value)}.", line)
			return FALSE if value.value else TRUE
		if op == "-":
			if isinstance(value, DoubleValue):
				return DoubleValue(-value.value)
			if is_integral(value):
				return IntValue(-as_number(value))
			raise InvalidOperand(f"Operator '-' requires a number, got {type_label(value)}.", line)
		raise InvalidOperand(f"Unsupported unary operator: {op}", line)

	def _narrow_like(self, current: Value, result: Value) -> Value:
		# Compound assignment casts back to the target's type: `int x; x += 1.5`.
		if isinstance(current, IntValue) and isinstance(result, DoubleValue):
			return coerce(result, "int")
		if isinstance(current, CharValue) and isinstance(result, IntValue):
			return coerce(result, "char")
		return result


def _is_console_call(callee: Expression) -> bool:
	return (
		isinstance(callee, MemberExpr)
		and not callee.computed
		and isinstance(callee.property, Identifier)
		and isinstance(callee.object, MemberExpr)
		and not callee.object.computed
		and isinstance(callee.object.object, Identifier)
		and callee.object.object.symbol == "System"
		and isinstance(callee.object.property, Identifier)
		and callee.object.property.symbol == "out"
	)


def _ieee_divide(x: float, y: float) -> float:
	if y != 0.0:
		return x / y
	if x == 0.0 or math.isnan(x):
		return math.nan
	return math.copysign(math.inf, x) * math.copysign(1.0, y)


def interpret_java_code(code: str, *, max_steps: int = MAX_STEPS, variables: str = "local") -> List[ExecutionStep]:
	"""Parse and run `code`, returning the full execution trace.

	Raises ParseError for malformed source and RuntimeIssue (or one of its
	subclasses) for any failure during execution; no partial trace is returned.
	"""
	artifacts = compile_source(code)
	logger.debug("Parsed %d token(s) in %.2f ms.", len(artifacts.tokens), artifacts.duration_ms)
	trace = Interpreter(max_steps=max_steps, variables=variables).run(artifacts.ast)
	if not trace and code.strip():
		raise RuntimeIssue("Execution produced no steps.")
	logger.debug("Execution successful. Generated %d steps.", len(trace))
	return trace
