from typing import Callable, List

import pytest

from webapp.interpreter import interpret_java_code
from webapp.runtime import ExecutionStep


def wrap_main(body: str, members: str = "") -> str:
	"""Place `body` inside Main.main; `members` go into the Main class before main."""
	return (
		"public class Main {\n"
		+ members
		+ "\tpublic static void main(String[] args) {\n"
		+ body
		+ "\n\t}\n}\n"
	)


def console_text(trace: List[ExecutionStep]) -> str:
	return "".join(s.console_output for s in trace if s.console_output is not None)


@pytest.fixture
def run_main() -> Callable[..., List[ExecutionStep]]:
	def _run(body: str, members: str = "", **options) -> List[ExecutionStep]:
		return interpret_java_code(wrap_main(body, members), **options)

	return _run


@pytest.fixture
def console() -> Callable[[List[ExecutionStep]], str]:
	return console_text
