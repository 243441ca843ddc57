"""
Run a Java source file through the interpreter and export its execution trace.

Outputs (next to the source file unless --out is given):
  - <name>.trace.json   full trace, one object per step (the /api/interpret payload)
  - <name>.steps.csv    one row per step: index, line, event, changed variables,
                        changed heap cells, console output

Run:
  python -X utf8 export_trace.py Example.java [--out DIR] [--max-steps N] [--all-variables]
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from javavis import ParseError
from webapp.interpreter import MAX_STEPS, interpret_java_code
from webapp.runtime import ExecutionStep, RuntimeIssue, changed_heap_ids, changed_variables


logger = logging.getLogger("export_trace")

CSV_HEADER = ["step", "line", "event", "changed_variables", "changed_heap", "console_output"]


def fmt_console(text: Optional[str]) -> str:
	return "" if text is None else text.replace("\n", "\\n")


def step_rows(trace: List[ExecutionStep]) -> List[List[str]]:
	rows: List[List[str]] = []
	previous: Optional[ExecutionStep] = None
	for i, step in enumerate(trace):
		rows.append(
			[
				str(i),
				str(step.line_number),
				step.event or "",
				" ".join(changed_variables(step, previous)),
				" ".join(changed_heap_ids(step, previous)),
				fmt_console(step.console_output),
			]
		)
		previous = step
	return rows


def write_outputs(trace: List[ExecutionStep], stem: str, out_dir: Path) -> List[Path]:
	out_dir.mkdir(parents=True, exist_ok=True)
	json_path = out_dir / f"{stem}.trace.json"
	csv_path = out_dir / f"{stem}.steps.csv"

	json_path.write_text(json.dumps([s.to_json() for s in trace], indent=2), encoding="utf-8")
	with csv_path.open("w", newline="", encoding="utf-8") as f:
		writer = csv.writer(f)
		writer.writerow(CSV_HEADER)
		writer.writerows(step_rows(trace))
	return [json_path, csv_path]


def main(argv: Optional[List[str]] = None) -> int:
	parser = argparse.ArgumentParser(description="Export the execution trace of a Java program.")
	parser.add_argument("source", type=Path)
	parser.add_argument("--out", type=Path, default=None, help="output directory (default: next to the source)")
	parser.add_argument("--max-steps", type=int, default=MAX_STEPS)
	parser.add_argument("--all-variables", action="store_true", help="snapshot every declared variable, not just the innermost scope")
	parser.add_argument("-v", "--verbose", action="store_true")
	args = parser.parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="[%(levelname)s] %(message)s")

	code = args.source.read_text(encoding="utf-8")
	try:
		trace = interpret_java_code(
			code,
			max_steps=args.max_steps,
			variables="all" if args.all_variables else "local",
		)
	except ParseError as err:
		logger.error("Syntax error at line %d: %s", err.line, err.message)
		if err.hint:
			logger.error("hint: %s", err.hint)
		return 1
	except RuntimeIssue as err:
		logger.error("Runtime error at line %s: %s", err.line, err.message)
		return 2

	out_dir = args.out or args.source.resolve().parent
	for path in write_outputs(trace, args.source.stem, out_dir):
		logger.info("Wrote %s", path)
	logger.info("%d step(s) exported.", len(trace))
	return 0


if __name__ == "__main__":
	sys.exit(main())
