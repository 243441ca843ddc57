from __future__ import annotations

import logging
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from javavis import ParseError, compile_source, validate_java_syntax
from webapp.interpreter import MAX_STEPS, interpret_java_code
from webapp.runtime import RuntimeIssue


logger = logging.getLogger(__name__)

app = FastAPI(title="Java Execution Visualizer", version="1.0.0")

STATIC_DIR = Path(__file__).parent / "static"
if STATIC_DIR.exists():
	app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)


class CodeRequest(BaseModel):
	code: str


class RunRequest(BaseModel):
	code: str
	max_steps: int = Field(MAX_STEPS, ge=1, le=MAX_STEPS)
	# "local": innermost scope only; "all": every declared name, "not-declared" when out of scope
	variables: Literal["local", "all"] = "local"


class ErrorPayload(BaseModel):
	kind: Literal["syntax", "runtime"]
	message: str
	line: Optional[int] = None
	hint: Optional[str] = None


def _to_json(obj: Any, *, depth: int = 0, max_depth: int = 64) -> Any:
	"""Best-effort conversion of AST nodes to JSON-safe structures."""
	if depth > max_depth:
		return {"_truncated": True}
	if obj is None or isinstance(obj, (str, int, float, bool)):
		return obj
	if isinstance(obj, Enum):
		return obj.name
	if isinstance(obj, list):
		return [_to_json(x, depth=depth + 1, max_depth=max_depth) for x in obj]
	if isinstance(obj, dict):
		return {str(k): _to_json(v, depth=depth + 1, max_depth=max_depth) for k, v in obj.items()}
	if is_dataclass(obj):
		data: Dict[str, Any] = {"kind": obj.__class__.__name__}
		for f in fields(obj):
			data[f.name] = _to_json(getattr(obj, f.name), depth=depth + 1, max_depth=max_depth)
		return data
	return str(obj)


def _error_response(error: ErrorPayload) -> JSONResponse:
	return JSONResponse(status_code=400, content={"trace": [], "error": error.model_dump(exclude_none=True)})


@app.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
	index_path = STATIC_DIR / "index.html"
	if index_path.exists():
		return HTMLResponse(index_path.read_text(encoding="utf-8"))
	return HTMLResponse(
		"<h2>Java Execution Visualizer API</h2><p>POST <code>/api/interpret</code> with JSON: <code>{\"code\": \"...\"}</code></p>"
	)


@app.get("/health")
def health() -> Dict[str, str]:
	return {"status": "ok"}


@app.post("/api/validate")
def validate(req: CodeRequest) -> Dict[str, Any]:
	issue = validate_java_syntax(req.code)
	if issue is None:
		return {"error": None}
	error = ErrorPayload(kind="syntax", message=issue.message, line=issue.line, hint=issue.hint)
	return {"error": error.model_dump(exclude_none=True)}


@app.post("/api/parse")
def parse_code(req: CodeRequest) -> Any:
	try:
		art = compile_source(req.code)
	except ParseError as err:
		error = ErrorPayload(kind="syntax", message=err.message, line=err.line, hint=err.hint)
		return JSONResponse(status_code=400, content={"ast": None, "error": error.model_dump(exclude_none=True)})
	return {
		"duration_ms": art.duration_ms,
		"token_count": len(art.tokens),
		"ast": _to_json(art.ast),
		"error": None,
	}


@app.post("/api/interpret")
def interpret(req: RunRequest) -> Any:
	if not req.code.strip():
		return _error_response(ErrorPayload(kind="syntax", message="No code provided."))
	issue = validate_java_syntax(req.code)
	if issue is not None:
		logger.info("Rejected code with syntax error at line %d: %s", issue.line, issue.message)
		return _error_response(ErrorPayload(kind="syntax", message=issue.message, line=issue.line, hint=issue.hint))
	try:
		trace = interpret_java_code(req.code, max_steps=req.max_steps, variables=req.variables)
	except ParseError as err:
		return _error_response(ErrorPayload(kind="syntax", message=err.message, line=err.line, hint=err.hint))
	except RuntimeIssue as err:
		logger.warning("Execution failed at line %s: %s", err.line, err.message)
		return _error_response(ErrorPayload(kind="runtime", message=err.message, line=err.line))
	steps: List[Dict[str, Any]] = [step.to_json() for step in trace]
	return {"trace": steps, "error": None}


if __name__ == "__main__":
	import uvicorn

	uvicorn.run("webapp.main:app", host="127.0.0.1", port=8000, reload=False)
