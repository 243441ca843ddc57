import pytest
from fastapi.testclient import TestClient

from webapp.main import app

from conftest import wrap_main


@pytest.fixture
def client():
	return TestClient(app)


def test_health(client):
	res = client.get("/health")
	assert res.status_code == 200
	assert res.json() == {"status": "ok"}


def test_interpret_returns_trace(client):
	res = client.post("/api/interpret", json={"code": wrap_main('int x = 2;\nSystem.out.println(x * 3);')})
	assert res.status_code == 200
	body = res.json()
	assert body["error"] is None
	trace = body["trace"]
	assert trace[0] == {
		"lineNumber": 3,
		"variables": {"x": 2},
		"heap": {},
		"callStack": [{"methodName": "main", "line": 2}],
	}
	assert trace[-1]["consoleOutput"] == "6\n"


def test_interpret_syntax_error(client):
	res = client.post("/api/interpret", json={"code": wrap_main("int x = 1")})
	assert res.status_code == 400
	body = res.json()
	assert body["trace"] == []
	assert body["error"]["kind"] == "syntax"
	assert body["error"]["line"] == 4
	assert "hint" in body["error"]


def test_interpret_runtime_error(client):
	res = client.post("/api/interpret", json={"code": wrap_main("int x = 1 / 0;")})
	assert res.status_code == 400
	assert res.json()["error"] == {"kind": "runtime", "message": "Division by zero.", "line": 3}


def test_interpret_step_limit(client):
	res = client.post("/api/interpret", json={"code": wrap_main("while (true) { }"), "max_steps": 50})
	assert res.status_code == 400
	assert "50" in res.json()["error"]["message"]


def test_interpret_rejects_empty_code(client):
	res = client.post("/api/interpret", json={"code": "  "})
	assert res.status_code == 400
	assert res.json()["error"]["message"] == "No code provided."


@pytest.mark.parametrize("payload", [{"max_steps": 0}, {"max_steps": 10**9}, {"variables": "global"}])
def test_interpret_validates_options(client, payload):
	res = client.post("/api/interpret", json={"code": wrap_main("int x = 1;"), **payload})
	assert res.status_code == 422


def test_interpret_all_variables(client):
	code = wrap_main("int a = 1;\n{\n\tint b = 2;\n}\nint c = 3;")
	res = client.post("/api/interpret", json={"code": code, "variables": "all"})
	assert res.json()["trace"][-1]["variables"] == {"a": 1, "b": "not-declared", "c": 3}


def test_validate(client):
	ok = client.post("/api/validate", json={"code": wrap_main("int x = 1;")})
	assert ok.json() == {"error": None}
	bad = client.post("/api/validate", json={"code": wrap_main("int x = ;")})
	error = bad.json()["error"]
	assert error["kind"] == "syntax"
	assert error["line"] == 3


def test_parse_returns_ast(client):
	res = client.post("/api/parse", json={"code": wrap_main("int x = 1 + 2;")})
	assert res.status_code == 200
	ast = res.json()["ast"]
	assert ast["kind"] == "Program"
	assert ast["body"][0]["name"] == "Main"
	decl = ast["body"][0]["body"][0]["body"][0]
	assert decl["kind"] == "VariableDeclaration"
	assert decl["value"]["operator"] == "+"
