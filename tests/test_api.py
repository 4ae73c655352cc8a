from pathlib import Path
from fastapi.testclient import TestClient
from api import main as api_main

client = TestClient(api_main.app)

CUBIC = {"fx": "x^3 - 3x + 1", "inputs": ["0", "1"], "policy": "decimal_places", "n": 3}

def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}

def test_methods():
    data = client.get("/methods").json()
    assert [m["name"] for m in data["methods"]] == ["bisection", "secant"]
    assert [p["name"] for p in data["policies"]] == ["decimal_places", "significant_digits", "no_of_steps"]

def test_solve_bisection():
    r = client.post("/solve/bisection", json=CUBIC)
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert len(data["steps"]) == 12
    assert data["root"] == "0.3474"
    assert data["lines"].startswith("1\t0\t+\t1\t-\t0.5\t-\n")
    assert data["table"].splitlines()[0].split()[0] == "n"
    assert data["error"] is None

def test_solve_by_number_with_step_limit():
    r = client.post("/solve/2", json={**CUBIC, "policy": "no_of_steps", "n": 50, "max_steps": 3})
    data = r.json()
    assert r.status_code == 200
    assert data["method"] == "secant"
    assert data["ok"] is False
    assert data["error_kind"] == "step_limit"
    assert len(data["steps"]) == 3

def test_engine_failures_are_normal_responses():
    r = client.post("/solve/bisection", json={**CUBIC, "fx": "x^2 + 1"})
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is False
    assert data["error_kind"] == "precondition"
    assert data["steps"] == []
    assert data["log"]

def test_unknown_method_is_404():
    assert client.post("/solve/newton", json=CUBIC).status_code == 404

def test_invalid_policy_is_422():
    assert client.post("/solve/bisection", json={**CUBIC, "policy": "bogus"}).status_code == 422
    assert client.post("/solve/bisection", json={**CUBIC, "policy": "no_of_steps", "n": 0}).status_code == 422
    assert client.post("/solve/bisection", json={**CUBIC, "inputs": ["0"]}).status_code == 422

def test_problems(monkeypatch):
    path = Path(__file__).resolve().parent.parent / "examples" / "problems.yaml"
    monkeypatch.setattr(api_main, "PROBLEMS_PATH", str(path))
    data = client.get("/problems").json()
    assert len(data["problems"]) == 13
    assert data["problems"][0]["method"] == "bisection"

def test_problems_missing(monkeypatch, tmp_path):
    monkeypatch.setattr(api_main, "PROBLEMS_PATH", str(tmp_path / "none.yaml"))
    assert client.get("/problems").status_code == 404
