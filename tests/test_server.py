from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

sys.path.append(str(Path(__file__).resolve().parents[1]))

from solver_harness.server import app  # noqa: E402

EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as c:
        yield c


def test_supported(client: TestClient) -> None:
    response = client.get("/supported")
    assert response.status_code == 200
    assert response.json() == ["C", "Rust", "Python"]


def test_index_with_count(client: TestClient) -> None:
    response = client.post(
        "/",
        json={"library": str(EXAMPLES / "python"), "language": "Python", "test_count": 3},
    )
    assert response.status_code == 200
    outcomes = response.json()
    assert len(outcomes) == 3
    for outcome in outcomes:
        assert outcome["success"] is True
        assert set(outcome) == {"arguments", "solution", "proposal", "success"}
        assert set(outcome["arguments"]) == {"factors", "upper_bound"}


def test_index_default_count(client: TestClient) -> None:
    response = client.post("/", json={"library": str(EXAMPLES / "python"), "language": "python"})
    assert response.status_code == 200
    assert len(response.json()) == 10


def test_index_load_error(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/", json={"library": str(tmp_path), "language": "C"})
    assert response.status_code == 400
    assert response.json()["detail"]["kind"] == "ArtifactNotFound"


def test_index_invocation_error(client: TestClient, tmp_path: Path) -> None:
    (tmp_path / "raising_server_candidate.py").write_text(
        "def solve(factors, upper_bound):\n    raise RuntimeError('boom')\n", "utf-8"
    )
    response = client.post(
        "/",
        json={"library": str(tmp_path / "raising_server_candidate"), "language": "Python"},
    )
    assert response.status_code == 422
    assert response.json()["detail"]["kind"] == "InvocationFailure"


@pytest.mark.parametrize(
    "payload",
    [
        {"library": "/tmp", "language": "Julia"},
        {"library": "/tmp", "language": "C", "test_count": 0},
        {"language": "C"},
    ],
)
def test_index_rejects_bad_payload(client: TestClient, payload: dict) -> None:
    response = client.post("/", json=payload)
    assert response.status_code == 422


def test_index_exiting_candidate(client: TestClient, tmp_path: Path) -> None:
    (tmp_path / "exiting_server_candidate.py").write_text(
        "def solve(factors, upper_bound):\n    raise SystemExit(0)\n", "utf-8"
    )
    response = client.post(
        "/",
        json={"library": str(tmp_path / "exiting_server_candidate"), "language": "Python"},
    )
    assert response.status_code == 422
    assert response.json()["detail"]["kind"] == "InvocationFailure"


@pytest.mark.parametrize(
    "host, port, expected",
    [
        ("0.0.0.0", 0, ("0.0.0.0", 0)),
        ("", 9001, ("", 9001)),
        (None, None, ("10.0.0.5", 8123)),
    ],
)
def test_serve_keeps_explicit_values(
    monkeypatch: pytest.MonkeyPatch, host: str | None, port: int | None, expected: tuple
) -> None:
    import uvicorn

    from solver_harness import server

    calls: list[tuple] = []
    monkeypatch.setattr(uvicorn, "run", lambda app, host, port: calls.append((host, port)))
    monkeypatch.setenv("SOLVER_HARNESS_HOST", "10.0.0.5")
    monkeypatch.setenv("SOLVER_HARNESS_PORT", "8123")
    server.serve(host, port)
    assert calls == [expected]
