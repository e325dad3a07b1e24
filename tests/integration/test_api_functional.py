from pathlib import Path

from fastapi.testclient import TestClient


def test_api_health_config_and_run(tmp_path: Path) -> None:
    from rag_connector.api.main import app

    client = TestClient(app)

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"

    config_resp = client.get("/config")
    assert config_resp.status_code == 200
    assert "gpt-4o" in config_resp.json()["models"]

    doc = tmp_path / "policy.txt"
    doc.write_text("Company policy states employees must encrypt customer data.", encoding="utf-8")

    # No API key configured: every prompt fails on its own, the batch still completes.
    run_resp = client.post(
        "/run",
        json={
            "model": "gpt-4o",
            "prompts": [f"What does {doc} require?", "Anything else?"],
            "properties": {"prompt": "Be concise.", "temperature": 0.2},
            "settings": {},
        },
    )
    assert run_resp.status_code == 200
    payload = run_resp.json()
    assert payload["ModelType"] == "gpt-4o"
    assert len(payload["Completions"]) == 2
    assert all(item["Content"] is None for item in payload["Completions"])
    assert all(item["Error"] for item in payload["Completions"])


def test_api_rejects_unknown_model_and_malformed_body() -> None:
    from rag_connector.api.main import app

    client = TestClient(app)

    unknown = client.post("/run", json={"model": "not-a-model", "prompts": ["hi"]})
    assert unknown.status_code == 400

    malformed = client.post("/run", json={"model": "gpt-4o", "prompts": "hi"})
    assert malformed.status_code == 422


def test_api_policy_is_read_from_environment_on_demand(monkeypatch) -> None:
    from rag_connector.api import main as api_main

    monkeypatch.setenv("RAG_CONNECTOR_POLICY", "not-a-policy")
    api_main._options_from_env.cache_clear()
    client = TestClient(api_main.app)

    assert client.get("/config").status_code == 200
    broken = client.get("/health")
    assert broken.status_code == 500
    assert "RAG_CONNECTOR_POLICY" in broken.json()["detail"]

    monkeypatch.setenv("RAG_CONNECTOR_POLICY", "verbatim-echo")
    api_main._options_from_env.cache_clear()
    try:
        assert client.get("/health").json()["conversation_policy"] == "verbatim-echo"
    finally:
        api_main._options_from_env.cache_clear()
