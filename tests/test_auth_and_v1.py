from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from launchgate_core.app import create_app


def test_v1_requires_token(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("LAUNCHGATE_HOME", str(tmp_path))

    with TestClient(create_app()) as client:
        r = client.get("/v1/route/outcome")
        assert r.status_code == 401
        body = r.json()
        assert body["ok"] is False
        assert body["error"]["code"] == "unauthorized"

        bad = client.get("/v1/route/outcome", headers={"Authorization": "Bearer nope"})
        assert bad.status_code == 401

        token = client.app.state.launchgate_config.auth.install_token
        assert isinstance(token, str)
        assert token

        r2 = client.get("/v1/route/outcome", headers={"X-LaunchGate-Token": token})
        assert r2.status_code == 200
        assert r2.json() == {
            "ok": True,
            "data": {"attempted": False, "content_location": None, "mode": None},
            "error": None,
        }

        r3 = client.get("/v1/system/info", headers={"Authorization": f"Bearer {token}"})
        assert r3.status_code == 200
        body3 = r3.json()
        assert body3["ok"] is True
        assert body3["data"]["launchgate_home"]
        assert body3["data"]["version"]
        assert body3["data"]["registration_endpoint"] == "https://domain.com/api/v1/register"


def test_docs_and_openapi_are_public(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("LAUNCHGATE_HOME", str(tmp_path))

    with TestClient(create_app()) as client:
        docs = client.get("/docs")
        assert docs.status_code == 200

        openapi = client.get("/openapi.json")
        assert openapi.status_code == 200
        spec = openapi.json()
        assert "/v1/route" in spec.get("paths", {})
        assert "security" in spec["paths"]["/v1/route"]["get"]
        assert "security" in spec["paths"]["/v1/route/reset"]["post"]
