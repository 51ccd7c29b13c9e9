from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import pytest

from apps.api import main as api_main
from apps.api.line_client import signature_for
from apps.api.main import app
from core.orchestrator.webhook import Collaborators


@pytest.fixture(autouse=True)
def _isolated_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, collaborators: Collaborators
) -> None:
    monkeypatch.setenv("SALESBOT_TARGETS_PATH", str(tmp_path / "targets.json"))
    monkeypatch.delenv("LINE_CHANNEL_SECRET", raising=False)
    monkeypatch.setattr(api_main, "_get_collaborators", lambda: collaborators)


def _image_payload() -> bytes:
    payload = {
        "destination": "U123",
        "events": [
            {
                "type": "message",
                "replyToken": "r-1",
                "message": {"id": "m-1", "type": "image", "contentProvider": {"type": "line"}},
            }
        ],
    }
    return json.dumps(payload).encode("utf-8")


@pytest.mark.anyio
async def test_webhook_replies_with_report(
    tmp_path: Path, collaborators: Collaborators
) -> None:
    (tmp_path / "targets.json").write_text(json.dumps({"HW": 5000, "DW": 4000}), encoding="utf-8")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/webhook", content=_image_payload())

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "events": 1, "replied": 1}
    assert response.headers["X-Salesbot-Request-Id"]
    token, text = collaborators.reply_channel.sent[0]
    assert token == "r-1"
    assert "HW เป้ารายวัน : 5,000" in text
    assert "Diff : -1,000" in text


@pytest.mark.anyio
async def test_webhook_accepts_empty_verification_payload() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/webhook", json={"destination": "U1", "events": []})

    assert response.status_code == 200
    assert response.json()["events"] == 0


@pytest.mark.anyio
async def test_webhook_rejects_invalid_json() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/webhook", content=b"{not json")

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_JSON"


@pytest.mark.anyio
async def test_webhook_signature_required_when_secret_configured(
    monkeypatch: pytest.MonkeyPatch, collaborators: Collaborators
) -> None:
    monkeypatch.setenv("LINE_CHANNEL_SECRET", "secret")
    body = _image_payload()

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        rejected = await client.post(
            "/webhook", content=body, headers={"X-Line-Signature": "bogus"}
        )
        accepted = await client.post(
            "/webhook", content=body, headers={"X-Line-Signature": signature_for(body, "secret")}
        )

    assert rejected.status_code == 401
    assert rejected.json()["error_code"] == "INVALID_SIGNATURE"
    assert accepted.status_code == 200
    assert len(collaborators.reply_channel.sent) == 1


@pytest.mark.anyio
async def test_webhook_set_command_persists_targets(tmp_path: Path) -> None:
    payload = {
        "events": [
            {
                "type": "message",
                "replyToken": "r-2",
                "message": {"id": "t-1", "type": "text", "text": "SET HW=5000 DW=4000"},
            }
        ]
    }

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/webhook", json=payload)
        targets = await client.get("/v1/targets")

    assert response.status_code == 200
    assert targets.json() == {"targets": {"DW": 4000, "HW": 5000}}
    assert json.loads((tmp_path / "targets.json").read_text(encoding="utf-8")) == {
        "DW": 4000,
        "HW": 5000,
    }


@pytest.mark.anyio
async def test_webhook_logs_start_and_done(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="salesbot.api")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.post("/webhook", content=_image_payload())

    request_id = response.headers["X-Salesbot-Request-Id"]
    messages = [record.message for record in caplog.records if record.name == "salesbot.api"]
    assert any('"event":"start"' in message and request_id in message for message in messages)
    assert any(
        '"event":"done"' in message and request_id in message and '"replied":1' in message
        for message in messages
    )
