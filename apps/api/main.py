"""FastAPI wrapper for the sales summary bot."""

from __future__ import annotations

import json
import logging
import os
import threading
import time
import uuid
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from apps.api.line_client import LineMessagingClient, verify_signature
from apps.api.vision_ocr import VisionOcrEngine
from core.messaging.events import WebhookPayload
from core.orchestrator.pipeline import DEFAULT_TIMEZONE, report_date_label, summarize_transcript
from core.orchestrator.webhook import Collaborators, handle_event
from core.report.layout import ReportLayout, load_layout
from core.targets.store import TargetStore

app = FastAPI(title="salesbot API", version="0.1.0")
logger = logging.getLogger("salesbot.api")

_DEFAULT_TARGETS_PATH = "targets.json"
_DEFAULT_HTTP_TIMEOUT_SECONDS = 15.0

_cache_lock = threading.Lock()
_store_cache: dict[Path, TargetStore] = {}
_layout_cache: dict[Path | None, ReportLayout] = {}
_collaborators_cache: tuple[tuple[str, float, str | None], Collaborators] | None = None


class ReportRequest(BaseModel):
    text: str
    report_date: str | None = None


class ApiRequestError(Exception):
    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.detail = detail or {}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    """Ensure every response has a request id header."""

    request_id = uuid.uuid4().hex
    request.state.request_id = request_id
    try:
        response = await call_next(request)
    except Exception:  # noqa: BLE001
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INTERNAL_ERROR",
            status_code=500,
            failure_stage="middleware",
        )
        response = _error_response(
            status_code=500,
            error_code="INTERNAL_ERROR",
            message="internal server error",
            request_id=request_id,
            detail={"path": request.url.path},
        )
    response.headers.setdefault("X-Salesbot-Request-Id", request_id)
    return response


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness endpoint."""

    return {"status": "ok"}


@app.get("/v1/meta")
async def meta_v1(request: Request) -> JSONResponse:
    """Report layout metadata for operators."""

    request_id = _request_id_from_request(request)
    if not _meta_enabled():
        return _error_response(
            status_code=404,
            error_code="NOT_FOUND",
            message="meta endpoint is disabled",
            request_id=request_id,
            detail={"path": request.url.path},
        )

    layout = _get_layout()
    payload = {
        "version": app.version,
        "header_anchor": layout.header_anchor,
        "groups": {
            "group_1": {"title": layout.group_1.title, "codes": layout.group_1.codes},
            "group_2": {"title": layout.group_2.title, "codes": layout.group_2.codes},
        },
        "known_codes": sorted(layout.known_codes),
    }
    return JSONResponse(
        status_code=200,
        headers={"X-Salesbot-Request-Id": request_id},
        content=payload,
    )


@app.get("/v1/targets")
async def targets_v1(request: Request) -> JSONResponse:
    """Current persisted daily targets."""

    request_id = _request_id_from_request(request)
    return JSONResponse(
        status_code=200,
        headers={"X-Salesbot-Request-Id": request_id},
        content={"targets": _get_target_store().read()},
    )


@app.post("/v1/report", response_model=None)
async def report_v1(request: Request) -> JSONResponse:
    """Summarize a transcript submitted directly, bypassing image OCR."""

    request_id = _request_id_from_request(request)
    failure_stage = "validate_inputs"

    try:
        body = await request.body()
        try:
            report_request = ReportRequest.model_validate_json(body)
        except ValidationError as exc:
            raise ApiRequestError(
                status_code=400,
                error_code="INVALID_ARGUMENT",
                message="request must be JSON with a text field",
                detail={"error": str(exc)},
            ) from exc

        failure_stage = "summarize"
        report_date = report_request.report_date or report_date_label(_timezone())
        result = summarize_transcript(
            report_request.text,
            _get_target_store(),
            _get_layout(),
            report_date,
        )
    except ApiRequestError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code=exc.error_code,
            status_code=exc.status_code,
            failure_stage=failure_stage,
        )
        return _error_response(
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
            request_id=request_id,
            detail=exc.detail,
        )

    _log_event(logging.INFO, "report", request_id, ok=result.ok, rows=len(result.rows))
    return JSONResponse(
        status_code=200,
        headers={"X-Salesbot-Request-Id": request_id},
        content={"ok": result.ok, "message": result.message, "row_count": len(result.rows)},
    )


@app.post("/webhook", response_model=None)
async def webhook(request: Request) -> JSONResponse:
    """Chat platform webhook; answers 200 for accepted payloads so it is not retried."""

    request_started = time.perf_counter()
    request_id = _request_id_from_request(request)
    body = await request.body()

    channel_secret = _channel_secret()
    if channel_secret is not None and not verify_signature(
        body, request.headers.get("x-line-signature"), channel_secret
    ):
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INVALID_SIGNATURE",
            status_code=401,
            failure_stage="verify_signature",
        )
        return _error_response(
            status_code=401,
            error_code="INVALID_SIGNATURE",
            message="signature verification failed",
            request_id=request_id,
        )

    try:
        payload = WebhookPayload.model_validate_json(body)
    except ValidationError as exc:
        _log_event(
            logging.ERROR,
            "error",
            request_id,
            error_code="INVALID_JSON",
            status_code=400,
            failure_stage="parse_payload",
        )
        return _error_response(
            status_code=400,
            error_code="INVALID_JSON",
            message="webhook body must be a valid event payload",
            request_id=request_id,
            detail={"error": str(exc)},
        )

    _log_event(logging.INFO, "start", request_id, events=len(payload.events))

    replied = 0
    failed = 0
    if payload.events:
        collaborators = _get_collaborators()
        store = _get_target_store()
        layout = _get_layout()
        report_date = report_date_label(_timezone())

        for event in payload.events:
            try:
                reply = await handle_event(
                    event,
                    collaborators=collaborators,
                    store=store,
                    layout=layout,
                    report_date=report_date,
                )
            except Exception as exc:  # noqa: BLE001
                failed += 1
                _log_event(
                    logging.ERROR,
                    "error",
                    request_id,
                    error_code="EVENT_FAILED",
                    failure_stage="handle_event",
                    event_type=event.type,
                    error=str(exc),
                )
                continue
            if reply is not None:
                replied += 1

    _log_event(
        logging.INFO,
        "done",
        request_id,
        events=len(payload.events),
        replied=replied,
        failed=failed,
        total_ms=_elapsed_ms(request_started),
    )
    return JSONResponse(
        status_code=200,
        headers={"X-Salesbot-Request-Id": request_id},
        content={"status": "ok", "events": len(payload.events), "replied": replied},
    )


def _request_id_from_request(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if isinstance(request_id, str) and request_id:
        return request_id
    generated = uuid.uuid4().hex
    request.state.request_id = generated
    return generated


def _get_target_store() -> TargetStore:
    path = _targets_path()
    with _cache_lock:
        store = _store_cache.get(path)
        if store is None:
            store = TargetStore(path)
            _store_cache[path] = store
        return store


def _get_layout() -> ReportLayout:
    path = _layout_path()
    with _cache_lock:
        layout = _layout_cache.get(path)
        if layout is None:
            layout = load_layout(path)
            _layout_cache[path] = layout
        return layout


def _get_collaborators() -> Collaborators:
    global _collaborators_cache

    settings = (
        os.getenv("LINE_CHANNEL_ACCESS_TOKEN", ""),
        _http_timeout_seconds(),
        os.getenv("GOOGLE_CREDENTIALS"),
    )
    with _cache_lock:
        if _collaborators_cache is not None and _collaborators_cache[0] == settings:
            return _collaborators_cache[1]

        access_token, timeout_seconds, credentials_json = settings
        line_client = LineMessagingClient(access_token, timeout_seconds=timeout_seconds)
        collaborators = Collaborators(
            image_source=line_client,
            ocr_engine=VisionOcrEngine(credentials_json),
            reply_channel=line_client,
        )
        _collaborators_cache = (settings, collaborators)
        return collaborators


def _targets_path() -> Path:
    raw = os.getenv("SALESBOT_TARGETS_PATH", "").strip()
    return Path(raw or _DEFAULT_TARGETS_PATH).resolve()


def _layout_path() -> Path | None:
    raw = os.getenv("SALESBOT_LAYOUT_PATH", "").strip()
    return Path(raw).resolve() if raw else None


def _timezone() -> str:
    raw = os.getenv("SALESBOT_TIMEZONE", "").strip()
    return raw or DEFAULT_TIMEZONE


def _channel_secret() -> str | None:
    raw = os.getenv("LINE_CHANNEL_SECRET")
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _meta_enabled() -> bool:
    raw = os.getenv("SALESBOT_ENABLE_META", "1").strip().lower()
    return raw not in {"0", "false", "off", "no"}


def _http_timeout_seconds() -> float:
    raw = os.getenv("SALESBOT_HTTP_TIMEOUT_SECONDS")
    if raw is None:
        return _DEFAULT_HTTP_TIMEOUT_SECONDS
    try:
        parsed = float(raw)
    except ValueError:
        return _DEFAULT_HTTP_TIMEOUT_SECONDS
    return parsed if parsed > 0 else _DEFAULT_HTTP_TIMEOUT_SECONDS


def _error_response(
    *,
    status_code: int,
    error_code: str,
    message: str,
    request_id: str,
    detail: dict[str, Any] | None = None,
) -> JSONResponse:
    payload_detail = dict(detail or {})
    payload_detail["request_id"] = request_id

    return JSONResponse(
        status_code=status_code,
        headers={"X-Salesbot-Request-Id": request_id},
        content={
            "error_code": error_code,
            "message": message,
            "detail": payload_detail,
        },
    )


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _dump_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), sort_keys=True)


def _log_event(level: int, event: str, request_id: str, **fields: Any) -> None:
    payload = {
        "event": event,
        "request_id": request_id,
        **fields,
    }
    logger.log(level, _dump_json(payload))
