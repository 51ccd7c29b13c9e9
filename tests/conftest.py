from __future__ import annotations

from pathlib import Path

import pytest

from core.orchestrator.webhook import Collaborators
from core.report.layout import ReportLayout, load_layout
from core.targets.store import TargetStore
from core.utils.errors import CollaboratorError

SAMPLE_TRANSCRIPT = "Daily sales\nOMCH3 Rank POS + S/O\nHW 1 5,500\nDW 2 3,000\n"


class FakeImageSource:
    def __init__(self, data: bytes = b"image-bytes", *, fail: bool = False) -> None:
        self.data = data
        self.fail = fail
        self.requested: list[str] = []

    async def fetch_image(self, message_id: str) -> bytes:
        self.requested.append(message_id)
        if self.fail:
            raise CollaboratorError("connection reset", service="fake_image")
        return self.data


class FakeOcrEngine:
    def __init__(self, text: str | None = SAMPLE_TRANSCRIPT) -> None:
        self.text = text
        self.images: list[bytes] = []

    async def extract_text(self, image: bytes) -> str | None:
        self.images.append(image)
        return self.text


class FakeReplyChannel:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    async def reply(self, reply_token: str, text: str) -> None:
        if self.fail:
            raise CollaboratorError("reply rejected", service="fake_reply")
        self.sent.append((reply_token, text))


@pytest.fixture
def layout() -> ReportLayout:
    return load_layout()


@pytest.fixture
def store(tmp_path: Path) -> TargetStore:
    return TargetStore(tmp_path / "targets.json")


@pytest.fixture
def image_source() -> FakeImageSource:
    return FakeImageSource()


@pytest.fixture
def ocr_engine() -> FakeOcrEngine:
    return FakeOcrEngine()


@pytest.fixture
def reply_channel() -> FakeReplyChannel:
    return FakeReplyChannel()


@pytest.fixture
def collaborators(
    image_source: FakeImageSource,
    ocr_engine: FakeOcrEngine,
    reply_channel: FakeReplyChannel,
) -> Collaborators:
    return Collaborators(
        image_source=image_source,
        ocr_engine=ocr_engine,
        reply_channel=reply_channel,
    )


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
