"""
Shared test fixtures and configuration.
"""

import asyncio
import os
from unittest.mock import AsyncMock

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("STORAGE_TYPE", "memory")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/l2coach_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from l2coach.core.engine import ConversationEngine
from l2coach.core.resolver import ResponseResolver
from l2coach.services.uploads import ImageUploader
from l2coach.services.vision import VisionAnalyzer
from l2coach.storage import FileConversationStore, InMemoryConversationStore, LocalStorage

# Minimal valid 1x1 PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360606060000000050001a5f645400000000049454e44ae426082"
)


@pytest.fixture
def png_bytes():
    return PNG_BYTES


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    """Each conversation store backend."""
    if request.param == "memory":
        return InMemoryConversationStore()
    return FileConversationStore(LocalStorage(str(tmp_path / "data")))


@pytest.fixture
def blob_storage(tmp_path):
    return LocalStorage(str(tmp_path / "blobs"))


@pytest.fixture
def analyzer():
    """Vision analyzer double returning a fixed read."""
    mock = AsyncMock(spec=VisionAnalyzer)
    mock.analyze.return_value = "> TL;DR ANALYSIS\nSTATUS: BUYERS IN CONTROL"
    return mock


@pytest.fixture
def uploader(blob_storage):
    return ImageUploader(blob_storage)


@pytest.fixture
def engine(analyzer, uploader):
    return ConversationEngine(
        InMemoryConversationStore(),
        ResponseResolver(analyzer),
        uploader,
    )


class Gate:
    """Holds a coroutine until released; records that it started."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def wait(self):
        self.started.set()
        await self.release.wait()


@pytest.fixture
def gate():
    return Gate()
