from __future__ import annotations

import pytest

from tests.fakes import FakeTransport, RecordingHandler


@pytest.fixture()
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()
