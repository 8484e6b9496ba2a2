from typing import Callable

import pytest

from helpers import RecordingStore, StepClock, StubRetailer


@pytest.fixture
def stub_retailer() -> Callable[..., StubRetailer]:
    return StubRetailer


@pytest.fixture
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def clock() -> StepClock:
    return StepClock()
