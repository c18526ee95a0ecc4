import pytest

from .doubles import RecordingSink


@pytest.fixture
def sink():
    return RecordingSink()
