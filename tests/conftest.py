import pytest

from src.calendar.repository import InMemoryMeetingRepository
from helpers import FakeAvailabilityProvider


@pytest.fixture
def repository():
    return InMemoryMeetingRepository()


@pytest.fixture
def provider():
    return FakeAvailabilityProvider()
