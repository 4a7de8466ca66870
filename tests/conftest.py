import pytest

from helpers import FakeQuestionStore


@pytest.fixture
def store():
    return FakeQuestionStore()
