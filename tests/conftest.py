"""Shared test fixtures for pytest."""
import pytest

from src.plugins.lyric_summary.models import IncomingMessage
from tests.factories import FakeLyricsClient, FakeSummarizer, FakeTransport


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def lyrics_client():
    return FakeLyricsClient()


@pytest.fixture
def summarizer():
    return FakeSummarizer()


@pytest.fixture
def incoming():
    return IncomingMessage(
        chat_id=42,
        user_id=7,
        display_name="Freddie Mercury",
        username="freddie",
        text="Bohemian Rhapsody",
        message_id=555,
    )
