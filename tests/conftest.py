"""
Pytest configuration and shared fixtures.
"""
import asyncio
import datetime

import pytest

from datasources.memory import InMemoryChangelogSource, InMemoryCommentSource
from domain.changelog import ChangelogCategory, ChangelogEntry
from domain.comments import Comment
from domain.errors import FetchError
from services.notifications import Notifier

CREATED_AT = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)


class RecordingCommentSource(InMemoryCommentSource):
    """In-memory comment source that counts calls and can be told to fail."""

    def __init__(self, comments=None, delay=0.0):
        super().__init__(comments, delay=delay)
        self.get_calls = 0
        self.create_calls = 0
        self.fail_get = False
        self.fail_create = False

    async def get_all(self):
        self.get_calls += 1
        if self.fail_get:
            raise FetchError("Network error while loading comments")
        return await super().get_all()

    async def create(self, draft):
        self.create_calls += 1
        if self.fail_create:
            raise FetchError("Network error while posting comment")
        return await super().create(draft)


class SnapshotCommentSource(RecordingCommentSource):
    """
    Comment source whose reads stay in flight while writes complete at once.

    With `snapshot_first` the read copies the store before it suspends, like a
    query result that predates writes made while it is being delivered.
    """

    def __init__(self, comments=None, fetch_delay=0.01, snapshot_first=True):
        super().__init__(comments)
        self.fetch_delay = fetch_delay
        self.snapshot_first = snapshot_first

    async def get_all(self):
        self.get_calls += 1
        if self.snapshot_first:
            snapshot = [comment.model_copy(deep=True) for comment in self._comments]
            await asyncio.sleep(self.fetch_delay)
            return snapshot
        await asyncio.sleep(self.fetch_delay)
        return [comment.model_copy(deep=True) for comment in self._comments]


class FailingChangelogSource(InMemoryChangelogSource):
    async def get_all(self):
        raise FetchError("Changelog service unreachable")


def make_comment(comment_id, post_id=42, parent_id=None, **overrides):
    data = {
        "id": comment_id,
        "postId": post_id,
        "parentId": parent_id,
        "authorName": f"user{comment_id}",
        "content": f"comment {comment_id}",
        "createdAt": CREATED_AT,
    }
    data.update(overrides)
    return Comment(**data)


@pytest.fixture
def comment_factory():
    """Build Comment instances with sensible defaults."""
    return make_comment


@pytest.fixture
def thread_comments():
    """Comments of entry 42 (plus one of entry 7) with two levels of replies."""
    return [
        make_comment(1),
        make_comment(2),
        make_comment(3, parent_id=1),
        make_comment(4, post_id=7),
        make_comment(5, parent_id=3),
        make_comment(6, parent_id=1),
        make_comment(7),
    ]


@pytest.fixture
def comment_source(thread_comments):
    return RecordingCommentSource(thread_comments)


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def changelog_entries():
    return [
        ChangelogEntry(
            id=42,
            version="2.4.0",
            title="Faster sync",
            category=ChangelogCategory.PERFORMANCE,
            content="Sync is now twice as fast.",
            releaseDate=datetime.date(2024, 5, 1),
        ),
        ChangelogEntry(
            id=7,
            version="2.3.0",
            title="Dark mode",
            category=ChangelogCategory.FEATURES,
            content="Dark mode is here.",
            releaseDate=datetime.date(2024, 3, 12),
        ),
    ]


@pytest.fixture
def slow_comment_source(thread_comments):
    """Comment source whose calls stay in flight for a few milliseconds."""
    return RecordingCommentSource(thread_comments, delay=0.01)


@pytest.fixture
def failing_changelog_source():
    return FailingChangelogSource()


@pytest.fixture
def snapshot_comment_source(thread_comments):
    return SnapshotCommentSource(thread_comments)


@pytest.fixture
def late_read_comment_source(thread_comments):
    return SnapshotCommentSource(thread_comments, snapshot_first=False)
