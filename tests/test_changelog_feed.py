"""
Unit tests for services.changelog_feed.
"""
import asyncio

from datasources.memory import InMemoryChangelogSource
from domain.changelog import ChangelogCategory, ChangelogEntry
from services.changelog_feed import ChangelogFeed, FeedStats, FeedStatus
from services.notifications import NotificationLevel
from services.thread_renderer import ThreadStatus


class TestChangelogFeed:
    """Tests for ChangelogFeed."""

    def test_load_entries(self, changelog_entries, comment_source):
        feed = ChangelogFeed(InMemoryChangelogSource(changelog_entries), comment_source)

        asyncio.run(feed.load())

        assert feed.status == FeedStatus.READY
        assert [entry.id for entry in feed.entries] == [42, 7]
        assert feed.empty_message is None

    def test_empty_feed(self, comment_source):
        feed = ChangelogFeed(InMemoryChangelogSource(), comment_source)

        asyncio.run(feed.load())

        assert feed.status == FeedStatus.EMPTY
        assert feed.empty_message == "No changelog entries yet"

    def test_failure_is_reported(self, failing_changelog_source, comment_source):
        feed = ChangelogFeed(failing_changelog_source, comment_source)

        asyncio.run(feed.load())

        assert feed.status == FeedStatus.ERROR
        assert feed.error == "Changelog service unreachable"
        assert feed.loading is False
        assert feed.notifier.recent[-1].level == NotificationLevel.ERROR
        assert feed.notifier.recent[-1].message == "Failed to load changelog entries"

    def test_panels_follow_thread_state(self, changelog_entries, comment_source):
        feed = ChangelogFeed(InMemoryChangelogSource(changelog_entries), comment_source)

        async def scenario():
            await feed.load()
            await feed.threads.toggle_expand(42)

        asyncio.run(scenario())
        panels = {panel.entryId: panel for panel in feed.panels()}

        assert panels[42].status == ThreadStatus.LOADED
        assert panels[42].commentCountLabel == "6 comments"
        assert panels[7].status == ThreadStatus.COLLAPSED

    def test_thread_and_submission_share_notifier(self, changelog_entries, comment_source):
        feed = ChangelogFeed(InMemoryChangelogSource(changelog_entries), comment_source)

        async def scenario():
            await feed.threads.toggle_expand(42)
            feed.threads.update_compose_buffer(42, {"content": "Hello"})
            await feed.submissions.submit_comment(42)

        asyncio.run(scenario())

        assert [n.message for n in feed.notifier.recent] == ["Comment posted successfully"]
        assert feed.threads.comment_count(42) == 7


class TestFeedStats:
    """Tests for the release counts above the feed."""

    def test_counts_by_category(self, changelog_entries, comment_source):
        entries = changelog_entries + [
            ChangelogEntry(
                id=3,
                version="2.2.0",
                title="Offline mode",
                category=ChangelogCategory.FEATURES,
                content="Work without a connection.",
            ),
            ChangelogEntry(
                id=2,
                version="2.1.1",
                title="Crash fix",
                category=ChangelogCategory.BUG_FIXES,
                content="Fixed a crash on startup.",
            ),
        ]
        feed = ChangelogFeed(InMemoryChangelogSource(entries), comment_source)

        asyncio.run(feed.load())

        assert feed.stats == FeedStats(totalReleases=4, newFeatures=2, improvements=1)

    def test_no_stats_unless_ready(self, failing_changelog_source, comment_source):
        empty_feed = ChangelogFeed(InMemoryChangelogSource(), comment_source)
        failed_feed = ChangelogFeed(failing_changelog_source, comment_source)

        asyncio.run(empty_feed.load())
        asyncio.run(failed_feed.load())

        assert empty_feed.stats is None
        assert failed_feed.stats is None

    def test_no_stats_while_loading(self, changelog_entries, comment_source):
        feed = ChangelogFeed(InMemoryChangelogSource(changelog_entries), comment_source)
        feed.loading = True

        assert feed.stats is None
