import logging
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from datasources.base import ChangelogDataSource, CommentDataSource
from domain.changelog import ChangelogCategory, ChangelogEntry
from domain.errors import FetchError
from services.comment_submission import SubmissionPipeline
from services.notifications import Notifier
from services.thread_controller import ThreadController
from services.thread_renderer import ThreadPanel, render_thread_panel

logger = logging.getLogger('uvicorn.error')

ENTRIES_FAILED_MESSAGE = "Failed to load changelog entries"
NO_ENTRIES_MESSAGE = "No changelog entries yet"


class FeedStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


class FeedStats(BaseModel):
    totalReleases: int
    newFeatures: int
    # Counted from Performance releases, the way the release page labels them
    improvements: int


class ChangelogFeed:
    """
    The changelog page: the list of entries plus one discussion thread per entry.

    Threads share the feed's notifier, so comment and entry failures end up
    in the same list of recent notifications.
    """

    def __init__(
        self,
        changelog_source: ChangelogDataSource,
        comment_source: CommentDataSource,
        notifier: Optional[Notifier] = None,
    ):
        self._changelog_source = changelog_source
        self.notifier = notifier or Notifier()
        self.threads = ThreadController(comment_source, self.notifier)
        self.submissions = SubmissionPipeline(self.threads, comment_source, self.notifier)
        self.entries: List[ChangelogEntry] = []
        self.loading = False
        self.error: Optional[str] = None

    @property
    def status(self) -> FeedStatus:
        if self.loading:
            return FeedStatus.LOADING
        if self.error:
            return FeedStatus.ERROR
        if not self.entries:
            return FeedStatus.EMPTY
        return FeedStatus.READY

    @property
    def stats(self) -> Optional[FeedStats]:
        """Release counts shown above a loaded, non-empty feed."""
        if self.status != FeedStatus.READY:
            return None
        return FeedStats(
            totalReleases=len(self.entries),
            newFeatures=sum(1 for entry in self.entries if entry.category == ChangelogCategory.FEATURES),
            improvements=sum(1 for entry in self.entries if entry.category == ChangelogCategory.PERFORMANCE),
        )

    @property
    def empty_message(self) -> Optional[str]:
        return NO_ENTRIES_MESSAGE if self.status == FeedStatus.EMPTY else None

    async def load(self):
        self.loading = True
        self.error = None
        try:
            self.entries = await self._changelog_source.get_all()
            logger.info(f"Loaded {len(self.entries)} changelog entries")
        except FetchError as e:
            self.error = str(e) or ENTRIES_FAILED_MESSAGE
            self.notifier.error(ENTRIES_FAILED_MESSAGE)
        except Exception as e:
            logger.exception(f"Unexpected error loading changelog entries: {e}")
            self.error = ENTRIES_FAILED_MESSAGE
            self.notifier.error(ENTRIES_FAILED_MESSAGE)
        finally:
            self.loading = False

    def panels(self) -> List[ThreadPanel]:
        return [render_thread_panel(entry.id, self.threads.get_state(entry.id)) for entry in self.entries]

    def close(self):
        self.threads.close()
