import asyncio
import datetime
import logging
from typing import Iterable, List, Optional

from datasources.base import ChangelogDataSource, CommentDataSource
from domain.changelog import ChangelogEntry
from domain.comments import Comment, CommentDraft
from domain.errors import ValidationError

logger = logging.getLogger('uvicorn.error')


class InMemoryChangelogSource(ChangelogDataSource):
    def __init__(self, entries: Optional[Iterable[ChangelogEntry]] = None, delay: float = 0.0):
        self._entries: List[ChangelogEntry] = list(entries or [])
        self._delay = delay

    async def get_all(self) -> List[ChangelogEntry]:
        if self._delay:
            await asyncio.sleep(self._delay)
        return sorted(
            self._entries,
            key=lambda entry: (entry.releaseDate or datetime.date.min, entry.id),
            reverse=True,
        )


class InMemoryCommentSource(CommentDataSource):
    """
    Process-local comment store with sequential integer ids.

    `delay` simulates the round trip of a remote store so callers can observe
    their in-flight states.
    """

    def __init__(self, comments: Optional[Iterable[Comment]] = None, delay: float = 0.0):
        self._comments: List[Comment] = list(comments or [])
        self._delay = delay

    async def get_all(self) -> List[Comment]:
        if self._delay:
            await asyncio.sleep(self._delay)
        return [comment.model_copy(deep=True) for comment in self._comments]

    async def create(self, draft: CommentDraft) -> Comment:
        if not draft.content.strip():
            logger.warning(f"Rejected empty comment for post {draft.postId}")
            raise ValidationError("Comment content must not be empty")
        if self._delay:
            await asyncio.sleep(self._delay)
        next_id = max((comment.id for comment in self._comments), default=0) + 1
        comment = Comment(id=next_id, **draft.model_dump())
        self._comments.append(comment)
        logger.info(f"Stored comment {comment.id} on post {comment.postId} (parent: {comment.parentId})")
        return comment.model_copy(deep=True)
