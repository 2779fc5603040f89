from abc import ABC, abstractmethod
from typing import List

from domain.changelog import ChangelogEntry
from domain.comments import Comment, CommentDraft


class ChangelogDataSource(ABC):

    @abstractmethod
    async def get_all(self) -> List[ChangelogEntry]:
        """Return every changelog entry, newest first. Raises FetchError."""


class CommentDataSource(ABC):

    @abstractmethod
    async def get_all(self) -> List[Comment]:
        """Return the comments of every entry; callers filter by postId. Raises FetchError."""

    @abstractmethod
    async def create(self, draft: CommentDraft) -> Comment:
        """
        Store a new comment and return it with its id and createdAt assigned.
        Raises ValidationError for blank content and FetchError on transport failure.
        """
