from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional
import datetime

from settings import ANONYMOUS_AUTHOR


def _default_author(value: Optional[str]) -> str:
    if value is None or not value.strip():
        return ANONYMOUS_AUTHOR
    return value.strip()


class CommentDraft(BaseModel):
    postId: int
    authorName: str = ANONYMOUS_AUTHOR
    content: str
    images: List[str] = Field(default_factory=list)
    isAnonymous: bool = False
    parentId: Optional[int] = None

    @field_validator("authorName", mode="before")
    @classmethod
    def default_author(cls, value: Optional[str]) -> str:
        return _default_author(value)


class Comment(CommentDraft):
    id: int
    createdAt: datetime.datetime = Field(default_factory=lambda: datetime.datetime.now(datetime.timezone.utc))

    class Config:
        from_attributes = True

    @property
    def displayAuthor(self) -> str:
        return ANONYMOUS_AUTHOR if self.isAnonymous else self.authorName


class ComposeBuffer(BaseModel):
    """Unsent top-level comment of one changelog entry."""
    authorName: str = ""
    content: str = ""
    images: List[str] = Field(default_factory=list)
    isAnonymous: bool = False

    model_config = {"extra": "forbid"}


class ReplyForm(BaseModel):
    """Reply sub-form attached to a single comment."""
    open: bool = False
    content: str = ""
    images: List[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}


class ThreadState(BaseModel):
    expanded: bool = False
    loading: bool = False
    error: Optional[str] = None
    comments: Optional[List[Comment]] = None
    pendingComments: List[Comment] = Field(default_factory=list)
    composeBuffer: ComposeBuffer = Field(default_factory=ComposeBuffer)
    replyForms: Dict[int, ReplyForm] = Field(default_factory=dict)
    commentsInFlight: int = 0
    repliesInFlight: int = 0

    @property
    def loaded(self) -> bool:
        return self.comments is not None

    @property
    def submittingComment(self) -> bool:
        return self.commentsInFlight > 0

    @property
    def submittingReply(self) -> bool:
        return self.repliesInFlight > 0
