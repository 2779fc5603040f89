"""
Render contract for discussion threads.

The renderer is a pure function of the reply tree: depth is passed down
explicitly and every node below MAX_REPLY_DEPTH gets a reply affordance.
Reply form contents are read from the entry's ThreadState, never stored
on the rendered nodes themselves.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from domain.comments import ReplyForm, ThreadState
from services.comment_tree import CommentNode, build_tree
from services.time_format import format_relative_time
from settings import MAX_REPLY_DEPTH

EMPTY_THREAD_MESSAGE = "No comments yet. Be the first to share your thoughts!"


class RenderedReplyForm(BaseModel):
    open: bool
    content: str
    images: List[str] = Field(default_factory=list)
    canSubmit: bool
    submitting: bool = False


class RenderedComment(BaseModel):
    id: int
    parentId: Optional[int] = None
    author: str
    anonymous: bool
    relativeTime: str
    content: str
    images: List[str] = Field(default_factory=list)
    depth: int
    canReply: bool
    replyForm: Optional[RenderedReplyForm] = None
    replies: List["RenderedComment"] = Field(default_factory=list)


class ThreadStatus(str, Enum):
    COLLAPSED = "collapsed"
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    LOADED = "loaded"


class ThreadPanel(BaseModel):
    entryId: int
    expanded: bool
    status: ThreadStatus
    error: Optional[str] = None
    retryable: bool = False
    commentCount: Optional[int] = None
    commentCountLabel: Optional[str] = None
    canSubmit: bool = False
    submitting: bool = False
    emptyMessage: Optional[str] = None
    comments: List[RenderedComment] = Field(default_factory=list)


def _render_reply_form(form: Optional[ReplyForm], submitting: bool) -> RenderedReplyForm:
    form = form or ReplyForm()
    return RenderedReplyForm(
        open=form.open,
        content=form.content,
        images=list(form.images),
        canSubmit=bool(form.content.strip()) and not submitting,
        submitting=submitting,
    )


def _render_comment(
    node: CommentNode,
    depth: int,
    now: Optional[datetime],
    reply_forms: Optional[Dict[int, ReplyForm]],
    submitting_reply: bool,
) -> RenderedComment:
    comment = node.comment
    can_reply = depth < MAX_REPLY_DEPTH
    reply_form = None
    if can_reply:
        reply_form = _render_reply_form((reply_forms or {}).get(comment.id), submitting_reply)
    return RenderedComment(
        id=comment.id,
        parentId=comment.parentId,
        author=comment.displayAuthor,
        anonymous=comment.isAnonymous,
        relativeTime=format_relative_time(comment.createdAt, now),
        content=comment.content,
        images=list(comment.images),
        depth=depth,
        canReply=can_reply,
        replyForm=reply_form,
    )


def render_node(
    node: CommentNode,
    depth: int = 0,
    now: Optional[datetime] = None,
    reply_forms: Optional[Dict[int, ReplyForm]] = None,
    submitting_reply: bool = False,
) -> RenderedComment:
    """Render `node` at `depth` and its replies at depth + 1, + 2, and so on."""
    rendered = _render_comment(node, depth, now, reply_forms, submitting_reply)
    # Walked with an explicit stack; reply chains have no depth limit
    stack = [(node, rendered)]
    while stack:
        current, current_rendered = stack.pop()
        for child in current.replies:
            child_rendered = _render_comment(child, current_rendered.depth + 1, now, reply_forms, submitting_reply)
            current_rendered.replies.append(child_rendered)
            stack.append((child, child_rendered))
    return rendered


def render_tree(
    roots: List[CommentNode],
    now: Optional[datetime] = None,
    reply_forms: Optional[Dict[int, ReplyForm]] = None,
    submitting_reply: bool = False,
) -> List[RenderedComment]:
    return [render_node(root, 0, now, reply_forms, submitting_reply) for root in roots]


def flatten_rendered(rendered: List[RenderedComment]) -> List[RenderedComment]:
    """Pre-order copies of the rendered comments with their replies detached."""
    flat: List[RenderedComment] = []
    stack = list(reversed(rendered))
    while stack:
        node = stack.pop()
        flat.append(node.model_copy(update={"replies": []}))
        stack.extend(reversed(node.replies))
    return flat


def comment_count_label(count: int) -> str:
    return f"{count} comment" if count == 1 else f"{count} comments"


def render_thread_panel(entry_id: int, state: Optional[ThreadState], now: Optional[datetime] = None) -> ThreadPanel:
    state = state or ThreadState()
    count = len(state.comments) if state.comments is not None else None
    panel = ThreadPanel(
        entryId=entry_id,
        expanded=state.expanded,
        status=ThreadStatus.COLLAPSED,
        commentCount=count,
        commentCountLabel=comment_count_label(count) if count is not None else None,
        canSubmit=bool(state.composeBuffer.content.strip()),
        submitting=state.submittingComment,
    )
    if not state.expanded:
        return panel
    if state.loading:
        panel.status = ThreadStatus.LOADING
    elif state.error:
        panel.status = ThreadStatus.ERROR
        panel.error = state.error
        panel.retryable = True
    elif not state.comments:
        panel.status = ThreadStatus.EMPTY
        panel.emptyMessage = EMPTY_THREAD_MESSAGE
    else:
        panel.status = ThreadStatus.LOADED
        panel.comments = render_tree(
            build_tree(state.comments),
            now=now,
            reply_forms=state.replyForms,
            submitting_reply=state.submittingReply,
        )
    return panel
