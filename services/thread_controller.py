"""
Per-entry discussion state.

Each changelog entry gets one ThreadState, created the first time it is
touched and kept for the lifetime of the controller. Comments are fetched
at most once per entry: expanding an entry whose comments are cached, or
whose load is still in flight, does not hit the data source again. Load
failures are recorded on the state and reported through the notifier,
never raised.
"""
import logging
from typing import Any, Dict, List, Optional

from datasources.base import CommentDataSource
from domain.comments import Comment, ComposeBuffer, ReplyForm, ThreadState
from domain.errors import FetchError
from services.comment_tree import depth_of
from services.notifications import Notifier
from settings import MAX_IMAGES_PER_COMMENT, MAX_REPLY_DEPTH

logger = logging.getLogger('uvicorn.error')

LOAD_FAILED_MESSAGE = "Failed to load comments"


def cap_images(images: Optional[List[str]]) -> List[str]:
    images = list(images or [])
    if len(images) > MAX_IMAGES_PER_COMMENT:
        logger.warning(f"Dropping {len(images) - MAX_IMAGES_PER_COMMENT} image(s) above the limit of {MAX_IMAGES_PER_COMMENT}")
        images = images[:MAX_IMAGES_PER_COMMENT]
    return images


class ThreadController:
    def __init__(self, comment_source: CommentDataSource, notifier: Optional[Notifier] = None):
        self._source = comment_source
        self.notifier = notifier or Notifier()
        self._states: Dict[int, ThreadState] = {}
        self._closed = False

    # --- State access ---
    def get_state(self, entry_id: int) -> Optional[ThreadState]:
        return self._states.get(entry_id)

    def state_for(self, entry_id: int) -> ThreadState:
        state = self._states.get(entry_id)
        if state is None:
            state = ThreadState()
            self._states[entry_id] = state
        return state

    def comment_count(self, entry_id: int) -> Optional[int]:
        state = self._states.get(entry_id)
        if state is None or state.comments is None:
            return None
        return len(state.comments)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self):
        """Stop applying results of calls that complete after this point."""
        self._closed = True

    # --- Expand / load ---
    async def toggle_expand(self, entry_id: int) -> bool:
        state = self.state_for(entry_id)
        state.expanded = not state.expanded
        expanded = state.expanded
        if expanded and state.comments is None and not state.loading:
            await self.load(entry_id)
        return expanded

    async def load(self, entry_id: int):
        state = self.state_for(entry_id)
        if state.loading:
            logger.debug(f"Comments for entry {entry_id} already loading")
            return
        state.loading = True
        state.error = None
        try:
            all_comments = await self._source.get_all()
        except FetchError as e:
            self._fail_load(entry_id, state, str(e) or LOAD_FAILED_MESSAGE)
            return
        except Exception as e:
            logger.exception(f"Unexpected error loading comments for entry {entry_id}: {e}")
            self._fail_load(entry_id, state, LOAD_FAILED_MESSAGE)
            return
        state.loading = False
        if self._closed:
            logger.debug(f"Discarding comments for entry {entry_id}: controller closed")
            return
        comments = [comment for comment in all_comments if comment.postId == entry_id]
        fetched_ids = {comment.id for comment in comments}
        comments.extend(comment for comment in state.pendingComments if comment.id not in fetched_ids)
        state.pendingComments = []
        state.comments = comments
        logger.info(f"Loaded {len(state.comments)} comment(s) for entry {entry_id}")

    def _fail_load(self, entry_id: int, state: ThreadState, message: str):
        state.loading = False
        if self._closed:
            return
        state.error = message
        logger.error(f"Loading comments for entry {entry_id} failed: {message}")
        self.notifier.error(LOAD_FAILED_MESSAGE)

    # --- Top-level compose buffer ---
    def update_compose_buffer(self, entry_id: int, partial: Dict[str, Any]) -> ComposeBuffer:
        state = self.state_for(entry_id)
        merged = {**state.composeBuffer.model_dump(), **partial}
        merged["images"] = cap_images(merged.get("images"))
        state.composeBuffer = ComposeBuffer(**merged)
        return state.composeBuffer

    def reset_compose_buffer(self, entry_id: int):
        self.state_for(entry_id).composeBuffer = ComposeBuffer()

    # --- Reply forms ---
    def reply_form(self, entry_id: int, comment_id: int) -> Optional[ReplyForm]:
        state = self._states.get(entry_id)
        return state.replyForms.get(comment_id) if state else None

    def toggle_reply_form(self, entry_id: int, comment_id: int) -> Optional[ReplyForm]:
        state = self.state_for(entry_id)
        depth = depth_of(state.comments or [], comment_id)
        if depth is None or depth >= MAX_REPLY_DEPTH:
            logger.warning(f"Comment {comment_id} of entry {entry_id} does not accept replies (depth: {depth})")
            return None
        form = state.replyForms.setdefault(comment_id, ReplyForm())
        form.open = not form.open
        return form

    def update_reply_form(
        self,
        entry_id: int,
        comment_id: int,
        content: Optional[str] = None,
        images: Optional[List[str]] = None,
    ) -> Optional[ReplyForm]:
        form = self.reply_form(entry_id, comment_id)
        if form is None:
            logger.warning(f"No reply form open for comment {comment_id} of entry {entry_id}")
            return None
        if content is not None:
            form.content = content
        if images is not None:
            form.images = cap_images(images)
        return form

    def cancel_reply_form(self, entry_id: int, comment_id: int):
        state = self._states.get(entry_id)
        if state:
            state.replyForms.pop(comment_id, None)

    # --- Cache updates ---
    def append_comment(self, entry_id: int, comment: Comment) -> bool:
        """
        Add a confirmed comment to the cached thread. An entry that was never
        loaded keeps no cache, so its first load still fetches the full thread.
        While that first load is in flight the comment is held back and merged
        once the load completes, since the fetched list may predate it.
        """
        if self._closed:
            logger.debug(f"Discarding comment {comment.id} for entry {entry_id}: controller closed")
            return False
        state = self.state_for(entry_id)
        if state.comments is None:
            if state.loading:
                state.pendingComments.append(comment)
            return False
        state.comments.append(comment)
        return True
