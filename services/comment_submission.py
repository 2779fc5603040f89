"""
Submission of top-level comments and replies.

A new comment reaches the cached thread only after the data source has
confirmed it, so every displayed comment carries its stored id. Drafts are
cleared on success only; a failed submission leaves both the cache and the
draft untouched. Submissions are not deduplicated.
"""
import logging
from typing import List, Optional

from datasources.base import CommentDataSource
from domain.comments import Comment, CommentDraft, ComposeBuffer, ThreadState
from domain.errors import FetchError, ValidationError
from services.notifications import Notifier
from services.thread_controller import ThreadController, cap_images
from settings import ANONYMOUS_AUTHOR

logger = logging.getLogger('uvicorn.error')

COMMENT_POSTED_MESSAGE = "Comment posted successfully"
COMMENT_FAILED_MESSAGE = "Failed to post comment"
REPLY_POSTED_MESSAGE = "Reply posted successfully"
REPLY_FAILED_MESSAGE = "Failed to post reply"


class SubmissionPipeline:
    def __init__(
        self,
        controller: ThreadController,
        comment_source: CommentDataSource,
        notifier: Optional[Notifier] = None,
    ):
        self._controller = controller
        self._source = comment_source
        self.notifier = notifier or controller.notifier

    async def submit_comment(self, entry_id: int, buffer: Optional[ComposeBuffer] = None) -> Optional[Comment]:
        """Post the entry's compose buffer (or `buffer`) as a top-level comment."""
        state = self._controller.state_for(entry_id)
        own_buffer = buffer is None or buffer is state.composeBuffer
        buffer = state.composeBuffer if buffer is None else buffer
        if not buffer.content.strip():
            logger.warning(f"Ignoring empty comment for entry {entry_id}")
            return None

        draft = CommentDraft(
            postId=entry_id,
            authorName=buffer.authorName.strip() or ANONYMOUS_AUTHOR,
            content=buffer.content.strip(),
            images=cap_images(buffer.images),
            isAnonymous=buffer.isAnonymous,
            parentId=None,
        )
        comment = await self._create(state, draft, reply=False)
        if comment is None or self._controller.closed:
            return comment

        self._controller.append_comment(entry_id, comment)
        if own_buffer:
            self._controller.reset_compose_buffer(entry_id)
        self.notifier.success(COMMENT_POSTED_MESSAGE)
        return comment

    async def submit_reply(
        self,
        entry_id: int,
        parent_id: int,
        content: str,
        images: Optional[List[str]] = None,
    ) -> Optional[Comment]:
        """Post an anonymous reply to `parent_id` under `entry_id`."""
        if not content or not content.strip():
            logger.warning(f"Ignoring empty reply to comment {parent_id} of entry {entry_id}")
            return None
        state = self._controller.state_for(entry_id)
        if state.comments is not None and all(comment.id != parent_id for comment in state.comments):
            logger.warning(f"Ignoring reply to comment {parent_id}: not part of entry {entry_id}")
            return None

        # Quick replies are always posted anonymously.
        draft = CommentDraft(
            postId=entry_id,
            authorName=ANONYMOUS_AUTHOR,
            content=content.strip(),
            images=cap_images(images),
            isAnonymous=True,
            parentId=parent_id,
        )
        comment = await self._create(state, draft, reply=True)
        if comment is None or self._controller.closed:
            return comment

        self._controller.append_comment(entry_id, comment)
        self._controller.cancel_reply_form(entry_id, parent_id)
        self.notifier.success(REPLY_POSTED_MESSAGE)
        return comment

    async def submit_reply_form(self, entry_id: int, parent_id: int) -> Optional[Comment]:
        form = self._controller.reply_form(entry_id, parent_id)
        if form is None:
            logger.warning(f"No reply form for comment {parent_id} of entry {entry_id}")
            return None
        return await self.submit_reply(entry_id, parent_id, form.content, form.images)

    async def _create(self, state: ThreadState, draft: CommentDraft, reply: bool) -> Optional[Comment]:
        failed_message = REPLY_FAILED_MESSAGE if reply else COMMENT_FAILED_MESSAGE
        if reply:
            state.repliesInFlight += 1
        else:
            state.commentsInFlight += 1
        try:
            return await self._source.create(draft)
        except (FetchError, ValidationError) as e:
            logger.error(f"Posting comment on entry {draft.postId} failed: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error posting comment on entry {draft.postId}: {e}")
        finally:
            if reply:
                state.repliesInFlight -= 1
            else:
                state.commentsInFlight -= 1
        if not self._controller.closed:
            self.notifier.error(failed_message)
        return None
