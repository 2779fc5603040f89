import logging
from typing import List

from google.cloud import firestore
from google.cloud.firestore import AsyncClient
from pydantic import ValidationError as PydanticValidationError

from datasources.base import ChangelogDataSource, CommentDataSource
from domain.changelog import ChangelogEntry
from domain.comments import Comment, CommentDraft
from domain.errors import FetchError, ValidationError
from settings import CHANGELOG_COLLECTION, COMMENTS_COLLECTION, COUNTERS_COLLECTION

logger = logging.getLogger('uvicorn.error')


@firestore.async_transactional
async def _allocate_id(transaction, counter_ref) -> int:
    snapshot = await counter_ref.get(transaction=transaction)
    next_id = (snapshot.get("value") if snapshot.exists else 0) + 1
    transaction.set(counter_ref, {"value": next_id})
    return next_id


class FirestoreChangelogSource(ChangelogDataSource):
    def __init__(self, db: AsyncClient):
        self._db = db

    async def get_all(self) -> List[ChangelogEntry]:
        entries_collection = self._db.collection(CHANGELOG_COLLECTION)
        try:
            entries = []
            async for doc in entries_collection.order_by("releaseDate", direction=firestore.Query.DESCENDING).stream():
                entry_data = doc.to_dict()
                entry_data.setdefault('id', int(doc.id))
                try:
                    entries.append(ChangelogEntry(**entry_data))
                except PydanticValidationError as validation_error:
                    logger.error(f"Data validation error for changelog doc {doc.id}: {validation_error}. Data: {entry_data}")
                    continue
            return entries
        except Exception as e:
            logger.exception(f"Error retrieving changelog entries: {e}")
            raise FetchError("Failed to load changelog entries") from e


class FirestoreCommentSource(CommentDataSource):
    """Comments stored flat in one collection, keyed by their integer id."""

    def __init__(self, db: AsyncClient):
        self._db = db

    async def get_all(self) -> List[Comment]:
        comments_query = self._db.collection(COMMENTS_COLLECTION).order_by(
            "createdAt", direction=firestore.Query.ASCENDING
        )
        try:
            all_comments = []
            async for doc in comments_query.stream():
                comment_data = doc.to_dict()
                comment_data.setdefault('id', int(doc.id))
                try:
                    all_comments.append(Comment(**comment_data))
                except PydanticValidationError as validation_error:
                    logger.error(f"Data validation error for comment {doc.id}: {validation_error}. Data: {comment_data}")
                    continue
            return all_comments
        except Exception as e:
            logger.exception(f"Error retrieving comments: {e}")
            raise FetchError("Failed to load comments") from e

    async def create(self, draft: CommentDraft) -> Comment:
        if not draft.content.strip():
            logger.warning(f"Rejected empty comment for post {draft.postId}")
            raise ValidationError("Comment content must not be empty")
        counter_ref = self._db.collection(COUNTERS_COLLECTION).document(COMMENTS_COLLECTION)
        try:
            comment_id = await _allocate_id(self._db.transaction(), counter_ref)
            new_comment = Comment(id=comment_id, **draft.model_dump())
            await self._db.collection(COMMENTS_COLLECTION).document(str(comment_id)).set(new_comment.model_dump())
            logger.info(f"Created comment '{comment_id}' on post '{draft.postId}' (parent: {draft.parentId})")
            return new_comment
        except Exception as e:
            logger.exception(f"Error creating comment for post '{draft.postId}': {e}")
            raise FetchError("Failed to post comment") from e
