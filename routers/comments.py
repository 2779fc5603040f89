import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Depends, status

from datasources.base import CommentDataSource
from domain.comments import Comment, CommentDraft
from domain.errors import FetchError, ValidationError
from routers.dependencies import get_comment_source
from settings import MAX_IMAGES_PER_COMMENT, MAX_TEXT_FIELD_SIZE_BYTES, MAX_TEXT_FIELD_SIZE_KB

logger = logging.getLogger('uvicorn.error')

router = APIRouter(
    prefix="/comments",
    tags=["comments"]
)


@router.get("/", response_model=List[Comment])
async def get_comments(
    postId: Optional[int] = None,
    source: CommentDataSource = Depends(get_comment_source)
):
    try:
        all_comments = await source.get_all()
    except FetchError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if postId is None:
        return all_comments
    return [comment for comment in all_comments if comment.postId == postId]


@router.post("/", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def create_comment(
    draft: CommentDraft,
    source: CommentDataSource = Depends(get_comment_source)
):
    if len(draft.content.encode('utf-8')) > MAX_TEXT_FIELD_SIZE_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Comment content exceeds the maximum size of {MAX_TEXT_FIELD_SIZE_KB} KB."
        )
    if len(draft.images) > MAX_IMAGES_PER_COMMENT:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"A comment can carry at most {MAX_IMAGES_PER_COMMENT} images."
        )

    try:
        if draft.parentId is not None:
            existing = await source.get_all()
            parent = next((comment for comment in existing if comment.id == draft.parentId), None)
            if parent is None or parent.postId != draft.postId:
                logger.warning(f"Reply to unknown comment {draft.parentId} on post {draft.postId}")
                raise HTTPException(
                    status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                    detail=f"Comment {draft.parentId} does not belong to post {draft.postId}."
                )
        return await source.create(draft)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except FetchError as e:
        raise HTTPException(status_code=503, detail=str(e))
