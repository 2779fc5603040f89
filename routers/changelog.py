import logging
from typing import List

from fastapi import APIRouter, HTTPException, Depends

from datasources.base import ChangelogDataSource, CommentDataSource
from domain.changelog import ChangelogEntry
from domain.errors import FetchError
from routers.dependencies import get_changelog_source, get_comment_source
from services.comment_tree import build_tree
from services.thread_renderer import RenderedComment, flatten_rendered, render_tree

logger = logging.getLogger('uvicorn.error')

router = APIRouter(
    prefix="/changelog",
    tags=["changelog"]
)


@router.get("/", response_model=List[ChangelogEntry])
async def get_changelog(
    source: ChangelogDataSource = Depends(get_changelog_source)
):
    try:
        return await source.get_all()
    except FetchError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{entry_id}/comments", response_model=List[RenderedComment])
async def get_entry_thread(
    entry_id: int,
    changelog: ChangelogDataSource = Depends(get_changelog_source),
    comments: CommentDataSource = Depends(get_comment_source)
):
    """
    The entry's thread in reading order. Each comment carries its depth and
    parentId; replies are listed after their parent instead of nested in it.
    """
    try:
        entries = await changelog.get_all()
        if not any(entry.id == entry_id for entry in entries):
            logger.warning(f"Attempt to get comments for non-existent changelog entry {entry_id}")
            raise HTTPException(status_code=404, detail=f"Changelog entry {entry_id} not found.")
        all_comments = await comments.get_all()
    except FetchError as e:
        raise HTTPException(status_code=503, detail=str(e))
    entry_comments = [comment for comment in all_comments if comment.postId == entry_id]
    return flatten_rendered(render_tree(build_tree(entry_comments)))
