import logging

from fastapi import HTTPException, Request

from datasources.base import ChangelogDataSource, CommentDataSource

logger = logging.getLogger('uvicorn.error')


async def get_changelog_source(request: Request) -> ChangelogDataSource:
    source = getattr(request.app.state, 'changelog_source', None)
    if source is None:
        logger.error("Changelog data source not initialized or unavailable.")
        raise HTTPException(status_code=503, detail="Changelog service unavailable")
    return source


async def get_comment_source(request: Request) -> CommentDataSource:
    source = getattr(request.app.state, 'comment_source', None)
    if source is None:
        logger.error("Comment data source not initialized or unavailable.")
        raise HTTPException(status_code=503, detail="Comment service unavailable")
    return source
