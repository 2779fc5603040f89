import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from google.cloud import firestore

from datasources.firestore import FirestoreChangelogSource, FirestoreCommentSource
from datasources.memory import InMemoryChangelogSource, InMemoryCommentSource
from settings import ALLOWED_HOSTS, DATA_BACKEND

# Import routers
from routers import changelog, comments

logger = logging.getLogger('uvicorn.error')


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application startup: Initializing '{DATA_BACKEND}' data sources...")
    app.state.db = None
    app.state.changelog_source = None
    app.state.comment_source = None

    if DATA_BACKEND == "firestore":
        try:
            app.state.db = firestore.AsyncClient()
            app.state.changelog_source = FirestoreChangelogSource(app.state.db)
            app.state.comment_source = FirestoreCommentSource(app.state.db)
            logger.info("Firestore Async client initialized.")
        except Exception as e:
            logger.error(f"Failed to initialize Firestore Async client: {e}")
    else:
        app.state.changelog_source = InMemoryChangelogSource()
        app.state.comment_source = InMemoryCommentSource()
        logger.info("In-memory data sources initialized.")

    yield
    logger.info("Application shutdown: Cleaning up resources...")
    if app.state.db:
        try:
            await app.state.db.close() # Close the async client
            logger.info("Firestore Async client closed.")
        except Exception as e:
            logger.error(f"Error closing Firestore client: {e}")


app = FastAPI(lifespan=lifespan)
app.include_router(changelog.router)
app.include_router(comments.router)

app.add_middleware(
    TrustedHostMiddleware, allowed_hosts=ALLOWED_HOSTS
)
