import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from blog_api.cache import cache
from blog_api.exceptions import register_exception_handlers
from blog_api.middleware import TimingMiddleware
from blog_api.routers import articles, auth

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    try:
        await cache.connect()
    except Exception as exc:
        logger.warning("Cache unavailable, serving from database only: %s", exc)
    yield
    # Shutdown
    await cache.disconnect()

app = FastAPI(
    title="Blog Articles API",
    description="Article CRUD with owner-scoped writes and token authentication",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(auth.router)
app.include_router(articles.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
