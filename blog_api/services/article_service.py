"""
Article service — business logic for the Article resource.

Design notes
------------
- Reads (list/show) are open to everyone and go through the cache-aside
  layer.  Writes queue the list entry and the touched detail entry on
  the session; ``transaction`` drops them once the commit lands.
- Update and delete look the article up with ``user_id = current_user.id``
  in the WHERE clause.  A row owned by someone else is simply not found,
  so callers see the same ``ArticleNotFoundError`` whether the id is
  absent or belongs to another user.
- Missing rows raise; nothing here returns ``None`` for "not found".
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from blog_api.cache import ARTICLE_LIST_KEY, article_detail_key, cache
from blog_api.config import settings
from blog_api.exceptions import ArticleNotFoundError, ValidationError
from blog_api.models import Article, User
from blog_api.schemas import ArticleParams, ArticleUpdateParams

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive; they were written as UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
    }


def article_to_dict(article: Article) -> dict:
    """Serialise an Article with its owner loaded; key order is fixed."""
    return {
        "id": article.id,
        "title": article.title,
        "body": article.body,
        "updated_at": _as_utc(article.updated_at).isoformat() if article.updated_at else None,
        "user": _serialize_user(article.user),
    }


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

# Article.id is a 32-bit INTEGER; larger ids cannot name a row and
# would fail to bind rather than match nothing.
_MIN_ID = -(2 ** 31)
_MAX_ID = 2 ** 31 - 1


def _check_id_range(article_id: int) -> None:
    if not _MIN_ID <= article_id <= _MAX_ID:
        raise ArticleNotFoundError(article_id)


async def _find_owned_article(db: AsyncSession, article_id: int, owner: User) -> Article:
    _check_id_range(article_id)
    q = (
        select(Article)
        .where(Article.id == article_id, Article.user_id == owner.id)
        .options(joinedload(Article.user))
    )
    article = (await db.execute(q)).unique().scalar_one_or_none()
    if article is None:
        raise ArticleNotFoundError(article_id)
    return article


async def _flush(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ValidationError(
            "Article could not be saved", details={"reason": str(exc.orig)}
        ) from exc


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def list_articles(db: AsyncSession) -> list[dict]:
    """Return every article in insertion order, each with its owner."""
    cached = await cache.get(ARTICLE_LIST_KEY)
    if cached is not None:
        return cached

    q = select(Article).options(joinedload(Article.user)).order_by(Article.id)
    result = await db.execute(q)
    items = [article_to_dict(a) for a in result.unique().scalars().all()]

    await cache.set(ARTICLE_LIST_KEY, items, ttl=settings.CACHE_TTL_LIST)
    return items


async def get_article(db: AsyncSession, article_id: int) -> dict:
    """
    Return the article with primary key *article_id*, regardless of owner.

    Raises ArticleNotFoundError when no such row exists.
    """
    _check_id_range(article_id)
    cache_key = article_detail_key(article_id)
    cached = await cache.get(cache_key)
    if cached is not None:
        return cached

    q = select(Article).where(Article.id == article_id).options(joinedload(Article.user))
    article = (await db.execute(q)).unique().scalar_one_or_none()
    if article is None:
        raise ArticleNotFoundError(article_id)

    data = article_to_dict(article)
    await cache.set(cache_key, data, ttl=settings.CACHE_TTL_DETAIL)
    return data


async def create_article(db: AsyncSession, current_user: User, params: ArticleParams) -> dict:
    """
    Create an article owned by *current_user*.

    Only ``title`` and ``body`` are read from *params*; ownership always
    comes from the authenticated user.
    """
    article = Article(title=params.title, body=params.body, user=current_user)
    db.add(article)
    await _flush(db)

    logger.info("Article %d created by user %d", article.id, current_user.id)
    cache.defer_article_invalidation(db)
    return article_to_dict(article)


async def update_article(
    db: AsyncSession,
    current_user: User,
    article_id: int,
    params: ArticleUpdateParams,
) -> dict:
    """
    Apply the supplied ``title``/``body`` to an article *current_user* owns.

    Raises ArticleNotFoundError when the id does not exist or belongs to
    another user.
    """
    article = await _find_owned_article(db, article_id, current_user)

    for field, value in params.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(article, field, value)

    await _flush(db)
    cache.defer_article_invalidation(db, article_id)
    return article_to_dict(article)


async def delete_article(db: AsyncSession, current_user: User, article_id: int) -> None:
    """
    Hard-delete an article *current_user* owns.

    Raises ArticleNotFoundError under the same conditions as update.
    """
    article = await _find_owned_article(db, article_id, current_user)

    await db.delete(article)
    await db.flush()

    logger.info("Article %d deleted by user %d", article_id, current_user.id)
    cache.defer_article_invalidation(db, article_id)
