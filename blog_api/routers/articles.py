from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from blog_api.database import get_db
from blog_api.dependencies import CurrentUser
from blog_api.schemas import ArticleCreateRequest, ArticleResponse, ArticleUpdateRequest
from blog_api.services import article_service

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])

@router.get("", response_model=list[ArticleResponse])
async def list_articles(db: AsyncSession = Depends(get_db)):
    return await article_service.list_articles(db)

@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(article_id: int, db: AsyncSession = Depends(get_db)):
    return await article_service.get_article(db, article_id)

# 200 rather than 201: existing clients depend on it.
@router.post("", status_code=200, response_model=ArticleResponse)
async def create_article(
    data: ArticleCreateRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await article_service.create_article(db, current_user, data.article)

@router.patch("/{article_id}", response_model=ArticleResponse)
async def update_article(
    article_id: int,
    data: ArticleUpdateRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await article_service.update_article(db, current_user, article_id, data.article)

@router.delete("/{article_id}", status_code=204)
async def delete_article(
    article_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    await article_service.delete_article(db, current_user, article_id)
    return Response(status_code=204)
