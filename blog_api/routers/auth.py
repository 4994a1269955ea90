from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession
from blog_api.database import get_db
from blog_api.dependencies import CurrentUser
from blog_api.schemas import SignInRequest, SignUpRequest, TokenResponse
from blog_api.services import auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

@router.post("", status_code=201, response_model=TokenResponse)
async def sign_up(data: SignUpRequest, db: AsyncSession = Depends(get_db)):
    return await auth_service.sign_up(db, data)

@router.post("/sign_in", response_model=TokenResponse)
async def sign_in(data: SignInRequest, db: AsyncSession = Depends(get_db)):
    return await auth_service.sign_in(db, data)

@router.delete("/sign_out", status_code=204)
async def sign_out(current_user: CurrentUser, db: AsyncSession = Depends(get_db)):
    await auth_service.sign_out(db, current_user)
    return Response(status_code=204)

@router.get("/validate_token", response_model=TokenResponse)
async def validate_token(current_user: CurrentUser):
    return auth_service.refresh_token(current_user)
