from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


# --- User ---

class UserSummary(BaseModel):
    """The only user fields ever embedded in a response."""
    id: int
    name: str
    email: str
    model_config = ConfigDict(from_attributes=True)


# --- Auth ---

class SignUpRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    # bcrypt ignores anything past 72 bytes
    password: str = Field(min_length=6, max_length=72)


class SignInRequest(BaseModel):
    email: str = Field(max_length=255)
    password: str = Field(max_length=72)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserSummary


# --- Article ---

class ArticleParams(BaseModel):
    """
    Allow-list of client-writable article fields.

    Anything else in the payload (``user_id``, ``id``, timestamps) is
    dropped during validation and never reaches the ORM.
    """
    title: str = Field(min_length=1, max_length=255)
    body: str


class ArticleUpdateParams(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    body: str | None = None


class ArticleCreateRequest(BaseModel):
    article: ArticleParams


class ArticleUpdateRequest(BaseModel):
    article: ArticleUpdateParams


class ArticleResponse(BaseModel):
    # Field order is part of the wire contract.
    id: int
    title: str
    body: str
    updated_at: datetime
    user: UserSummary
    model_config = ConfigDict(from_attributes=True)
