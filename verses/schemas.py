"""Request and response bodies of the JSON API.

Wire keys are camelCase; Python attributes stay snake_case.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# --- Requests ---


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: str = Field(min_length=1, max_length=100)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class CreatePoemRequest(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    is_published: bool = True


class UpdatePoemRequest(CamelModel):
    title: str | None = Field(default=None, max_length=200)
    content: str | None = None
    is_published: bool | None = None


# --- Responses ---


class AuthResponse(CamelModel):
    token: str
    user_id: str
    email: str
    display_name: str


class AuthorResponse(CamelModel):
    id: str
    display_name: str


class PoemResponse(CamelModel):
    id: int
    title: str
    content: str
    created_at: datetime
    updated_at: datetime | None = None
    is_published: bool
    author: AuthorResponse
    like_count: int
    is_liked_by_current_user: bool


class PoemListResponse(CamelModel):
    items: list[PoemResponse]
    total_count: int
    page: int
    page_size: int


class UserProfileResponse(CamelModel):
    id: str
    display_name: str
    created_at: datetime
    total_poem_count: int
    top_poems: list[PoemResponse]
