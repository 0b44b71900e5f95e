from typing import Annotated

from litestar import Controller, Request, Response, get
from litestar.exceptions import NotFoundException
from litestar.params import Parameter
from sqlalchemy.ext.asyncio import AsyncSession

from verses.auth import resolve_viewer
from verses.controllers.helpers import app_settings, clamp_paging, render
from verses.db.services import poem_service
from verses.schemas import PoemListResponse, UserProfileResponse


class UsersController(Controller):
    path = "/api/users"

    @get("/{user_id:str}")
    async def profile(self, request: Request, db_session: AsyncSession, user_id: str) -> Response:
        profile = await poem_service.get_user_profile(
            db_session,
            user_id,
            resolve_viewer(request),
            top_limit=app_settings(request).poems.top_poems_limit,
        )
        if profile is None:
            raise NotFoundException("User not found")
        return render(UserProfileResponse.model_validate(profile))

    @get("/{user_id:str}/poems")
    async def poems(
        self,
        request: Request,
        db_session: AsyncSession,
        user_id: str,
        page: int = 1,
        page_size: Annotated[int, Parameter(query="pageSize")] = 10,
    ) -> Response:
        """Published poems of one author. An unknown author yields an empty page."""
        page, page_size = clamp_paging(page, page_size, app_settings(request).poems)
        result = await poem_service.get_public_user_poems(
            db_session, user_id, page, page_size, resolve_viewer(request)
        )
        return render(PoemListResponse.model_validate(result))
