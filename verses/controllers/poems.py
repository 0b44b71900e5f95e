from typing import Annotated, Any

from litestar import Controller, Request, Response, delete, get, post, put
from litestar.exceptions import NotAuthorizedException, NotFoundException
from litestar.params import Parameter
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED
from sqlalchemy.ext.asyncio import AsyncSession

from verses.auth import auth_guard, resolve_viewer
from verses.controllers.helpers import app_settings, clamp_paging, parse_body, render
from verses.db.services import like_service, poem_service
from verses.schemas import CreatePoemRequest, PoemListResponse, PoemResponse, UpdatePoemRequest


PageSize = Annotated[int, Parameter(query="pageSize")]


class PoemsController(Controller):
    path = "/api/poems"

    @get("/feed")
    async def feed(
        self,
        request: Request,
        db_session: AsyncSession,
        page: int = 1,
        page_size: PageSize = 10,
    ) -> Response:
        page, page_size = clamp_paging(page, page_size, app_settings(request).poems)
        result = await poem_service.get_feed(db_session, page, page_size, resolve_viewer(request))
        return render(PoemListResponse.model_validate(result))

    @get("/my-poems", guards=[auth_guard])
    async def my_poems(
        self,
        request: Request,
        db_session: AsyncSession,
        page: int = 1,
        page_size: PageSize = 10,
    ) -> Response:
        viewer = resolve_viewer(request)
        page, page_size = clamp_paging(page, page_size, app_settings(request).poems)
        result = await poem_service.get_user_poems(
            db_session, viewer.user_id, page, page_size, viewer
        )
        return render(PoemListResponse.model_validate(result))

    @get("/{poem_id:int}")
    async def get_poem(self, request: Request, db_session: AsyncSession, poem_id: int) -> Response:
        poem = await poem_service.get_poem(
            db_session,
            poem_id,
            resolve_viewer(request),
            drafts_visible=app_settings(request).poems.drafts_visible,
        )
        if poem is None:
            raise NotFoundException("Poem not found")
        return render(PoemResponse.model_validate(poem))

    @post("/", guards=[auth_guard], status_code=HTTP_201_CREATED)
    async def create_poem(
        self, request: Request, db_session: AsyncSession, data: dict[str, Any]
    ) -> Response:
        body = parse_body(data, CreatePoemRequest)
        poem = await poem_service.create_poem(
            db_session,
            resolve_viewer(request).user_id,
            title=body.title,
            content=body.content,
            is_published=body.is_published,
        )
        if poem is None:
            # Token outlived its account
            raise NotAuthorizedException("Unknown user")
        return render(PoemResponse.model_validate(poem), status_code=HTTP_201_CREATED)

    @put("/{poem_id:int}", guards=[auth_guard])
    async def update_poem(
        self, request: Request, db_session: AsyncSession, poem_id: int, data: dict[str, Any]
    ) -> Response:
        body = parse_body(data, UpdatePoemRequest)
        poem = await poem_service.update_poem(
            db_session,
            poem_id,
            resolve_viewer(request).user_id,
            title=body.title,
            content=body.content,
            is_published=body.is_published,
        )
        if poem is None:
            raise NotFoundException("Poem not found")
        return render(PoemResponse.model_validate(poem))

    @delete("/{poem_id:int}", guards=[auth_guard])
    async def delete_poem(self, request: Request, db_session: AsyncSession, poem_id: int) -> None:
        if not await poem_service.delete_poem(db_session, poem_id, resolve_viewer(request).user_id):
            raise NotFoundException("Poem not found")

    @post("/{poem_id:int}/like", guards=[auth_guard], status_code=HTTP_200_OK)
    async def like(self, request: Request, db_session: AsyncSession, poem_id: int) -> Response:
        poem = await like_service.like_poem(
            db_session,
            poem_id,
            resolve_viewer(request).user_id,
            drafts_visible=app_settings(request).poems.drafts_visible,
        )
        if poem is None:
            raise NotFoundException("Poem not found")
        return render(PoemResponse.model_validate(poem))

    @delete("/{poem_id:int}/like", guards=[auth_guard], status_code=HTTP_200_OK)
    async def unlike(self, request: Request, db_session: AsyncSession, poem_id: int) -> Response:
        poem = await like_service.unlike_poem(
            db_session,
            poem_id,
            resolve_viewer(request).user_id,
            drafts_visible=app_settings(request).poems.drafts_visible,
        )
        if poem is None:
            raise NotFoundException("Poem not found")
        return render(PoemResponse.model_validate(poem))
