"""Shared plumbing for the API controllers."""

from typing import Any, TypeVar

from litestar import Request, Response
from litestar.exceptions import ValidationException
from litestar.status_codes import HTTP_200_OK
from pydantic import BaseModel, ValidationError

from verses.config import PoemsConfig, Settings

M = TypeVar("M", bound=BaseModel)

# Keeps the row offset within a 64-bit SQL integer
MAX_PAGE = 2**31 - 1


def parse_body(data: Any, model: type[M]) -> M:
    """Validate a decoded JSON body, raising a 400 listing the bad fields."""
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        extra = [
            {
                "key": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors(include_url=False, include_context=False, include_input=False)
        ]
        raise ValidationException("Validation failed", extra=extra) from exc


def clamp_paging(page: int, page_size: int, poems_config: PoemsConfig) -> tuple[int, int]:
    """Coerce paging input.

    ``page`` is held within 1..MAX_PAGE and an out-of-range size becomes the
    configured default.
    """
    page = min(max(page, 1), MAX_PAGE)
    if page_size < 1 or page_size > poems_config.max_page_size:
        page_size = poems_config.default_page_size
    return page, page_size


def render(model: BaseModel, status_code: int = HTTP_200_OK) -> Response:
    """Serialize a response model with its camelCase keys."""
    return Response(content=model.model_dump(mode="json", by_alias=True), status_code=status_code)


def app_settings(request: Request) -> Settings:
    return request.app.state.settings
