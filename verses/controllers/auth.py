"""Registration and login endpoints that hand out bearer tokens."""

import logging
from typing import Any

from litestar import Controller, Request, Response, post
from litestar.exceptions import NotAuthorizedException, TooManyRequestsException, ValidationException
from litestar.status_codes import HTTP_200_OK
from sqlalchemy.ext.asyncio import AsyncSession

from verses.auth.tokens import create_access_token
from verses.config import Settings
from verses.controllers.helpers import app_settings, parse_body, render
from verses.db.models import User
from verses.db.services import user_service
from verses.db.services.user_service import RegistrationError
from verses.lib.throttle import FailedLoginLimiter, get_client_ip
from verses.schemas import AuthResponse, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


def _issue_token(user: User, settings: Settings) -> AuthResponse:
    token = create_access_token(
        user.id,
        secret=settings.secret_key,
        issuer=settings.auth.issuer,
        audience=settings.auth.audience,
        ttl_minutes=settings.auth.token_ttl_minutes,
        email=user.email,
        display_name=user.display_name,
    )
    return AuthResponse(
        token=token,
        user_id=user.id,
        email=user.email,
        display_name=user.display_name,
    )


class AuthController(Controller):
    path = "/api/auth"

    @post("/register", status_code=HTTP_200_OK)
    async def register(
        self, request: Request, db_session: AsyncSession, data: dict[str, Any]
    ) -> Response:
        body = parse_body(data, RegisterRequest)
        try:
            user = await user_service.register_user(
                db_session, body.email, body.password, body.display_name
            )
        except RegistrationError as exc:
            raise ValidationException(str(exc)) from exc

        return render(_issue_token(user, app_settings(request)))

    @post("/login", status_code=HTTP_200_OK)
    async def login(
        self,
        request: Request,
        db_session: AsyncSession,
        data: dict[str, Any],
    ) -> Response:
        ip = get_client_ip(request)
        limiter: FailedLoginLimiter = request.app.state.login_limiter

        retry_after = limiter.retry_after(ip)
        if retry_after:
            raise TooManyRequestsException(
                "Too many failed login attempts",
                headers={"Retry-After": str(retry_after)},
            )

        body = parse_body(data, LoginRequest)
        user = await user_service.authenticate(db_session, body.email, body.password)
        if user is None:
            limiter.record_failure(ip)
            logger.info("Failed login from %s", ip)
            raise NotAuthorizedException("Invalid credentials")

        return render(_issue_token(user, app_settings(request)))
