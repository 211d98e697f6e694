import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from scorehub.api import deps
from scorehub.config import settings
from scorehub.core.users.service import UserService
from scorehub.schemas.user import AccessToken, LoginRequest, UserPublic
from scorehub.utils.exceptions import ScoreHubException
from scorehub.utils.security import create_access_token

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post("/login", response_model=AccessToken)
async def login(
    request: LoginRequest,
    http_request: Request,
    db: AsyncSession = Depends(deps.get_db),
):
    client_host = (http_request.client.host if http_request.client else None) or "unknown"
    try:
        user = await UserService(db).authenticate(request.access_code)
    except ScoreHubException:
        # Never log the submitted code.
        logger.warning("auth.login failed ip=%s", client_host)
        raise

    logger.info("auth.login success user=%s ip=%s", user.id, client_host)
    return AccessToken(
        access_token=create_access_token(user.id),
        expires_in=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserPublic.model_validate(user),
    )
