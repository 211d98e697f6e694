from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError

from scorehub.config import settings
from scorehub.core.codes import allocate_code
from scorehub.core.store import StoreService
from scorehub.db.models.user import User
from scorehub.utils.exceptions import AuthorizationError, DuplicateError, NotFoundError, TransportError, ValidationError
from scorehub.utils.validation import validate_code, validate_required_text

logger = logging.getLogger(__name__)

_CODE_INSERT_ATTEMPTS = 3


class UserService(StoreService):
    async def register_user(self, display_name: str) -> User:
        display_name = validate_required_text(
            display_name, field="display_name", max_length=settings.USER_DISPLAY_NAME_MAX_LENGTH
        )

        for _ in range(_CODE_INSERT_ATTEMPTS):
            code = await allocate_code(self._code_taken, namespace="user_code")
            user = User(display_name=display_name, access_code=code)
            self.session.add(user)
            try:
                await self.session.commit()
            except IntegrityError:
                # Another registration took the same code between check and insert.
                await self.session.rollback()
                logger.warning("user.code_race code=%s", code)
                continue
            except DBAPIError as exc:
                await self._rollback_quietly()
                raise TransportError() from exc

            await self.session.refresh(user)
            logger.info("user.registered id=%s", user.id)
            return user

        raise DuplicateError("Could not reserve a unique access code", field="access_code")

    async def authenticate(self, access_code: str) -> User:
        try:
            code = validate_code(access_code, field="access_code")
        except ValidationError:
            raise AuthorizationError()

        result = await self._execute(select(User).where(User.access_code == code))
        user = result.scalar_one_or_none()
        if user is None:
            raise AuthorizationError()
        return user

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self._get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _code_taken(self, code: str) -> bool:
        result = await self._execute(select(User.id).where(User.access_code == code))
        return result.first() is not None
