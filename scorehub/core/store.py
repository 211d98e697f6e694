"""Shared plumbing for services that talk to the backing store.

Services raise domain errors only: driver/connection failures surface as
``TransportError`` and unique-constraint violations on commit are rolled back and
re-raised as whatever conflict the caller supplies.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from scorehub.utils.exceptions import ScoreHubException, TransportError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class StoreService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _execute(self, stmt) -> Any:
        try:
            return await self.session.execute(stmt)
        except DBAPIError as exc:
            logger.error("store.execute_failed error=%s", type(exc).__name__)
            await self._rollback_quietly()
            raise TransportError() from exc

    async def _get(self, model: type[ModelT], ident: uuid.UUID) -> Optional[ModelT]:
        try:
            return await self.session.get(model, ident)
        except DBAPIError as exc:
            logger.error("store.get_failed model=%s error=%s", model.__name__, type(exc).__name__)
            await self._rollback_quietly()
            raise TransportError() from exc

    async def _commit(self, *, conflict: ScoreHubException | None = None) -> None:
        """Commit, translating a unique-constraint race into ``conflict``."""
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if conflict is None:
                logger.error("store.commit_rejected error=%s", exc.orig)
                raise TransportError("Store rejected the write") from exc
            raise conflict from exc
        except DBAPIError as exc:
            logger.error("store.commit_failed error=%s", type(exc).__name__)
            await self._rollback_quietly()
            raise TransportError() from exc

    async def _rollback_quietly(self) -> None:
        try:
            await self.session.rollback()
        except DBAPIError:
            logger.warning("store.rollback_failed")
