from __future__ import annotations

import uuid

import pytest

from scorehub.core.codes import is_trivial_code
from scorehub.core.users.service import UserService
from scorehub.utils.exceptions import AuthorizationError, NotFoundError, ValidationError


@pytest.mark.asyncio
async def test_register_issues_unique_access_codes(db_session):
    service = UserService(db_session)
    users = [await service.register_user(f"User {i}") for i in range(20)]

    codes = {u.access_code for u in users}
    assert len(codes) == 20
    assert not any(is_trivial_code(c) for c in codes)


@pytest.mark.asyncio
async def test_register_requires_display_name(db_session):
    with pytest.raises(ValidationError):
        await UserService(db_session).register_user("   ")


@pytest.mark.asyncio
async def test_authenticate_by_access_code(db_session):
    service = UserService(db_session)
    user = await service.register_user("Ms. Lin")

    assert (await service.authenticate(f" {user.access_code}\n")).id == user.id


@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["", "abc", "12345"])
async def test_authenticate_malformed_code_is_generic_denial(db_session, code):
    with pytest.raises(AuthorizationError) as exc_info:
        await UserService(db_session).authenticate(code)
    assert exc_info.value.message == "Not permitted"


@pytest.mark.asyncio
async def test_authenticate_unknown_code(db_session):
    service = UserService(db_session)
    user = await service.register_user("Ms. Lin")
    unknown = "482913" if user.access_code != "482913" else "482914"

    with pytest.raises(AuthorizationError):
        await service.authenticate(unknown)


@pytest.mark.asyncio
async def test_get_missing_user(db_session):
    with pytest.raises(NotFoundError):
        await UserService(db_session).get_user(uuid.uuid4())
