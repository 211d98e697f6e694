from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from scorehub.api import deps
from scorehub.core.users.service import UserService
from scorehub.db.models.user import User
from scorehub.schemas.user import UserPublic, UserRegisterRequest, UserWithCode

router = APIRouter()


@router.post("", response_model=UserWithCode, status_code=status.HTTP_201_CREATED)
async def register_user(
    request: UserRegisterRequest,
    db: AsyncSession = Depends(deps.get_db),
):
    return await UserService(db).register_user(request.display_name)


@router.get("/me", response_model=UserPublic)
async def get_me(current_user: User = Depends(deps.get_current_user)):
    return current_user
