from fastapi import APIRouter, Depends

from scorehub.api import deps
from scorehub.api.v1 import activities, auth, exports, health, participants, scores, users
from scorehub.schemas.common import ErrorEnvelope

api_router = APIRouter(
    responses={
        status_code: {"model": ErrorEnvelope}
        for status_code in (400, 401, 403, 404, 409, 422, 429, 503)
    }
)

_http_deps = [Depends(deps.rate_limit)]

api_router.include_router(auth.router, prefix="/auth", tags=["Auth"], dependencies=_http_deps)
api_router.include_router(users.router, prefix="/users", tags=["Users"], dependencies=_http_deps)
api_router.include_router(activities.router, prefix="/activities", tags=["Activities"], dependencies=_http_deps)
api_router.include_router(exports.router, prefix="/activities", tags=["Exports"], dependencies=_http_deps)
api_router.include_router(participants.router, prefix="/participants", tags=["Participants"], dependencies=_http_deps)
api_router.include_router(scores.router, prefix="/scores", tags=["Scores"], dependencies=_http_deps)
api_router.include_router(health.router, tags=["Health"], dependencies=_http_deps)
