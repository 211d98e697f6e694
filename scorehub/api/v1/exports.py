import logging
import uuid
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from scorehub.api import deps
from scorehub.core.reports.csv_export import ReportType
from scorehub.core.reports.service import ReportService
from scorehub.db.models.user import User

router = APIRouter()

logger = logging.getLogger(__name__)


def _content_disposition(filename: str) -> str:
    # Activity names are often non-ASCII; send an ASCII fallback plus RFC 5987 form.
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


@router.get("/{activity_id}/exports/{report_type}")
async def export_report(
    activity_id: uuid.UUID,
    report_type: ReportType,
    participant_id: Optional[List[uuid.UUID]] = Query(None),
    db: AsyncSession = Depends(deps.get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(deps.get_session_factory),
    current_user: User = Depends(deps.get_current_user),
):
    service = ReportService(db, session_factory)
    export = await service.export(activity_id, report_type, current_user.id, participant_ids=participant_id)
    logger.info(
        "export.downloaded activity=%s type=%s user=%s rows=%d",
        activity_id,
        report_type.value,
        current_user.id,
        export.rows,
    )
    return Response(
        content=export.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": _content_disposition(export.filename)},
    )
