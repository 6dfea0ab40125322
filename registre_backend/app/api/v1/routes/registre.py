# registre_backend/app/api/v1/routes/registre.py

import logging
import re
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ....api.deps import db_session, get_request_user, get_registre_export_service
from ....core.constants import PDF_MEDIA_TYPE
from ....schemas.registre import RequestUser
from ....services.export import RegistreExportService

logger = logging.getLogger(__name__)

router = APIRouter()

# Anything a quoted-string header parameter cannot carry as is
_UNSAFE_FILENAME_CHARS = re.compile(r'[^\x20-\x7e]|["\\]')


def attachment_disposition(file_name: str) -> str:
    """
    ``Content-Disposition`` value for a download. Names outside printable
    ASCII get an ``_``-substituted ``filename`` plus the exact name as an
    RFC 5987 ``filename*``.
    """
    ascii_name = _UNSAFE_FILENAME_CHARS.sub("_", file_name)
    if ascii_name == file_name:
        return f'attachment; filename="{file_name}"'
    return (
        f'attachment; filename="{ascii_name}"; '
        f"filename*=UTF-8''{quote(file_name, safe='')}"
    )


@router.get(
    "/export",
    summary="Export Register",
    response_class=Response,
    responses={200: {"content": {PDF_MEDIA_TYPE: {}}}},
)
async def export_registre(
    plage_horaire: Optional[str] = Query(
        None,
        alias="plageHoraire",
        description="Two ISO-8601 timestamps separated by a comma.",
    ),
    fuseau_horaire: Optional[str] = Query(
        None, alias="fuseauHoraire", description="IANA zone, e.g. 'Europe/Paris'."
    ),
    activite_ids: Optional[List[int]] = Query(None, alias="activiteIds"),
    db: AsyncSession = Depends(db_session),
    user: RequestUser = Depends(get_request_user),
    service: RegistreExportService = Depends(get_registre_export_service),
):
    """
    Exports the register of the requester's service scope as a PDF.

    The export demand is committed only once the response is ready, so a
    failed request does not hold the requester's retry window.
    """
    try:
        document = await service.export(
            user, plage_horaire, fuseau_horaire, db, activite_ids=activite_ids
        )
        response = Response(
            content=document.content,
            media_type=PDF_MEDIA_TYPE,
            headers={"Content-Disposition": attachment_disposition(document.file_name)},
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    return response
