"""
Export API Routes

Endpoints returning the recorded readings as CSV or GeoJSON downloads.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from loguru import logger

from ..dependencies import AppContext, get_context
from ...core.errors import EncodingError
from ...core.exporter import ExportType, build_export

router = APIRouter()


@router.get("/{export_type}")
def export_records(export_type: ExportType, context: AppContext = Depends(get_context)):
    """
    Export all records.

    The filename is generated from the export time and returned in the
    Content-Disposition header. GeoJSON export fails with 422 if a record
    holds a value GeoJSON cannot represent.
    """
    with context.store_lock:
        records = context.store.snapshot()

    try:
        export = build_export(export_type, records)
    except EncodingError as e:
        logger.error(f"{export_type.value} export failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return Response(
        content=export.data,
        media_type=export_type.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'}
    )
