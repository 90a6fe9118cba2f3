"""
Record API Routes

Endpoints for adding, listing and clearing brightness records.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from ..models import RecordCreate, RecordResponse, RecordListResponse
from ..dependencies import AppContext, get_context, get_store
from ...core.display import can_export
from ...storage import RecordStore, parse_brightness

router = APIRouter()


@router.get("", response_model=RecordListResponse)
async def list_records(store: RecordStore = Depends(get_store)):
    """
    List records in insertion order.
    """
    records = store.snapshot()
    return RecordListResponse(
        records=[RecordResponse.from_record(r) for r in records],
        total=len(records),
        can_export=can_export(len(records)),
    )


@router.post("", response_model=RecordResponse, status_code=status.HTTP_201_CREATED)
def add_record(request: RecordCreate, context: AppContext = Depends(get_context)):
    """
    Record a brightness reading at the current location fix.

    Fails with 409 while no fix is available and with 422 when the
    brightness is not a finite number.
    """
    sample = context.authority.current_sample
    if sample is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No location fix available yet"
        )

    brightness = parse_brightness(str(request.brightness))

    with context.store_lock:
        record = context.store.add(brightness, sample)

    logger.info(f"Recorded brightness {brightness} as record {record.index}")
    return RecordResponse.from_record(record)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_records(context: AppContext = Depends(get_context)):
    """
    Delete all records. The next record starts again at index 1.
    """
    with context.store_lock:
        context.store.clear()
