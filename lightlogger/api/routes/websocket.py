"""
WebSocket Routes

Live location state and record list updates via WebSocket.
"""

import asyncio
from typing import Any, Dict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from ..models import LocationStateResponse, RecordResponse
from ...core.display import can_export

router = APIRouter()


def _location_message(state) -> Dict[str, Any]:
    return {
        'type': 'location',
        'state': LocationStateResponse.from_state(state).model_dump(mode='json'),
    }


def _records_message(records) -> Dict[str, Any]:
    return {
        'type': 'records',
        'total': len(records),
        'can_export': can_export(len(records)),
        'records': [RecordResponse.from_record(r).model_dump(mode='json') for r in records],
    }


@router.websocket("/state")
async def state_websocket(websocket: WebSocket):
    """
    WebSocket endpoint streaming observable state.

    On connect the current location state and record list are sent, then
    one message per change.

    Messages sent:
    - type: "location" - Full location state
    - type: "records" - Full record list
    """
    context = websocket.app.state.context
    await websocket.accept()
    logger.debug("State WebSocket connected")

    loop = asyncio.get_running_loop()
    updates: asyncio.Queue = asyncio.Queue()

    def enqueue(message: Dict[str, Any]) -> None:
        loop.call_soon_threadsafe(updates.put_nowait, message)

    unsubscribers = [
        context.authority.subscribe(lambda state: enqueue(_location_message(state))),
        context.store.subscribe(lambda records: enqueue(_records_message(records))),
    ]

    async def send_updates():
        while True:
            message = await updates.get()
            await websocket.send_json(message)

    sender = asyncio.create_task(send_updates())
    try:
        # Client messages are ignored; receiving detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("State WebSocket disconnected")
    finally:
        for unsubscribe in unsubscribers:
            unsubscribe()
        sender.cancel()
        await asyncio.gather(sender, return_exceptions=True)
