"""WebSocket endpoint for viewers of the shared terminal.

A viewer receives the whole transcript once as a transfer-state message,
then every new event live. It may type command lines, which run against
the shared session like anyone else's.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket

from api.channels import WebSocketChannel, frame_text
from api.dependencies import SessionDep
from models.errors import MalformedInputError, ProtocolViolationError
from models.messages import decode_viewer_message

logger = logging.getLogger(__name__)

router = APIRouter(tags=["viewer"])


@router.websocket("/ws")
async def viewer_socket(websocket: WebSocket, session: SessionDep):
    """Serve one viewer connection.

    Malformed frames and frames with an unexpected command are logged and
    dropped; the connection stays open.
    """
    await websocket.accept()
    channel = WebSocketChannel(websocket)
    session.join(channel)
    pump = asyncio.create_task(channel.pump())

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            try:
                message = decode_viewer_message(frame_text(frame))
            except MalformedInputError as e:
                logger.warning(f"Malformed frame from viewer {channel.channel_id}: {e}")
                continue
            except ProtocolViolationError as e:
                logger.warning(f"Protocol violation from viewer {channel.channel_id}: {e}")
                continue

            session.submit(message.msg)
    finally:
        session.leave(channel)
        channel.close()
        await pump
