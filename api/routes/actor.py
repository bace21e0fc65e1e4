"""WebSocket endpoint for the external actor.

On connect the actor is sent the startup, context and action registration
messages. After that it sends action messages and gets an action result
for each. The actor also hears about the privileged action being unlocked,
locked again by a reset, and every action going away at shutdown.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket

from api.channels import WebSocketChannel, frame_text
from api.dependencies import SessionDep
from models.actions import ActionBridge
from models.errors import ChannelClosedError, MalformedInputError
from models.messages import Message

logger = logging.getLogger(__name__)

router = APIRouter(tags=["actor"])


@router.websocket("/ws/actor")
async def actor_socket(websocket: WebSocket, session: SessionDep):
    """Serve the external actor's connection."""
    await websocket.accept()
    channel = WebSocketChannel(websocket)
    bridge = ActionBridge(session)
    pump = asyncio.create_task(channel.pump())

    def send(message: Message) -> None:
        try:
            channel.deliver(message.to_wire())
        except ChannelClosedError:
            logger.debug(f"Actor channel {channel.channel_id} closed; dropping {message.command}")

    def on_unlock() -> None:
        send(bridge.privileged_registration())

    def on_relock() -> None:
        send(bridge.privileged_unregistration())

    def on_shutdown() -> None:
        send(bridge.unregister_all())

    session.add_unlock_listener(on_unlock)
    session.add_relock_listener(on_relock)
    session.add_shutdown_listener(on_shutdown)
    logger.info(f"Actor connected on channel {channel.channel_id}")

    try:
        for message in bridge.handshake_messages():
            send(message)

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            try:
                raw = frame_text(frame)
            except MalformedInputError as e:
                logger.error(f"Dropping actor frame: {e}")
                continue

            result = bridge.handle_frame(raw)
            if result is not None:
                send(result)
    finally:
        session.remove_unlock_listener(on_unlock)
        session.remove_relock_listener(on_relock)
        session.remove_shutdown_listener(on_shutdown)
        channel.close()
        await pump
        logger.info(f"Actor on channel {channel.channel_id} disconnected")
