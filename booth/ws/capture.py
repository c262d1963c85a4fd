"""WebSocket handler for capture sessions.

Client sends:
  {"type": "frame", "data": "<base64 JPEG>"}   (live preview, latest wins)
  {"type": "start"}                             (run countdown + burst)
  {"type": "cancel"}                            (abandon the running session)
  {"type": "ping"}

Server responds with sequencer events:
  {"phase": "countdown", "payload": {"remaining": 5}}
  {"phase": "capturing" | "captured", "payload": {"index": 1, "total": 3}}
  {"phase": "pausing", "payload": {"next_index": 2}}
  {"phase": "done", "payload": {...}, "frames": [...]}
  {"phase": "error", "payload": {"reason": ...}, "message": "..."}
"""

import asyncio
import base64
import binascii
import json
import logging
from typing import AsyncIterator

from fastapi import WebSocket, WebSocketDisconnect

from booth.capture.events import SequencerEvent
from booth.capture.sequencer import CaptureSequencer
from booth.capture.source import FrameBufferSource
from booth.services.auth_service import AuthError, verify_token

logger = logging.getLogger(__name__)


async def _stream_events(ws: WebSocket, events: AsyncIterator[SequencerEvent]) -> None:
    try:
        async for event in events:
            await ws.send_json(event.to_dict())
    except (WebSocketDisconnect, RuntimeError) as e:
        # Socket went away mid-session; the receive loop cleans up
        logger.info("Capture stream stopped: %s", e)
    finally:
        await events.aclose()


async def websocket_capture(ws: WebSocket, token: str | None = None):
    """WebSocket endpoint driving one booth page's camera."""
    if not token:
        await ws.close(code=4001, reason="Missing token")
        return

    try:
        claims = verify_token(token)
    except AuthError:
        await ws.close(code=4001, reason="Invalid token")
        return

    await ws.accept()
    logger.info("Capture socket opened for device %s", claims.device_id)

    source = FrameBufferSource()
    source.open()
    sequencer = CaptureSequencer()
    tasks: set[asyncio.Task] = set()

    try:
        while True:
            data = await ws.receive_text()
            try:
                msg = json.loads(data)
            except json.JSONDecodeError:
                await ws.send_json({"type": "error", "message": "Invalid JSON"})
                continue

            msg_type = msg.get("type", "")

            if msg_type == "frame":
                try:
                    source.push(base64.b64decode(msg.get("data", ""), validate=True))
                except (binascii.Error, ValueError) as e:
                    await ws.send_json({"type": "error", "message": f"Bad frame: {e}"})

            elif msg_type == "start":
                # Ignored by the sequencer while a session is running
                events = sequencer.start(source)
                task = asyncio.create_task(_stream_events(ws, events))
                tasks.add(task)
                task.add_done_callback(tasks.discard)

            elif msg_type == "cancel":
                sequencer.cancel()

            elif msg_type == "ping":
                await ws.send_json({"type": "pong"})

            else:
                await ws.send_json({"type": "error", "message": f"Unknown type: {msg_type}"})
    except WebSocketDisconnect:
        logger.info("Capture socket closed for device %s", claims.device_id)
    finally:
        sequencer.cancel()
        for task in list(tasks):
            task.cancel()
        source.release()
