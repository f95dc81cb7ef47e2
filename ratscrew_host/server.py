from __future__ import annotations

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

import websockets
from websockets.asyncio.server import ServerConnection, serve

from ratscrew.game import MatchEngine, outcome
from ratscrew.models import ActionType, MatchConfig, Outcome

LOGGER = logging.getLogger("ratscrew_host")

# HostServer glues the match engine to WebSocket clients.
# Every network concern lives here; the MatchEngine stays pure.


@dataclass
class ClientSession:
    session_id: str
    websocket: ServerConnection
    seat: Optional[int] = None


def slap_notification(seat_idx: int) -> str:
    return f"Player {seat_idx + 1} won the slap!"


class HostServer:
    def __init__(self, config: Optional[MatchConfig] = None) -> None:
        self.engine = MatchEngine(config)
        self.sessions: Dict[str, ClientSession] = {}
        self.spectators: Set[ServerConnection] = set()
        # Single serialisation point: every engine transition runs under this lock.
        self.lock = asyncio.Lock()
        # Outgoing state is read and sent under this lock so broadcasts arrive in transition order.
        self.send_lock = asyncio.Lock()

    async def start(self, host: str = "0.0.0.0", port: int = 3000) -> None:
        async with serve(self._handle_connection, host, port):
            LOGGER.info("Ratscrew host listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        # First message must be "hello" so we know whether this is a player.
        hello = await self._read_message(websocket)
        if hello is None or hello.get("type") != "hello":
            await self._send_error(websocket, code="BAD_HELLO", msg="Expected hello")
            await websocket.close()
            return
        role_raw = hello.get("role") or "player"
        role = role_raw.strip().casefold() if isinstance(role_raw, str) else "player"
        if role == "spectator":
            await self._handle_spectator_session(websocket)
            return

        session = await self._register(websocket)
        try:
            async for raw in websocket:
                await self._handle_message(session, self._decode(raw))
        except websockets.ConnectionClosed:
            pass
        finally:
            await self._unregister(session)

    async def _register(self, websocket: ServerConnection) -> ClientSession:
        session = ClientSession(session_id=uuid.uuid4().hex, websocket=websocket)
        async with self.lock:
            self.sessions[session.session_id] = session
            events = self.engine.join(session.session_id)
            session.seat = self.engine.seat_of(session.session_id)
        if session.seat is None:
            LOGGER.info("Session %s joined as observer (%s)", session.session_id, events[0].get("reason"))
        else:
            LOGGER.info("Seat %s claimed by session %s", session.seat, session.session_id)
        if any(event["ev"] == "DEAL" for event in events):
            LOGGER.info("Both seats filled; dealt a fresh deck")

        await self._send_json(websocket, "welcome", {"session_id": session.session_id, "seat": session.seat})
        await self._publish_state()
        return session

    async def _unregister(self, session: ClientSession) -> None:
        async with self.lock:
            self.sessions.pop(session.session_id, None)
            events = self.engine.leave(session.session_id)
        if outcome(events) is not Outcome.IGNORED:
            LOGGER.info("Seat %s (session %s) disconnected", session.seat, session.session_id)
        for event in events:
            if event["ev"] == "PILE_CLEARED":
                LOGGER.info("Fewer than two players seated; cleared %s pile cards", event["count"])
        await self._publish_state()

    async def _handle_spectator_session(self, websocket: ServerConnection) -> None:
        LOGGER.info("Spectator connected")
        async with self.send_lock:
            async with self.lock:
                self.spectators.add(websocket)
                state = self.engine.state_payload()
            await self._send_json(websocket, "state", state)
        try:
            async for _ in websocket:
                LOGGER.warning("Spectator sent a message; closing connection")
                await websocket.close(code=4403, reason="Spectators are read-only")
                break
        except websockets.ConnectionClosed:
            pass
        finally:
            async with self.lock:
                self.spectators.discard(websocket)
            LOGGER.info("Spectator disconnected")

    async def _handle_message(self, session: ClientSession, message: Dict[str, object]) -> None:
        msg_type = message.get("type")
        try:
            action = ActionType(msg_type.upper()) if isinstance(msg_type, str) else None
        except ValueError:
            action = None
        if action is None:
            await self._send_error(session.websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
            return
        await self._handle_action(session, action)

    async def _handle_action(self, session: ClientSession, action: ActionType) -> None:
        async with self.lock:
            if action == ActionType.PLAY:
                events = self.engine.play_session(session.session_id)
            else:
                events = self.engine.slap_session(session.session_id)

        result = outcome(events)
        if result is Outcome.IGNORED:
            LOGGER.debug(
                "Ignored %s from session %s reason=%s",
                action.value,
                session.session_id,
                events[0].get("reason"),
            )
            return

        LOGGER.debug("Applied %s session=%s events=%s", action.value, session.session_id, events)
        notification = None
        if result is Outcome.SLAP_WON:
            seat_idx = events[0]["seat"]
            LOGGER.info("Seat %s won the slap (%s)", seat_idx, events[0]["rule"])
            notification = slap_notification(seat_idx)
        await self._publish_state(notification)

    async def _publish_state(self, notification: Optional[str] = None) -> None:
        async with self.send_lock:
            if notification is not None:
                await self._broadcast("notification", {"msg": notification})
            async with self.lock:
                state = self.engine.state_payload()
            await self._broadcast("state", state)

    async def _broadcast(self, msg_type: str, payload: Dict[str, object]) -> None:
        async with self.lock:
            targets: List[ServerConnection] = [session.websocket for session in self.sessions.values()]
            targets.extend(self.spectators)
        if not targets:
            return
        message = self._envelope(msg_type, payload)
        await asyncio.gather(*(socket.send(message) for socket in targets), return_exceptions=True)

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body, ensure_ascii=False)

    async def _read_message(self, websocket: ServerConnection) -> Optional[Dict[str, object]]:
        try:
            raw = await asyncio.wait_for(websocket.recv(), timeout=5)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return self._decode(raw)

    def _decode(self, raw: object) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            return {}
        return message if isinstance(message, dict) else {}
