from __future__ import annotations

import asyncio
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Dict, List, Optional, Tuple

import websockets
from websockets.asyncio.server import ServerConnection, serve
from websockets.http11 import Request, Response

from handeval.cards import Card, cards_to_labels, find_duplicates, parse_cards
from handeval.evaluator import best_hand, best_hand_for_variant, evaluate_five, winners
from handeval.models import HAND_SIZE, Hand, ServiceConfig, Variant

LOGGER = logging.getLogger("hand_eval_server")

# EvalServer puts the evaluator behind a JSON-over-WebSocket protocol.
# Parsing and validation happen here; handeval only ever sees Card objects.


class EvalServerError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


def hand_payload(hand: Optional[Hand]) -> Optional[Dict[str, object]]:
    if hand is None:
        return None
    return {
        "category": hand.category.label,
        "rank": int(hand.category),
        "cards": hand.labels,
    }


class EvalServer:
    def __init__(self, config: ServiceConfig) -> None:
        self.config = config
        self.executor: Optional[ThreadPoolExecutor] = None
        if config.max_workers > 0:
            self.executor = ThreadPoolExecutor(max_workers=config.max_workers)

    async def start(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        if host is None:
            host = self.config.host
        if port is None:
            port = self.config.port
        try:
            async with serve(self._handle_connection, host, port, process_request=_process_request):
                LOGGER.info(
                    "Evaluation server listening on %s:%s (variant=%s, max_pool=%s)",
                    host,
                    port,
                    self.config.variant.value,
                    self.config.max_pool_size,
                )
                await asyncio.Future()
        finally:
            if self.executor is not None:
                self.executor.shutdown(wait=False)

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        peer = getattr(websocket, "remote_address", None)
        LOGGER.info("Client connected from %s", peer)
        try:
            async for raw in websocket:
                await self._handle_message(websocket, raw)
        except websockets.ConnectionClosed:
            pass
        finally:
            LOGGER.info("Client %s disconnected", peer)

    async def _handle_message(self, websocket: ServerConnection, raw: Any) -> None:
        try:
            message = self._decode(raw)
            if self.executor is None:
                msg_type, payload = self.evaluate_request(message)
            else:
                loop = asyncio.get_running_loop()
                msg_type, payload = await loop.run_in_executor(self.executor, self.evaluate_request, message)
        except EvalServerError as exc:
            LOGGER.warning("Rejected request: %s (%s)", exc.code, exc.msg)
            await self._send_error(websocket, code=exc.code, msg=exc.msg)
            return
        await self._send_json(websocket, msg_type, payload)

    def evaluate_request(self, message: Dict[str, object]) -> Tuple[str, Dict[str, object]]:
        msg_type = message.get("type")
        if msg_type == "ping":
            return "pong", {}
        if msg_type == "categorize":
            cards = self._cards_field(message, "cards")
            if len(cards) != HAND_SIZE:
                raise EvalServerError("BAD_SCHEMA", f"categorize needs exactly {HAND_SIZE} cards")
            return "hand", {"hand": hand_payload(evaluate_five(cards))}
        if msg_type == "best":
            return "hand", self._best_payload(message)
        if msg_type == "compare":
            return "comparison", self._compare_payload(message)
        raise EvalServerError("UNKNOWN_TYPE", "Unsupported message type")

    def _best_payload(self, message: Dict[str, object]) -> Dict[str, object]:
        if "hole" in message:
            variant = self._variant(message)
            hole = self._cards_field(message, "hole")
            community = self._cards_field(message, "community", required=False)
            self._check_pool(hole + community)
            hand = best_hand_for_variant(variant, hole, community)
            return {"variant": variant.value, "hand": hand_payload(hand)}
        cards = self._cards_field(message, "cards")
        return {"variant": Variant.POOL.value, "hand": hand_payload(best_hand(cards))}

    def _compare_payload(self, message: Dict[str, object]) -> Dict[str, object]:
        pools = message.get("hands")
        if not isinstance(pools, list) or not pools:
            raise EvalServerError("BAD_SCHEMA", "hands must be a non-empty list")
        if len(pools) > self.config.max_compare_hands:
            raise EvalServerError(
                "POOL_TOO_LARGE",
                f"At most {self.config.max_compare_hands} hands per compare request",
            )
        hands = [best_hand(self._parse_pool(pool, "hands")) for pool in pools]
        return {
            "hands": [hand_payload(hand) for hand in hands],
            "winners": winners(hands),
        }

    def _variant(self, message: Dict[str, object]) -> Variant:
        raw = message.get("variant")
        if raw is None:
            return self.config.variant
        try:
            return Variant(str(raw).strip().casefold())
        except ValueError:
            raise EvalServerError("UNKNOWN_VARIANT", f"Unknown variant {raw!r}") from None

    def _cards_field(self, message: Dict[str, object], field: str, required: bool = True) -> List[Card]:
        if field not in message:
            if required:
                raise EvalServerError("BAD_SCHEMA", f"{field} required")
            return []
        return self._parse_pool(message[field], field)

    def _parse_pool(self, value: object, field: str) -> List[Card]:
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise EvalServerError("BAD_SCHEMA", f"{field} must be a list of card labels")
        try:
            cards = parse_cards(value)
        except ValueError as exc:
            raise EvalServerError("BAD_CARD", str(exc)) from exc
        self._check_pool(cards)
        return cards

    def _check_pool(self, cards: List[Card]) -> None:
        if len(cards) > self.config.max_pool_size:
            raise EvalServerError(
                "POOL_TOO_LARGE",
                f"At most {self.config.max_pool_size} cards per pool",
            )
        duplicates = find_duplicates(cards)
        if duplicates:
            raise EvalServerError("DUPLICATE_CARD", " ".join(cards_to_labels(duplicates)))

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body: Dict[str, object] = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    def _decode(self, raw: Any) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            raise EvalServerError("BAD_JSON", "Message is not valid JSON") from None
        if not isinstance(message, dict):
            raise EvalServerError("BAD_SCHEMA", "Message must be a JSON object")
        return message


def _process_request(connection: ServerConnection, request: Request) -> Optional[Response]:
    """Answer plain HTTP health checks; let WebSocket upgrades through."""

    if request.headers.get("Upgrade", "").lower() == "websocket":
        return None
    if request.path in {"/health", "/healthz"}:
        return connection.respond(HTTPStatus.OK, "evaluation server running\n")
    return connection.respond(HTTPStatus.NOT_FOUND, "not found\n")
