import asyncio
import json
from http import HTTPStatus
from types import SimpleNamespace

import pytest

from evalserver.server import EvalServer, EvalServerError, _process_request, hand_payload
from handeval.models import ServiceConfig, Variant

from .helpers import hand


# Fake sockets so we can exercise the request path without opening real connections.
class DummyWebSocket:
    def __init__(self) -> None:
        self.sent: list[str] = []

    async def send(self, message: str) -> None:
        self.sent.append(message)


class DummyConnection:
    def respond(self, status, text):
        return SimpleNamespace(status_code=status, body=text)


def roundtrip(server: EvalServer, message) -> dict:
    websocket = DummyWebSocket()
    raw = message if isinstance(message, str) else json.dumps(message)
    asyncio.run(server._handle_message(websocket, raw))
    assert len(websocket.sent) == 1
    return json.loads(websocket.sent[0])


def make_server(**overrides) -> EvalServer:
    return EvalServer(ServiceConfig(**overrides))


def test_categorize_returns_category_and_significance_order():
    reply = roundtrip(make_server(), {"type": "categorize", "cards": ["Jh", "Th", "Ah", "Kh", "Qh"]})
    assert reply["type"] == "hand"
    assert reply["v"] == 1
    assert reply["hand"] == {
        "category": "royal_flush",
        "rank": 9,
        "cards": ["Ah", "Kh", "Qh", "Jh", "Th"],
    }


def test_best_over_plain_pool():
    reply = roundtrip(make_server(), {"type": "best", "cards": ["Jh", "Th", "Ah", "Qs", "Kc", "2d", "3c"]})
    assert reply["variant"] == "pool"
    assert reply["hand"]["category"] == "straight"
    assert reply["hand"]["cards"] == ["Ah", "Kc", "Qs", "Jh", "Th"]


def test_best_uses_configured_variant_for_hole_cards():
    message = {"type": "best", "hole": ["Ah", "Kd", "Qs", "Ts"], "community": ["2h", "5h", "9h", "Jh", "3c"]}
    omaha = roundtrip(make_server(variant=Variant.OMAHA), message)
    assert omaha["variant"] == "omaha"
    assert omaha["hand"]["category"] == "high_card"

    holdem = roundtrip(make_server(variant=Variant.OMAHA), {**message, "variant": "HoldEm"})
    assert holdem["variant"] == "holdem"
    assert holdem["hand"]["category"] == "flush"


def test_best_without_enough_cards_returns_null_hand():
    reply = roundtrip(make_server(), {"type": "best", "hole": ["Ah", "Ad"], "community": ["Kc", "7d"]})
    assert reply["type"] == "hand"
    assert reply["hand"] is None


def test_compare_reports_split_pots():
    board = ["2c", "7d", "9h", "Js", "Kd"]
    reply = roundtrip(
        make_server(),
        {
            "type": "compare",
            "hands": [
                ["Ah", "Qh"] + board,
                ["As", "Qs"] + board,
                ["3h", "4h"] + board,
                ["Ah"],
            ],
        },
    )
    assert reply["type"] == "comparison"
    assert reply["winners"] == [0, 1]
    assert reply["hands"][0]["category"] == "high_card"
    assert reply["hands"][3] is None


def test_requests_run_on_worker_pool_when_configured():
    server = make_server(max_workers=2)
    try:
        reply = roundtrip(server, {"type": "categorize", "cards": ["Ah", "4c", "5s", "3h", "2h"]})
    finally:
        assert server.executor is not None
        server.executor.shutdown(wait=True)
    assert reply["hand"]["category"] == "straight"
    assert reply["hand"]["cards"] == ["5s", "4c", "3h", "2h", "Ah"]


def test_ping():
    assert roundtrip(make_server(), {"type": "ping"})["type"] == "pong"


@pytest.mark.parametrize(
    "message, code",
    [
        ("not json", "BAD_JSON"),
        ("[1, 2]", "BAD_SCHEMA"),
        ({"type": "shuffle"}, "UNKNOWN_TYPE"),
        ({"type": "categorize"}, "BAD_SCHEMA"),
        ({"type": "categorize", "cards": "Ah Kh Qh Jh Th"}, "BAD_SCHEMA"),
        ({"type": "categorize", "cards": ["Ah", "Kh", "Qh", "Jh"]}, "BAD_SCHEMA"),
        ({"type": "categorize", "cards": ["Ah", "Kh", "Qh", "Jh", "1h"]}, "BAD_CARD"),
        ({"type": "best", "cards": ["Ah", "Ah", "Qh", "Jh", "Th"]}, "DUPLICATE_CARD"),
        ({"type": "best", "hole": ["Ah", "Kd"], "community": ["Ah", "2c", "3c"]}, "DUPLICATE_CARD"),
        ({"type": "best", "hole": ["Ah", "Kd"], "variant": "razz"}, "UNKNOWN_VARIANT"),
        ({"type": "compare", "hands": []}, "BAD_SCHEMA"),
    ],
)
def test_bad_requests_get_error_replies(message, code):
    reply = roundtrip(make_server(), message)
    assert reply["type"] == "error"
    assert reply["code"] == code


def test_pool_size_is_capped():
    server = make_server(max_pool_size=6)
    reply = roundtrip(server, {"type": "best", "cards": ["Ah", "Kh", "Qh", "Jh", "Th", "9h", "8h"]})
    assert reply["code"] == "POOL_TOO_LARGE"

    with pytest.raises(EvalServerError) as excinfo:
        server.evaluate_request({"type": "best", "hole": ["Ah", "Kh", "Qh"], "community": ["Jh", "Th", "9h", "8h"]})
    assert excinfo.value.code == "POOL_TOO_LARGE"


def test_compare_caps_number_of_hands():
    server = make_server(max_pool_size=7, max_compare_hands=3)
    pool = ["Ah", "Kd", "Qs", "Jc", "9h", "2d", "3c"]

    reply = roundtrip(server, {"type": "compare", "hands": [pool] * 500})
    assert reply["type"] == "error"
    assert reply["code"] == "POOL_TOO_LARGE"

    reply = roundtrip(server, {"type": "compare", "hands": [pool] * 3})
    assert reply["type"] == "comparison"
    assert reply["winners"] == [0, 1, 2]


class StopServing(Exception):
    pass


def test_start_keeps_explicit_ephemeral_port(monkeypatch):
    calls: list[tuple] = []

    class RecordingServe:
        def __init__(self, *args, **kwargs) -> None:
            calls.append(args)

        async def __aenter__(self):
            raise StopServing

        async def __aexit__(self, *exc_info):
            return False

    monkeypatch.setattr("evalserver.server.serve", RecordingServe)
    server = make_server(host="10.0.0.1", port=9000)

    with pytest.raises(StopServing):
        asyncio.run(server.start(host="", port=0))
    assert calls[-1][1:] == ("", 0)

    with pytest.raises(StopServing):
        asyncio.run(server.start())
    assert calls[-1][1:] == ("10.0.0.1", 9000)


def test_hand_payload_handles_missing_hand():
    assert hand_payload(None) is None
    assert hand_payload(hand("2d Jh 2c 2s 2h"))["cards"] == ["2d", "2c", "2s", "2h", "Jh"]


@pytest.mark.parametrize(
    "path, upgrade, status",
    [
        ("/health", "", HTTPStatus.OK),
        ("/healthz", "", HTTPStatus.OK),
        ("/metrics", "", HTTPStatus.NOT_FOUND),
    ],
)
def test_process_request_answers_health_checks(path, upgrade, status):
    request = SimpleNamespace(path=path, headers={"Upgrade": upgrade})
    response = _process_request(DummyConnection(), request)
    assert response.status_code == status


def test_process_request_lets_websocket_upgrades_through():
    request = SimpleNamespace(path="/", headers={"Upgrade": "websocket"})
    assert _process_request(DummyConnection(), request) is None
