#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

from websockets.asyncio.client import connect

logging.basicConfig(level=logging.INFO)

LOGGER = logging.getLogger("eval_client")

# One-shot client: send a single evaluation request and print the reply.


def build_request(args: argparse.Namespace) -> Dict[str, Any]:
    if args.compare:
        return {"type": "compare", "hands": [hand.split(",") for hand in args.compare]}
    if args.hole is not None:
        request: Dict[str, Any] = {
            "type": "best",
            "hole": args.hole.split(","),
            "community": args.community.split(",") if args.community else [],
        }
        if args.variant:
            request["variant"] = args.variant
        return request
    msg_type = "categorize" if args.categorize else "best"
    return {"type": msg_type, "cards": list(args.cards)}


def format_hand(hand: Optional[Dict[str, Any]]) -> str:
    if hand is None:
        return "no valid hand"
    return f"{hand['category']}: {' '.join(hand['cards'])}"


async def run(url: str, request: Dict[str, Any]) -> Dict[str, Any]:
    async with connect(url) as ws:
        await ws.send(json.dumps({"v": 1, **request}))
        return json.loads(await ws.recv())


def report(reply: Dict[str, Any]) -> int:
    msg_type = reply.get("type")
    if msg_type == "error":
        LOGGER.error("%s: %s", reply.get("code"), reply.get("msg"))
        return 1
    if msg_type == "hand":
        print(format_hand(reply.get("hand")))
    elif msg_type == "comparison":
        for idx, hand in enumerate(reply.get("hands", [])):
            marker = "*" if idx in reply.get("winners", []) else " "
            print(f"{marker} [{idx}] {format_hand(hand)}")
    else:
        print(json.dumps(reply, indent=2))
    return 0


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Poker hand evaluation client")
    parser.add_argument("--url", default="ws://127.0.0.1:8765")
    parser.add_argument("cards", nargs="*", help="Card labels such as Ah Kd Tc")
    parser.add_argument("--categorize", action="store_true", help="Categorize exactly five cards")
    parser.add_argument("--hole", help="Comma separated hole cards, e.g. Ah,Kd")
    parser.add_argument("--community", help="Comma separated community cards")
    parser.add_argument("--variant", choices=["holdem", "omaha", "pool"])
    parser.add_argument(
        "--compare",
        action="append",
        metavar="CARDS",
        help="Comma separated pool to compare; repeat for each player",
    )
    args = parser.parse_args(argv)
    if not args.cards and args.hole is None and not args.compare:
        parser.error("provide cards, --hole/--community or --compare")
    if args.cards and (args.hole is not None or args.compare):
        parser.error("positional cards cannot be combined with --hole or --compare")
    if args.categorize and (len(args.cards) != 5 or args.hole is not None or args.compare):
        parser.error("--categorize takes exactly 5 positional cards")
    if args.variant and args.hole is None:
        parser.error("--variant only applies with --hole/--community")
    if args.community and args.hole is None:
        parser.error("--community requires --hole")
    return args


def main(argv: list[str]) -> None:
    args = parse_args(argv)
    try:
        reply = asyncio.run(run(args.url, build_request(args)))
    except OSError as exc:
        LOGGER.error("Could not reach %s: %s", args.url, exc)
        sys.exit(2)
    sys.exit(report(reply))


if __name__ == "__main__":
    main(sys.argv[1:])
