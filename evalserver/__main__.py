import argparse
import asyncio
import logging

from handeval.models import ServiceConfig, Variant
from .server import EvalServer

logging.basicConfig(level=logging.INFO)


def main() -> None:
    parser = argparse.ArgumentParser(description="Poker hand evaluation server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument(
        "--variant",
        choices=[variant.value for variant in Variant],
        default=Variant.HOLDEM.value,
        help="Hole-card rule applied to 'best' requests that send hole + community cards",
    )
    parser.add_argument(
        "--max-pool-size",
        type=int,
        default=12,
        help="Largest card pool accepted per request (evaluation cost grows as C(n, 5))",
    )
    parser.add_argument(
        "--max-compare-hands",
        type=int,
        default=10,
        help="Most pools a single compare request may carry",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=0,
        help="Evaluate requests on a thread pool of this size (0 evaluates inline)",
    )
    args = parser.parse_args()

    if args.max_pool_size < 5:
        parser.error("--max-pool-size must be at least 5")
    if args.max_compare_hands < 1:
        parser.error("--max-compare-hands must be at least 1")

    config = ServiceConfig(
        host=args.host,
        port=args.port,
        variant=Variant(args.variant),
        max_pool_size=args.max_pool_size,
        max_compare_hands=args.max_compare_hands,
        max_workers=max(args.workers, 0),
    )

    server = EvalServer(config)
    asyncio.run(server.start())


if __name__ == "__main__":
    main()
