"""Evaluation server package: exposes the hand evaluator over WebSockets."""

from .server import EvalServer, EvalServerError

__all__ = ["EvalServer", "EvalServerError"]
