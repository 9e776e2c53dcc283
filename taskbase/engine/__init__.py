"""Adapters for the external query engine."""

from __future__ import annotations

from .base import INITIALIZED, UPDATE, Engine, EventSource, Subscription
from .command import CommandEngine

__all__ = [
    "INITIALIZED",
    "UPDATE",
    "CommandEngine",
    "Engine",
    "EventSource",
    "Subscription",
]
