"""Application services sitting between the façade and the transports."""

from __future__ import annotations

from .background import BackgroundLoop
from .dispatcher import DoneCallback, ErrorListener, TransportDispatcher

__all__ = ["BackgroundLoop", "DoneCallback", "ErrorListener", "TransportDispatcher"]
