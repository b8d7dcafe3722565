"""skirmish-signal - In-process notification bus for the round engine."""
from __future__ import annotations

from skirmish_signal.bus import ANY, Handler, SignalBus

__all__ = ["ANY", "Handler", "SignalBus"]
