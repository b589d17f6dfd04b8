"""
Observability hooks for the analysis pipeline.

Analysis functions never write to the console. They accept an optional
`on_event(name, payload)` callback instead; `log_event` is the callback
the CLI and server pass to route those events to the `pitchcoach` logger.
"""

import logging
from typing import Any, Callable, Dict, Optional

EventSink = Callable[[str, Dict[str, Any]], None]

logger = logging.getLogger(name="pitchcoach")

WARNING_EVENTS = {"amplified", "insufficient_pitch"}


def emit(on_event: Optional[EventSink], name: str, **payload: Any) -> None:
    """Forward an event to the sink when one is given."""
    if on_event is not None:
        on_event(name, payload)


def log_event(name: str, payload: Dict[str, Any]) -> None:
    level = logging.WARNING if name in WARNING_EVENTS else logging.INFO
    logger.log(level, "%s: %s", name, payload)
