"""Server-sent event encoding.

Each event is written as::

    event: <name>
    data: <line 1 of the JSON payload>
    data: <line 2 ...>
    <blank line>
"""

import json
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from llm_compare.entities import ModelEvent

logger = logging.getLogger(__name__)


def format_event(event: ModelEvent) -> str:
    """Encode one event block."""
    payload = json.dumps(event.data, ensure_ascii=False, default=str)
    lines = [f"event: {event.name}"]
    lines.extend(f"data: {line}" for line in payload.split("\n"))
    return "\n".join(lines) + "\n\n"


async def encode_events(events: AsyncIterator[ModelEvent]) -> AsyncIterator[str]:
    """Encode an event stream, degrading to ``done {ok: false}`` on failure.

    Headers are already sent once streaming starts, so a failure cannot
    change the HTTP status any more; it is reported in-band instead.
    """
    async with aclosing(events):
        try:
            async for event in events:
                yield format_event(event)
        except Exception as e:
            logger.exception("Event stream failed")
            yield format_event(ModelEvent.error(None, str(e) or e.__class__.__name__))
            yield format_event(ModelEvent.done(ok=False))
