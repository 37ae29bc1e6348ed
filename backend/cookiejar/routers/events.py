"""
Events router — server-sent change notifications.

GET /events
  Long-lived text/event-stream. Each open UI surface keeps one, passing
  its X-Client-Id so it is not told about its own changes. On any event
  the surface re-fetches everything it displays.

A comment line is sent every KEEPALIVE_SECONDS so idle connections are
not reaped and disconnects are noticed.
"""

import asyncio
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse

from cookiejar.core.dependencies import ClientId, Notifier
from cookiejar.services.notifier import ChangeNotifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Events"])

KEEPALIVE_SECONDS = 15.0


async def _event_stream(
    request: Request,
    notifier: ChangeNotifier,
    client_id: str | None,
) -> AsyncIterator[str]:
    async with notifier.subscription(client_id) as queue:
        yield ": connected\n\n"
        while not await request.is_disconnected():
            try:
                event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield event.to_sse()
    logger.debug("Event stream closed (client=%s)", client_id)


@router.get(
    "",
    summary="Stream change notifications",
    response_class=StreamingResponse,
)
async def stream_events(
    request: Request,
    notifier: Notifier,
    client_id: ClientId,
) -> StreamingResponse:
    return StreamingResponse(
        _event_stream(request, notifier, client_id),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
