"""Server-sent-event framing for streamed chat chunks."""

from __future__ import annotations

from typing import AsyncIterable, AsyncIterator

from autopilot.chat.agent import StreamChunk

DONE_SENTINEL = "data: [DONE]\n\n"


async def encode_sse(chunks: AsyncIterable[StreamChunk]) -> AsyncIterator[str]:
    """Frame each chunk as ``data: <json>``; always end with the sentinel."""
    async for chunk in chunks:
        yield f"data: {chunk.model_dump_json(exclude_none=True)}\n\n"
        if chunk.type == "error":
            break
    yield DONE_SENTINEL
