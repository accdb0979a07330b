"""Event-stream relay of upstream streaming completions."""
from __future__ import annotations

import codecs
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, Iterable, Iterator, List, Optional, Sequence

import httpx
from openai import APIStatusError, AsyncOpenAI, OpenAIError

from relay_shared import PromptMessage, Settings

from .generation import build_completion_payload

logger = logging.getLogger(__name__)

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
SSE_MEDIA_TYPE = "text/event-stream; charset=utf-8"

DONE_SENTINEL = "[DONE]"
UPSTREAM_STREAM_ERROR = "Error en streaming desde OpenAI"
SERVER_STREAM_ERROR = "Error en el servidor durante el streaming."


def data_frame(payload: str) -> str:
    return f"data: {payload}\n\n"


def done_frame() -> str:
    return f"event: done\ndata: {DONE_SENTINEL}\n\n"


def error_frame(message: str) -> str:
    return f"event: error\ndata: {json.dumps({'error': message}, ensure_ascii=False)}\n\n"


class LineDecoder:
    """Turn arbitrary byte chunks into complete text lines.

    Multi-byte UTF-8 sequences and lines may both be split across chunk
    boundaries; partial data is held until the next chunk or :meth:`flush`.
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes) -> List[str]:
        self._pending += self._decoder.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        return [line.rstrip("\r") for line in lines]

    def flush(self) -> List[str]:
        tail = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        tail = tail.rstrip("\r")
        return [tail] if tail else []


def frame_for_line(line: str) -> Optional[str]:
    """Re-emit one upstream line as a data frame.

    ``data:`` lines keep their payload; anything else is wrapped as a JSON
    string so no upstream text is dropped. Blank lines are event separators.
    """

    if not line.strip():
        return None
    if line.startswith("data:"):
        return data_frame(line[len("data:"):].lstrip())
    return data_frame(json.dumps(line, ensure_ascii=False))


def frames_for_lines(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        frame = frame_for_line(line)
        if frame is not None:
            yield frame


async def _caller_gone(is_disconnected: Optional[Callable[[], Awaitable[bool]]], forwarded: int) -> bool:
    if is_disconnected is not None and await is_disconnected():
        logger.info("client disconnected after %d frames, abandoning upstream stream", forwarded)
        return True
    return False


async def stream_completion(
    client: AsyncOpenAI,
    messages: Sequence[PromptMessage],
    *,
    settings: Settings,
    is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
) -> AsyncIterator[str]:
    """Yield event-stream frames for one upstream streaming completion.

    Ends with exactly one ``done`` or ``error`` event unless the caller goes
    away first, in which case it stops without writing anything further.
    """

    payload = build_completion_payload(settings, messages, stream=True)
    decoder = LineDecoder()
    forwarded = 0

    try:
        async with client.chat.completions.with_streaming_response.create(**payload) as response:
            async for chunk in response.iter_bytes():
                for frame in frames_for_lines(decoder.feed(chunk)):
                    if await _caller_gone(is_disconnected, forwarded):
                        return
                    forwarded += 1
                    yield frame
            for frame in frames_for_lines(decoder.flush()):
                if await _caller_gone(is_disconnected, forwarded):
                    return
                forwarded += 1
                yield frame
    except APIStatusError as exc:
        logger.error("OpenAI streaming error: %s %s", exc.status_code, exc.message)
        yield error_frame(UPSTREAM_STREAM_ERROR)
        return
    except (OpenAIError, httpx.HTTPError) as exc:
        logger.error("Streaming endpoint error after %d frames: %r", forwarded, exc)
        yield error_frame(SERVER_STREAM_ERROR)
        return
    except Exception:
        logger.exception("Unexpected streaming failure after %d frames", forwarded)
        yield error_frame(SERVER_STREAM_ERROR)
        return

    logger.info("stream completed", extra={"frames": forwarded})
    yield done_frame()
