"""Server-Sent Events framing."""

from __future__ import annotations

from dataclasses import dataclass

CONNECTED = "connected"
MESSAGE = "message"
DONE = "done"
ERROR = "error"

CONNECTED_PAYLOAD = '{"status":"connected"}'
STREAM_COMPLETE = "Stream complete"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@dataclass(frozen=True, slots=True)
class SSEEvent:
    event: str
    data: str

    def encode(self) -> str:
        """Render as `event:`/`data:` lines terminated by a blank line.

        Each line of the payload gets its own `data:` field, which the client
        rejoins with newlines.
        """
        text = self.data.replace("\r\n", "\n").replace("\r", "\n")
        lines = "".join(f"data: {line}\n" for line in text.split("\n"))
        return f"event: {self.event}\n{lines}\n"
