from __future__ import annotations

from typing import Protocol


class Connection(Protocol):
    """Persistent client connection the chat core can push text frames to."""

    async def send_text(self, data: str) -> None: ...
