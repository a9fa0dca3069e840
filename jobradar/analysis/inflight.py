"""Process-local registry of analyses currently being computed."""

import asyncio


class InFlightRegistry:
    """Maps a fingerprint to the future of the computation running for it.

    Entries are released with an identity check so a settling computation
    never removes a newer registration for the same key.
    """

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Future] = {}

    def get(self, key: str) -> asyncio.Future | None:
        return self._pending.get(key)

    def register(self, key: str, future: asyncio.Future) -> None:
        self._pending[key] = future

    def release(self, key: str, future: asyncio.Future) -> None:
        if self._pending.get(key) is future:
            del self._pending[key]

    def __contains__(self, key: str) -> bool:
        return key in self._pending

    def __len__(self) -> int:
        return len(self._pending)
