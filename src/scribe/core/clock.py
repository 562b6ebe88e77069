"""Time source for the write watchdog."""

import asyncio
from typing import Protocol


class Clock(Protocol):
    """Monotonic milliseconds plus a matching sleep."""

    def now_ms(self) -> float:
        ...

    async def sleep_ms(self, ms: float) -> None:
        ...


class LoopClock:
    """Clock backed by the running event loop's monotonic time."""

    def now_ms(self) -> float:
        return asyncio.get_running_loop().time() * 1000

    async def sleep_ms(self, ms: float) -> None:
        await asyncio.sleep(ms / 1000)
