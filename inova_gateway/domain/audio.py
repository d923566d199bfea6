"""Speech exclusivity - at most one synthesis in flight per listener"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict

from inova_gateway.domain.exceptions import SpeechInterruptedError

logger = logging.getLogger(__name__)


class SpeechChannel:
    """
    Tracks the speech currently being produced for each listener key.

    Starting new speech for a key cancels the previous one, so a user never
    hears two answers at once.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, asyncio.Task] = {}

    async def speak(self, key: str, synthesize: Callable[[], Awaitable[bytes]]) -> bytes:
        """
        Run synthesize() as the current speech for key.

        Raises:
            SpeechInterruptedError: a newer speak() or stop() for the same key won
        """
        self.stop(key)

        task = asyncio.ensure_future(synthesize())
        self._tasks[key] = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled():
                raise SpeechInterruptedError(f"Speech for {key} was interrupted") from None
            raise
        finally:
            if self._tasks.get(key) is task:
                del self._tasks[key]

    def stop(self, key: str) -> bool:
        """Cancel in-flight speech for key; True if something was stopped"""
        task = self._tasks.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        logger.info("Speech stopped", extra={"listener": key})
        return True

    def stop_all(self) -> None:
        for key in list(self._tasks):
            self.stop(key)

    def is_playing(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()
