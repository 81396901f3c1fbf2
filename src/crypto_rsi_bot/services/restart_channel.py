"""Single-slot restart request channel between the command handlers and the scanner."""
import asyncio
import logging

logger = logging.getLogger(__name__)


class RestartChannel:
    """
    Holds at most one pending "restart the scan cycle" request.

    Setters never block: a request made while one is already pending is
    dropped. Only the scanner consumes requests.
    """

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=1)

    def request_restart(self) -> bool:
        """
        Ask the scanner to abandon the current cycle.

        Returns:
            False if a request was already pending
        """
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            return False
        logger.info("Scan cycle restart requested")
        return True

    def consume(self) -> bool:
        """Take the pending request, if any."""
        try:
            self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return False
        return True

    @property
    def pending(self) -> bool:
        return not self._queue.empty()
