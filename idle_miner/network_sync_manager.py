import logging
from asyncio import Lock


class NetworkSyncManager:
    """Single-writer guard for network steps inside one server process.

    Two steps computed from the same snapshot would both bump work_height from
    the same value; the lock makes each step read the state the previous one
    wrote. Across processes the version compare-and-swap in the store rejects
    the loser.
    """

    def __init__(self):
        self.lock = Lock()
        self.steps_applied = 0

    async def __aenter__(self):
        await self.lock.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.steps_applied += 1
        else:
            logging.warning(f"Network step failed: {exc}")
        self.lock.release()
        return False

    def is_stepping(self) -> bool:
        """Check whether a step is in progress

        Returns:
            bool: True while a step holds the lock
        """
        return self.lock.locked()
