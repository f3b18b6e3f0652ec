"""Usage metering for billable extractions."""
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class UsageStore(Protocol):
    async def increment_daily_actions(self, user_id: int) -> None:
        ...


class UsageMeter:
    """Records one action per successful extraction.

    Daily reset of the counter is owned by whatever job manages the users
    table; the meter only ever increments.
    """

    def __init__(self, store: UsageStore):
        self.store = store

    async def increment(self, user_id: int) -> bool:
        """
        Add one unit of usage for a user.

        Failures are logged and swallowed so they never fail a request
        that already produced an intent.

        Returns:
            True if the store acknowledged the increment
        """
        try:
            await self.store.increment_daily_actions(user_id)
        except Exception as e:
            logger.error(f"Failed to update usage stats for user_id={user_id}: {e}", exc_info=True)
            return False
        logger.debug("Usage recorded for user_id=%s", user_id)
        return True
