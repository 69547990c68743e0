import asyncio
import logging
from datetime import timedelta
from typing import Callable, Coroutine, List, Union

from ..utils.date_utils import format_duration, parse_duration

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Runs async jobs periodically: once right away, then after every interval.
    """

    def __init__(self):
        self.tasks: List[asyncio.Task] = []

    async def _run_periodically(self, interval: timedelta, job_func: Callable[[], Coroutine]):
        name = job_func.__name__
        try:
            while True:
                try:
                    await job_func()
                except Exception as e:
                    logger.error(f"Scheduled job '{name}' failed: {e}", exc_info=True)
                logger.debug(f"Next run of '{name}' in {format_duration(interval)}.")
                await asyncio.sleep(interval.total_seconds())
        except asyncio.CancelledError:
            logger.info(f"Job '{name}' cancelled.")
            raise

    def add_job(self, job_func: Callable[[], Coroutine], interval: Union[str, timedelta]) -> asyncio.Task:
        """
        Schedules job_func every interval, given as a timedelta or a duration
        string like '30s', '10m' or '1h'.

        Raises:
            ValueError: If the interval is malformed or not positive.
        """
        period = parse_duration(interval)
        if period <= timedelta(0):
            raise ValueError(f"Invalid interval: '{interval}'. It must be greater than zero.")

        task = asyncio.create_task(self._run_periodically(period, job_func))
        self.tasks.append(task)
        logger.info(f"Scheduled job '{job_func.__name__}' every {format_duration(period)}.")
        return task

    async def stop(self):
        """Cancels all scheduled jobs and waits for them to finish."""
        for task in self.tasks:
            task.cancel()
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks.clear()
