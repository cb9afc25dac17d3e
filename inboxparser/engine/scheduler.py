"""Background scheduling of language-model enhancements.

The scheduler is an explicit object owned by the composition root (the
FastAPI lifespan): it is started and stopped there and handed to whoever
needs it, never reached through module state.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import date
from typing import Optional

from inboxparser.engine.pipeline import CapturePipeline, EnhancementCallback, ParserConfig
from inboxparser.models.parsed import ParsedResult

logger = logging.getLogger(__name__)

DEFAULT_ENHANCEMENT_WORKERS = 2


class SchedulerStoppedError(RuntimeError):
    """Work was submitted to a scheduler that is not running."""


class EnhancementScheduler:
    """Runs enhance() calls off the request path. Failed attempts are not retried.

    Args:
        config: ParserConfig; enhancements are skipped when enable_llm is off
        max_workers: Size of the worker pool
    """

    def __init__(self, config: Optional[ParserConfig] = None, max_workers: int = DEFAULT_ENHANCEMENT_WORKERS):
        self.config = config or ParserConfig()
        self.max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._executor is not None

    def start(self) -> None:
        with self._lock:
            if self._executor is not None:
                return
            self._executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="enhance")
            logger.info(f"Enhancement scheduler started with {self.max_workers} workers")

    def stop(self, wait: bool = True) -> None:
        """Stop accepting work. With wait=True, in-flight enhancements finish first."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait, cancel_futures=True)
            logger.info("Enhancement scheduler stopped")

    def submit(
        self,
        pipeline: CapturePipeline,
        text: str,
        prior: ParsedResult,
        callback: EnhancementCallback,
        today: Optional[date] = None,
    ) -> Optional[Future]:
        """Queue one enhancement.

        Returns:
            Future for the attempt, or None when enhancement is disabled

        Raises:
            SchedulerStoppedError: If the scheduler is not running
        """
        if not self.config.enable_llm:
            logger.debug("Enhancement disabled, not scheduling")
            return None
        with self._lock:
            if self._executor is None:
                raise SchedulerStoppedError("Enhancement scheduler is not running")
            future = self._executor.submit(pipeline.enhance, text, prior, callback, today)
        future.add_done_callback(self._log_failure)
        return future

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Enhancement callback failed: {type(error).__name__}: {str(error)}")
