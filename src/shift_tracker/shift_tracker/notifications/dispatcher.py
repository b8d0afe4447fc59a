from __future__ import annotations

import copy
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from ..core.constants import DEFAULT_NOTIFY_MAX_ATTEMPTS, DEFAULT_NOTIFY_RETRY_DELAY, DEFAULT_NOTIFY_WORKERS
from ..shifts.model import ShiftState
from ..users.model import User
from .notifier import ShiftNotifier

logger = logging.getLogger(__name__)


class NotificationDispatcher(ShiftNotifier):
    """Fire-and-forget hand-off of shift events to a background worker.

    The calling transition never waits on, or sees errors from, the
    underlying notifier. Each event is retried up to ``max_attempts`` times;
    the final failure is logged and dropped.
    """

    def __init__(
        self,
        notifier: ShiftNotifier,
        *,
        max_attempts: int = DEFAULT_NOTIFY_MAX_ATTEMPTS,
        retry_delay: float = DEFAULT_NOTIFY_RETRY_DELAY,
        max_workers: int = DEFAULT_NOTIFY_WORKERS,
        executor: Optional[ThreadPoolExecutor] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._notifier = notifier
        self._max_attempts = max(1, int(max_attempts))
        self._retry_delay = float(retry_delay)
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")
        self._sleep = sleep

    def _deliver(self, event: str, send: Callable[[User, ShiftState], None], user: User, shift: ShiftState) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            try:
                send(user, shift)
                return True
            except Exception:
                if attempt >= self._max_attempts:
                    logger.exception(
                        "Giving up on %s notification for %s after %s attempts", event, user.email, attempt
                    )
                    return False
                logger.warning(
                    "%s notification for %s failed (attempt %s/%s), retrying",
                    event,
                    user.email,
                    attempt,
                    self._max_attempts,
                    exc_info=True,
                )
                self._sleep(self._retry_delay)
        return False

    def _submit(self, event: str, send: Callable[[User, ShiftState], None], user: User, shift: ShiftState) -> Optional[Future]:
        if not user.email:
            logger.debug("User %s has no email; skipping %s notification", user.user_id, event)
            return None
        # Snapshot: the caller may keep mutating its ShiftState after hand-off.
        snapshot = copy.deepcopy(shift)
        try:
            return self._executor.submit(self._deliver, event, send, user, snapshot)
        except RuntimeError:
            logger.warning("Notification executor is shut down; dropping %s notification", event)
            return None

    def shift_started(self, user: User, shift: ShiftState) -> Optional[Future]:
        return self._submit("shift-start", self._notifier.shift_started, user, shift)

    def shift_ended(self, user: User, shift: ShiftState) -> Optional[Future]:
        return self._submit("shift-end", self._notifier.shift_ended, user, shift)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
