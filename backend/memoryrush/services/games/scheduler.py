import logging
import time
from typing import Callable, Optional


class TurnTimer:
    """One scheduled timeout, bound to the turn it was armed for."""

    def __init__(self, player_index: int, epoch: int, duration: float):
        self.player_index = player_index
        self.epoch = epoch
        self.duration = duration
        self.deadline = time.time() + duration
        self.cancelled = False

    def __repr__(self):
        return f"TurnTimer(player={self.player_index}, epoch={self.epoch}, cancelled={self.cancelled})"


class TurnTimeoutScheduler:
    """Keeps at most one pending turn timeout.

    - ``schedule`` cancels the previous timer and arms a new one for
      ``(player_index, epoch)``
    - cancellation only flags the timer; a worker that already woke up still
      calls ``on_expire``, and the coordinator re-checks the epoch under its
      lock before acting
    - with ``enabled=False`` timers are tracked but no worker is spawned
      (used by the test config)
    """

    def __init__(
        self,
        duration: float,
        on_expire: Callable[[int, int], None],
        start_background_task: Callable,
        sleep: Callable[[float], None] = time.sleep,
        heartbeat: float = 0,
        enabled: bool = True,
        logger=None,
    ):
        self.duration = duration
        self.on_expire = on_expire
        self.start_background_task = start_background_task
        self.sleep = sleep
        self.heartbeat = heartbeat
        self.enabled = enabled
        self.logger = logger or logging.getLogger(__name__)
        self.current: Optional[TurnTimer] = None

    def schedule(self, player_index: int, epoch: int) -> TurnTimer:
        self.cancel()
        timer = TurnTimer(player_index, epoch, self.duration)
        self.current = timer
        self.logger.info(
            f"[timer-set] player={player_index} epoch={epoch} duration={self.duration}s deadline={timer.deadline:.0f}"
        )
        if self.enabled:
            self.start_background_task(self._worker, timer)
        return timer

    def cancel(self) -> None:
        if self.current is not None:
            self.current.cancelled = True
            self.current = None

    def _worker(self, timer: TurnTimer) -> None:
        # heartbeat sleep loop if enabled
        hb = self.heartbeat
        if hb and hb > 0:
            slept = 0
            while slept < timer.duration and not timer.cancelled:
                step = min(hb, timer.duration - slept)
                self.sleep(step)
                slept += step
                self.logger.info(
                    f"[timer-heartbeat] player={timer.player_index} epoch={timer.epoch} remaining={max(0, timer.duration - slept)}s"
                )
        else:
            self.sleep(timer.duration)

        if timer.cancelled:
            self.logger.info(f"[timer-skip] player={timer.player_index} epoch={timer.epoch} cancelled")
            return
        self.logger.info(f"[timer-fire] player={timer.player_index} epoch={timer.epoch}")
        self.on_expire(timer.player_index, timer.epoch)
