import logging
import time
from collections import namedtuple
from typing import Callable

from memoryrush.models import GameState, Player

GAME_IN_PROGRESS = 'Game already in progress. Connection closed.'
LOBBY_FULL = 'Game lobby full. Connection closed.'

Admission = namedtuple('Admission', ['accepted', 'player_name', 'error', 'start_now'])


class LobbyAdmissionController:
    """Pre-game gate: admits players and decides when the game starts.

    Reaching ``min_players`` arms a one-shot grace delay; reaching
    ``max_players`` asks for an immediate start. Both can happen for the same
    admission, and the grace worker then finds the game already running.
    """

    def __init__(
        self,
        start_background_task: Callable,
        max_players: int = 4,
        min_players: int = 2,
        grace_period: float = 5,
        sleep: Callable[[float], None] = time.sleep,
        enabled: bool = True,
        logger=None,
    ):
        if min_players < 1:
            raise ValueError(f"min_players must be at least 1, got {min_players}")
        if max_players < min_players:
            raise ValueError(f"max_players ({max_players}) is below min_players ({min_players})")
        self.max_players = max_players
        self.min_players = min_players
        self.grace_period = grace_period
        self.start_background_task = start_background_task
        self.sleep = sleep
        self.enabled = enabled
        self.logger = logger or logging.getLogger(__name__)

    def admit(self, state: GameState, on_grace_elapsed: Callable[[], None]) -> Admission:
        """Decide on one connection attempt. Caller holds the coordinator lock."""
        if state.started:
            return Admission(False, None, GAME_IN_PROGRESS, False)
        if len(state.players) >= self.max_players:
            return Admission(False, None, LOBBY_FULL, False)

        state.admitted_count += 1
        player = Player(f"Player {state.admitted_count}")
        state.players.append(player)

        roster_size = len(state.players)
        if roster_size == self.min_players:
            self._arm_grace(on_grace_elapsed)
        return Admission(True, player.name, None, roster_size == self.max_players)

    def ready(self, state: GameState) -> bool:
        return not state.started and len(state.players) >= self.min_players

    def _arm_grace(self, on_grace_elapsed: Callable[[], None]) -> None:
        self.logger.info(f"[lobby-grace] starting in {self.grace_period}s unless the lobby fills first")
        if self.enabled:
            self.start_background_task(self._grace_worker, on_grace_elapsed)

    def _grace_worker(self, on_grace_elapsed: Callable[[], None]) -> None:
        self.sleep(self.grace_period)
        on_grace_elapsed()
