import logging
import random
import threading
import time
from typing import Callable, Optional

from memoryrush import protocol
from memoryrush.models import Deck, GameState, FINISHED, IN_PROGRESS
from .lobby import Admission, LobbyAdmissionController
from .scheduler import TurnTimeoutScheduler
from .scoring import award_match, winners


class TurnCoordinator:
    """Authoritative owner of the game state.

    ``admit``, ``flip``, ``chat``, ``disconnect``, the lobby grace start and
    the turn timeout all run under one lock. Events are handed to the
    registry before the lock is released, so every connection sees them in
    the order the state changed.
    """

    def __init__(
        self,
        registry,
        start_background_task: Callable,
        num_pairs: int = 16,
        max_players: int = 4,
        min_players: int = 2,
        turn_duration: float = 30,
        lobby_grace: float = 5,
        sleep: Callable[[float], None] = time.sleep,
        timer_heartbeat: float = 0,
        timers_enabled: bool = True,
        rng: Optional[random.Random] = None,
        logger=None,
    ):
        if num_pairs < 1:
            raise ValueError(f"num_pairs must be at least 1, got {num_pairs}")
        self.registry = registry
        self.num_pairs = num_pairs
        self.rng = rng
        self.logger = logger or logging.getLogger(__name__)
        self.state = GameState()
        self._lock = threading.Lock()
        self.scheduler = TurnTimeoutScheduler(
            turn_duration,
            self.on_turn_timeout,
            start_background_task=start_background_task,
            sleep=sleep,
            heartbeat=timer_heartbeat,
            enabled=timers_enabled,
            logger=self.logger,
        )
        self.lobby = LobbyAdmissionController(
            max_players=max_players,
            min_players=min_players,
            grace_period=lobby_grace,
            start_background_task=start_background_task,
            sleep=sleep,
            enabled=timers_enabled,
            logger=self.logger,
        )

    @classmethod
    def from_config(cls, config, registry, **kwargs) -> 'TurnCoordinator':
        timers_enabled = not (config.get('TESTING') and not config.get('ENABLE_SCHEDULER_IN_TESTS'))
        kwargs.setdefault('timers_enabled', timers_enabled)
        return cls(
            registry,
            num_pairs=int(config.get('NUM_PAIRS', 16)),
            max_players=int(config.get('MAX_PLAYERS', 4)),
            min_players=int(config.get('MIN_PLAYERS', 2)),
            turn_duration=int(config.get('TURN_DURATION_SEC', 30)),
            lobby_grace=int(config.get('LOBBY_GRACE_SEC', 5)),
            timer_heartbeat=int(config.get('TIMER_HEARTBEAT_SEC', 0)),
            **kwargs,
        )

    # ---- Lobby ----

    def admit(self, connection_id: str) -> Admission:
        with self._lock:
            admission = self.lobby.admit(self.state, self.start_after_grace)
            if not admission.accepted:
                self.logger.info(f"[reject] sid={connection_id} reason={admission.error!r}")
                return admission

            self.registry.register(connection_id, admission.player_name)
            self.registry.send(connection_id, protocol.name_event(admission.player_name))
            self.registry.broadcast(protocol.players_event(self.state.player_names()))
            self.logger.info(f"[admit] sid={connection_id} player={admission.player_name!r} roster={len(self.state.players)}")

            if admission.start_now:
                self._start_game()
            return admission

    def start_after_grace(self) -> bool:
        with self._lock:
            if not self.lobby.ready(self.state):
                self.logger.info("[lobby-grace] elapsed, nothing to do")
                return False
            self._start_game()
            return True

    def _start_game(self) -> None:
        state = self.state
        state.deck = Deck.initialize(self.num_pairs, self.rng)
        state.status = IN_PROGRESS
        self.logger.info(f"[game-start] players={state.player_names()} cards={len(state.deck)}")
        self.registry.broadcast(protocol.start_event(len(state.deck)))
        self._begin_turn(0)

    # ---- Turns ----

    def _begin_turn(self, player_index: int) -> None:
        state = self.state
        state.current_player_index = player_index
        state.pending_first_index = None
        state.turn_completed = False
        state.turn_epoch += 1
        self.registry.broadcast(protocol.turn_event(state.current_player.name))
        self.scheduler.schedule(player_index, state.turn_epoch)

    def flip(self, player_name: str, index: int) -> bool:
        """Reveal the card at ``index`` for ``player_name``.

        Returns False when the attempt is ignored; ignored attempts change
        nothing and send nothing.
        """
        with self._lock:
            state = self.state
            if not state.active:
                return False
            player = state.current_player
            if player.name != player_name:
                self.logger.debug(f"[flip-ignored] player={player_name!r} not on turn")
                return False
            if not 0 <= index < len(state.deck):
                self.logger.debug(f"[flip-ignored] player={player_name!r} index={index} out of range")
                return False
            card = state.deck[index]
            if card.matched or index == state.pending_first_index:
                self.logger.debug(f"[flip-ignored] player={player_name!r} index={index} not selectable")
                return False

            self.logger.info(f"[flip] player={player_name!r} index={index} card={card.id}")
            if state.pending_first_index is None:
                state.pending_first_index = index
                self.registry.broadcast(protocol.flip_event(index, card.id))
                return True

            first_index = state.pending_first_index
            first = state.deck[first_index]
            state.pending_first_index = None
            state.turn_completed = True
            self.registry.broadcast(protocol.flip_event(index, card.id))

            if first.id == card.id:
                first.matched = True
                card.matched = True
                score = award_match(player)
                self.logger.info(f"[match] player={player.name!r} cards=({first_index}, {index}) score={score}")
                self.registry.broadcast(protocol.match_event(player.name, first_index, index, score))
                if state.deck.all_matched():
                    self._finish()
                else:
                    self._begin_turn(state.current_player_index)
            else:
                self.logger.info(f"[nomatch] player={player.name!r} cards=({first_index}, {index})")
                self.registry.broadcast(protocol.nomatch_event(player.name, first_index, index))
                self._begin_turn(state.next_player_index())
            return True

    def on_turn_timeout(self, player_index: int, epoch: int) -> bool:
        """Expire the turn identified by ``(player_index, epoch)`` if it is still live."""
        with self._lock:
            state = self.state
            # A resolved pair always starts a new epoch (or finishes the game)
            # before the lock is released, so the epoch also covers turn_completed.
            if not state.active or state.turn_epoch != epoch or state.current_player_index != player_index:
                self.logger.info(
                    f"[timer-abort] player={player_index} epoch={epoch} live_player={state.current_player_index} live_epoch={state.turn_epoch} status={state.status}"
                )
                return False

            name = state.current_player.name
            open_index = state.pending_first_index
            state.pending_first_index = None
            self.logger.info(f"[timeout] player={name!r} open_card={open_index}")
            self.registry.broadcast(protocol.timeout_event(name, open_index))
            self._begin_turn(state.next_player_index())
            return True

    def _finish(self) -> None:
        state = self.state
        state.status = FINISHED
        self.scheduler.cancel()
        names = [p.name for p in winners(state.players)]
        self.logger.info(f"[game-over] winners={names} scores={[p.to_dict() for p in state.players]}")
        self.registry.broadcast(protocol.gameover_event(names))

    def winners(self):
        with self._lock:
            return winners(self.state.players)

    # ---- Connections ----

    def chat(self, player_name: str, text: str) -> None:
        with self._lock:
            self.registry.broadcast(protocol.chat_event(player_name, text))

    def disconnect(self, connection_id: str) -> Optional[str]:
        """Drop the connection. The roster and the current turn are left as they are."""
        with self._lock:
            name = self.registry.remove(connection_id)
            if name is not None:
                self.logger.info(f"[disconnect] sid={connection_id} player={name!r} connections={len(self.registry)}")
            return name

    def snapshot(self) -> dict:
        with self._lock:
            payload = self.state.to_dict()
            payload['connections'] = len(self.registry)
            return payload
