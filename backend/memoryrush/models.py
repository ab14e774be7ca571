import random
from typing import Iterable, List, Optional

LOBBY = 'lobby'
IN_PROGRESS = 'in_progress'
FINISHED = 'finished'


class Card:
    def __init__(self, card_id: int, matched: bool = False):
        self.id = card_id
        self.matched = matched

    def to_dict(self, reveal: bool = False):
        return {
            'matched': self.matched,
            'id': self.id if (reveal or self.matched) else None,
        }

    def __repr__(self):
        return f"Card(id={self.id}, matched={self.matched})"


class Player:
    def __init__(self, name: str, score: int = 0):
        self.name = name
        self.score = score

    def increment_score(self) -> int:
        self.score += 1
        return self.score

    def to_dict(self):
        return {
            'name': self.name,
            'score': self.score,
        }

    def __repr__(self):
        return f"Player(name={self.name!r}, score={self.score})"


class Deck:
    """Ordered cards, two per identity value.

    The shuffle goes through ``rng.shuffle`` so tests can inject a seeded
    ``random.Random`` or build a fixed layout with :meth:`from_ids`.
    """

    def __init__(self, cards: Optional[List[Card]] = None):
        self.cards: List[Card] = list(cards or [])

    @classmethod
    def initialize(cls, num_pairs: int, rng: Optional[random.Random] = None) -> 'Deck':
        if num_pairs < 1:
            raise ValueError(f"num_pairs must be at least 1, got {num_pairs}")
        cards = []
        for card_id in range(num_pairs):
            cards.append(Card(card_id))
            cards.append(Card(card_id))
        (rng or random.SystemRandom()).shuffle(cards)
        return cls(cards)

    @classmethod
    def from_ids(cls, ids: Iterable[int]) -> 'Deck':
        return cls([Card(card_id) for card_id in ids])

    def all_matched(self) -> bool:
        return all(card.matched for card in self.cards)

    def __len__(self):
        return len(self.cards)

    def __getitem__(self, index: int) -> Card:
        return self.cards[index]

    def __iter__(self):
        return iter(self.cards)


class GameState:
    """Deck, roster and turn bookkeeping for one session.

    Only the turn coordinator mutates this object, always while holding its
    lock. ``turn_epoch`` increases on every turn start and is what a pending
    timeout is compared against when it fires.
    """

    def __init__(self):
        self.status = LOBBY
        self.deck = Deck()
        self.players: List[Player] = []
        self.current_player_index = 0
        self.pending_first_index: Optional[int] = None
        self.turn_completed = False
        self.turn_epoch = 0
        self.admitted_count = 0

    @property
    def started(self) -> bool:
        return self.status != LOBBY

    @property
    def active(self) -> bool:
        return self.status == IN_PROGRESS

    @property
    def current_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.current_player_index]

    def player_names(self) -> List[str]:
        return [p.name for p in self.players]

    def next_player_index(self) -> int:
        return (self.current_player_index + 1) % len(self.players)

    def to_dict(self):
        current = self.current_player if self.active else None
        return {
            'status': self.status,
            'players': [p.to_dict() for p in self.players],
            'current_player': current.name if current else None,
            'total_cards': len(self.deck),
            'cards': [
                dict(index=i, **card.to_dict(reveal=(i == self.pending_first_index)))
                for i, card in enumerate(self.deck)
            ],
            'pending_first_index': self.pending_first_index,
            'turn_epoch': self.turn_epoch,
        }
