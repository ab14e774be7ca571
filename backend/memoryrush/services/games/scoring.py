from typing import List, Sequence

from memoryrush.models import Player


def award_match(player: Player) -> int:
    """+1 to the player who revealed a pair; returns the new score."""
    return player.increment_score()


def winners(players: Sequence[Player]) -> List[Player]:
    """Every player holding the maximum score, in roster order.

    More than one entry only on an exact tie.
    """
    if not players:
        return []
    best = max(p.score for p in players)
    return [p for p in players if p.score == best]
