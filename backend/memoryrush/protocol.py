"""Line protocol spoken over each participant's text stream.

Clients send ``FLIP:<index>``, ``CHAT:<text>`` or ``QUIT``; any other line is
chat text. The server answers with space separated event lines built by the
``*_event`` helpers below. Nothing here touches game state or sockets.
"""
import re
from collections import namedtuple
from typing import Iterable, Iterator, List, Optional, Tuple

FLIP = 'FLIP'
CHAT = 'CHAT'
QUIT = 'QUIT'

Command = namedtuple('Command', ['kind', 'index', 'text'])

_INDEX_RE = re.compile(r'[+-]?[0-9]+', re.ASCII)


def parse_command(line: str) -> Optional[Command]:
    """Parse one inbound line. Returns None for a malformed FLIP, which is dropped.

    Every other line, blank ones included, is a command or chat text.
    """
    line = line.rstrip('\r\n')
    if line.startswith('FLIP:'):
        payload = line[len('FLIP:'):].strip()
        # plain ASCII integers only; int() alone would take "1_0" or "١"
        if not _INDEX_RE.fullmatch(payload):
            return None
        return Command(FLIP, int(payload), None)
    if line == 'QUIT':
        return Command(QUIT, None, None)
    if line.startswith('CHAT:'):
        return Command(CHAT, None, line[len('CHAT:'):])
    return Command(CHAT, None, line)


def iter_commands(payload: str) -> Iterator[Command]:
    for line in payload.splitlines():
        command = parse_command(line)
        if command is not None:
            yield command


def _csv(names: Iterable[str]) -> str:
    return ','.join(names)


def name_event(name: str) -> str:
    return f"NAME {name}"


def players_event(names: Iterable[str]) -> str:
    return f"PLAYERS {_csv(names)}"


def start_event(total_cards: int) -> str:
    return f"START {total_cards}"


def turn_event(name: str) -> str:
    return f"TURN {name}"


def flip_event(index: int, card_id: int) -> str:
    return f"FLIP {index} {card_id}"


def match_event(name: str, first_index: int, second_index: int, new_score: int) -> str:
    return f"MATCH {name} {first_index} {second_index} {new_score}"


def nomatch_event(name: str, first_index: int, second_index: int) -> str:
    return f"NOMATCH {name} {first_index} {second_index}"


def timeout_event(name: str, index: Optional[int] = None) -> str:
    if index is None:
        return f"TIMEOUT {name}"
    return f"TIMEOUT {name} {index}"


def gameover_event(winner_names: List[str]) -> str:
    if len(winner_names) == 1:
        return f"GAMEOVER {winner_names[0]}"
    return f"GAMEOVER TIE {_csv(winner_names)}"


def chat_event(name: str, text: str) -> str:
    return f"CHAT {name}: {text}"


def error_event(text: str) -> str:
    return f"ERROR {text}"


def parse_event(line: str, names: Optional[Iterable[str]] = None) -> Tuple[str, List[str]]:
    """Split a server line into its kind and fields.

    Player names contain spaces ("Player 1"), so fields are cut from the
    right where the trailing values are numeric. ``TIMEOUT`` is ambiguous on
    its own; pass the roster as ``names`` to resolve it, otherwise names are
    assumed to end in their admission number the way the server assigns them.
    """
    kind, _, rest = line.partition(' ')
    if kind in ('NAME', 'TURN', 'ERROR'):
        return kind, [rest]
    if kind == 'PLAYERS':
        return kind, rest.split(',') if rest else []
    if kind in ('START', 'FLIP'):
        return kind, rest.split()
    if kind == 'MATCH':
        name, first, second, score = rest.rsplit(' ', 3)
        return kind, [name, first, second, score]
    if kind == 'NOMATCH':
        name, first, second = rest.rsplit(' ', 2)
        return kind, [name, first, second]
    if kind == 'TIMEOUT':
        head, _, tail = rest.rpartition(' ')
        if names is None:
            has_index = bool(head) and tail.isdigit() and head.rpartition(' ')[2].isdigit()
        else:
            roster = set(names)
            has_index = rest not in roster and head in roster and tail.isdigit()
        if has_index:
            return kind, [head, tail]
        return kind, [rest]
    if kind == 'GAMEOVER':
        if rest.startswith('TIE '):
            return kind, ['TIE'] + rest[len('TIE '):].split(',')
        return kind, [rest]
    if kind == 'CHAT':
        name, _, text = rest.partition(': ')
        return kind, [name, text]
    return kind, [rest] if rest else []
