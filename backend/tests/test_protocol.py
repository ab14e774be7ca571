import pytest

from memoryrush import protocol
from memoryrush.protocol import CHAT, FLIP, QUIT, iter_commands, parse_command, parse_event


@pytest.mark.parametrize('line,expected', [
    ('FLIP:3', (FLIP, 3, None)),
    ('FLIP: 12 ', (FLIP, 12, None)),
    ('QUIT', (QUIT, None, None)),
    ('CHAT:hello there', (CHAT, None, 'hello there')),
    ('CHAT:', (CHAT, None, '')),
    ('good luck', (CHAT, None, 'good luck')),
    ('QUIT now', (CHAT, None, 'QUIT now')),
    ('FLIP:-1', (FLIP, -1, None)),
    ('', (CHAT, None, '')),
    ('   ', (CHAT, None, '   ')),
    ('\r\n', (CHAT, None, '')),
])
def test_parse_command(line, expected):
    assert tuple(parse_command(line)) == expected


@pytest.mark.parametrize('line', ['FLIP:', 'FLIP:abc', 'FLIP:1.5', 'FLIP:1_0', 'FLIP:١', 'FLIP:0x1'])
def test_malformed_flip_is_dropped(line):
    assert parse_command(line) is None


def test_iter_commands_splits_lines():
    commands = list(iter_commands('FLIP:0\nFLIP:x\r\nCHAT:hi\n\nQUIT\n'))
    assert [c.kind for c in commands] == [FLIP, CHAT, CHAT, QUIT]
    assert commands[0].index == 0
    assert commands[2].text == ''


def test_event_lines():
    assert protocol.name_event('Player 1') == 'NAME Player 1'
    assert protocol.players_event(['Player 1', 'Player 2']) == 'PLAYERS Player 1,Player 2'
    assert protocol.start_event(32) == 'START 32'
    assert protocol.turn_event('Player 2') == 'TURN Player 2'
    assert protocol.flip_event(4, 7) == 'FLIP 4 7'
    assert protocol.match_event('Player 1', 0, 5, 3) == 'MATCH Player 1 0 5 3'
    assert protocol.nomatch_event('Player 1', 0, 5) == 'NOMATCH Player 1 0 5'
    assert protocol.timeout_event('Player 1') == 'TIMEOUT Player 1'
    assert protocol.timeout_event('Player 1', 0) == 'TIMEOUT Player 1 0'
    assert protocol.gameover_event(['Player 2']) == 'GAMEOVER Player 2'
    assert protocol.gameover_event(['Player 1', 'Player 3']) == 'GAMEOVER TIE Player 1,Player 3'
    assert protocol.chat_event('Player 1', 'hi: all') == 'CHAT Player 1: hi: all'
    assert protocol.error_event('Game lobby full. Connection closed.') == 'ERROR Game lobby full. Connection closed.'


def test_parse_event_keeps_names_with_spaces():
    assert parse_event('MATCH Player 1 0 5 3') == ('MATCH', ['Player 1', '0', '5', '3'])
    assert parse_event('NOMATCH Player 2 4 1') == ('NOMATCH', ['Player 2', '4', '1'])
    assert parse_event('PLAYERS Player 1,Player 2') == ('PLAYERS', ['Player 1', 'Player 2'])
    assert parse_event('GAMEOVER TIE Player 1,Player 2') == ('GAMEOVER', ['TIE', 'Player 1', 'Player 2'])
    assert parse_event('CHAT Player 1: a: b') == ('CHAT', ['Player 1', 'a: b'])


def test_parse_timeout_with_and_without_index():
    assert parse_event('TIMEOUT Player 1') == ('TIMEOUT', ['Player 1'])
    assert parse_event('TIMEOUT Player 1 7') == ('TIMEOUT', ['Player 1', '7'])
    assert parse_event('TIMEOUT alice', names=['alice']) == ('TIMEOUT', ['alice'])
    assert parse_event('TIMEOUT alice 2', names=['alice']) == ('TIMEOUT', ['alice', '2'])
