from flask import current_app, request
from flask_socketio import disconnect, emit

from memoryrush import socketio, NAMESPACE
from memoryrush.protocol import CHAT, FLIP, QUIT, error_event, iter_commands


def _coordinator():
    return current_app.extensions['memoryrush']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    admission = _coordinator().admit(_get_sid())
    if not admission.accepted:
        # Report once, then let the server close the connection
        emit('message', error_event(admission.error))
        return False


def handle_disconnect(reason=None):
    _coordinator().disconnect(_get_sid())


def handle_message(data):
    if not isinstance(data, str):
        return
    coordinator = _coordinator()
    sid = _get_sid()
    player_name = coordinator.registry.name_for(sid)
    if player_name is None:
        return
    for command in iter_commands(data):
        if command.kind == FLIP:
            coordinator.flip(player_name, command.index)
        elif command.kind == CHAT:
            coordinator.chat(player_name, command.text)
        elif command.kind == QUIT:
            coordinator.disconnect(sid)
            disconnect()
            return


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on the game namespace."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('message', handle_message, namespace=NAMESPACE)
