from functools import wraps

from flask import current_app, request
from flask_socketio import emit

from livequiz import socketio
from livequiz.auth import host_required
from livequiz.errors import SessionError


def _controller():
    return current_app.extensions['livequiz']


def _get_sid() -> str:
    return request.sid  # type: ignore


def acknowledged(handler):
    """Turn a handler's return value (or SessionError) into the ack payload."""
    @wraps(handler)
    def wrapper(data=None):
        try:
            result = handler(data if isinstance(data, dict) else {})
        except SessionError as exc:
            current_app.logger.info(f"[rejected] event={handler.__name__} sid={_get_sid()} code={exc.code}")
            return exc.to_dict()
        ack = {'ok': True}
        ack.update(result or {})
        return ack
    return wrapper


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    _controller().disconnect(_get_sid())


def handle_ping(data=None):
    emit('pong', data or {})


@acknowledged
@host_required
def handle_create_room(data):
    room = _controller().create_room(_get_sid())
    return {'code': room.code}


@acknowledged
@host_required
def handle_start(data):
    _controller().start(_get_sid(), data.get('code'))


@acknowledged
@host_required
def handle_reveal(data):
    _controller().force_reveal(_get_sid(), data.get('code'))


@acknowledged
@host_required
def handle_next(data):
    ended = _controller().next(_get_sid(), data.get('code'))
    return {'ended': ended}


@acknowledged
def handle_join(data):
    _controller().join(_get_sid(), data.get('code'), data.get('name'))


@acknowledged
def handle_answer(data):
    return _controller().answer(_get_sid(), data.get('code'), data.get('choice_index'))


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
    socketio.on_event('host:create_room', handle_create_room, namespace=namespace)
    socketio.on_event('host:start', handle_start, namespace=namespace)
    socketio.on_event('host:reveal', handle_reveal, namespace=namespace)
    socketio.on_event('host:next', handle_next, namespace=namespace)
    socketio.on_event('player:join', handle_join, namespace=namespace)
    socketio.on_event('player:answer', handle_answer, namespace=namespace)
