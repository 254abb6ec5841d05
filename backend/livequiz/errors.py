"""Admission and authorization failures reported back to the caller.

Every error carries a stable ``code`` for clients and a readable message.
They are raised by the session controller before any room mutation and
turned into ``{'ok': False, ...}`` acknowledgements by the socket layer.
"""


class SessionError(Exception):
    code = 'session_error'
    message = 'Request rejected'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'ok': False, 'error': self.message, 'code': self.code}


class RoomNotFound(SessionError):
    code = 'room_not_found'
    message = 'Room not found'


class RoomEnded(SessionError):
    code = 'room_ended'
    message = 'The game has already ended'


class RoomNotActive(SessionError):
    code = 'room_not_active'
    message = 'The game is not running'


class NotStarted(SessionError):
    code = 'not_started'
    message = 'The game has not started yet'


class AlreadyStarted(SessionError):
    code = 'already_started'
    message = 'The game has already started'


class HostRequired(SessionError):
    code = 'host_required'
    message = 'Host access is required for this action'


class NotHost(SessionError):
    code = 'not_host'
    message = 'You are not the host of this room'


class NotJoined(SessionError):
    code = 'not_joined'
    message = 'You have not joined this room'


class EmptyName(SessionError):
    code = 'empty_name'
    message = 'A display name is required'


class WindowNotOpen(SessionError):
    code = 'window_not_open'
    message = 'Answers are not open yet'


class WindowClosed(SessionError):
    code = 'window_closed'
    message = 'Answers for this question are closed'


class AlreadyAnswered(SessionError):
    code = 'already_answered'
    message = 'You already answered this question'
