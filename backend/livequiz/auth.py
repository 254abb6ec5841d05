from functools import wraps

from flask_login import UserMixin, current_user

from livequiz import bcrypt
from livequiz.errors import HostRequired

HOST_USER_ID = 'host'


class HostUser(UserMixin):
    """The single privileged identity; it exists once the host key is verified."""

    id = HOST_USER_ID

    def to_dict(self):
        return {'id': self.id, 'role': 'host'}


def load_user(user_id):
    if user_id == HOST_USER_ID:
        return HostUser()
    return None


def check_host_key(config, key) -> bool:
    key = str(key or '').strip()
    if not key:
        return False
    return bcrypt.check_password_hash(config['HOST_KEY_HASH'], key)


def host_required(handler):
    """Socket.IO counterpart of ``login_required``: rejects non-host callers."""
    @wraps(handler)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            raise HostRequired()
        return handler(*args, **kwargs)
    return wrapper
