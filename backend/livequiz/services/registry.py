import random
import threading
from typing import Dict, List, Optional

from livequiz.models import Room

# No 0/O, 1/I or L-style lookalikes
CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


def generate_room_code(length: int = 6) -> str:
    return ''.join(random.choices(CODE_ALPHABET, k=length))


class RoomRegistry:
    """Owns every live room, keyed by code."""

    def __init__(self, code_length: int = 6):
        self.code_length = code_length
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def create(self, host_sid: str, total_questions: int) -> Room:
        with self._lock:
            while True:
                code = generate_room_code(self.code_length)
                if code not in self._rooms:
                    break
            room = Room(code=code, host_sid=host_sid, total_questions=total_questions)
            self._rooms[code] = room
            return room

    def get(self, code) -> Optional[Room]:
        if not code:
            return None
        return self._rooms.get(str(code).strip().upper())

    def remove(self, code: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.pop(code, None)

    def rooms(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    def __contains__(self, code) -> bool:
        return self.get(code) is not None

    def __len__(self) -> int:
        return len(self._rooms)
