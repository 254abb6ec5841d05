"""Ranked views derived from a room's players.

Both views are recomputed on every call; nothing is cached on the room.
"""
from typing import List, Optional, Tuple

from livequiz.models import Player, Room


def _ordered_players(room: Room) -> List[Tuple[str, Player]]:
    return sorted(room.players.items(), key=lambda item: (-item[1].score, item[1].name))


def total_leaderboard(room: Room, limit: Optional[int] = None) -> List[dict]:
    """Players by score descending, ties by name ascending."""
    rows = [p.to_dict() for _, p in _ordered_players(room)]
    return rows[:limit] if limit is not None else rows


def fast_correct_top(room: Room, question_index: int, limit: int = 5) -> List[dict]:
    """Correct answers to ``question_index`` ordered by response time."""
    hits = [
        p for p in room.players.values()
        if p.has_answered(question_index) and p.last_answer.correct
    ]
    hits.sort(key=lambda p: (p.last_answer.elapsed_ms, -p.last_answer.points, p.name))
    return [
        {'name': p.name, 'elapsed_ms': p.last_answer.elapsed_ms, 'points': p.last_answer.points}
        for p in hits[:limit]
    ]


def rank_of(room: Room, sid: str) -> int:
    """1-based position of ``sid`` in the total leaderboard, 0 if absent."""
    for position, (player_sid, _) in enumerate(_ordered_players(room), start=1):
        if player_sid == sid:
            return position
    return 0
