import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass
class AnswerRecord:
    question_index: int
    chosen_index: Optional[int]
    elapsed_ms: float
    correct: bool
    points: int


@dataclass
class Player:
    name: str
    score: int = 0
    last_answer: Optional[AnswerRecord] = None

    def has_answered(self, question_index: int) -> bool:
        return self.last_answer is not None and self.last_answer.question_index == question_index

    def to_dict(self):
        return {'name': self.name, 'score': self.score}


@dataclass
class Room:
    """One quiz session.

    Lifecycle: created -> started (question cycles) -> ended. Within a cycle
    answers are accepted from ``opens_at_ms`` until the question is revealed.
    All mutation happens under ``lock``.
    """
    code: str
    host_sid: str
    total_questions: int
    created_at: float = field(default_factory=time.time)
    started: bool = False
    ended: bool = False
    question_index: int = 0
    opens_at_ms: float = 0
    revealed: bool = False
    timer: Optional[object] = None
    eviction_timer: Optional[object] = None
    players: Dict[str, Player] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def running(self) -> bool:
        return self.started and not self.ended

    @property
    def accepting_answers(self) -> bool:
        return self.running and not self.revealed

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def answered_count(self) -> int:
        return sum(1 for p in self.players.values() if p.has_answered(self.question_index))

    def public_state(self):
        return {
            'code': self.code,
            'started': self.started,
            'ended': self.ended,
            'question_index': self.question_index,
            'total': self.total_questions,
            'players': len(self.players),
        }
