import logging
import time

from livequiz import errors
from livequiz.catalog import Catalog
from livequiz.models import AnswerRecord, Player, Room
from livequiz.services.leaderboard import fast_correct_top, rank_of, total_leaderboard
from livequiz.services.registry import RoomRegistry
from livequiz.services.scoring import compute_points


def _now_ms() -> float:
    return time.time() * 1000.0


def _coerce_choice(value):
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)


class SessionController:
    """Drives rooms through their question cycles.

    Every public operation validates against the room first and raises a
    :class:`~livequiz.errors.SessionError` without touching state when the
    request is not admissible. Mutation and broadcasting happen under the
    room's lock, which also serialises the reveal timer against requests.

    ``broadcaster`` needs ``enter(sid, code)``, ``publish(code, event, payload)``
    and ``send(sid, event, payload)``; ``scheduler`` needs
    ``call_later(delay_sec, callback, *args, label=...)`` returning a handle
    with ``cancel()``.
    """

    def __init__(self, catalog: Catalog, registry: RoomRegistry, broadcaster, scheduler,
                 clock=None, logger=None, pre_delay_ms=500, popup_show_ms=7000,
                 max_points=1000, leaderboard_size=15, fast_top_size=5,
                 max_name_length=24, ended_room_retention_sec=0):
        self.catalog = catalog
        self.registry = registry
        self.broadcaster = broadcaster
        self.scheduler = scheduler
        self.clock = clock or _now_ms
        self.logger = logger or logging.getLogger(__name__)
        self.pre_delay_ms = pre_delay_ms
        self.popup_show_ms = popup_show_ms
        self.max_points = max_points
        self.leaderboard_size = leaderboard_size
        self.fast_top_size = fast_top_size
        self.max_name_length = max_name_length
        self.ended_room_retention_sec = ended_room_retention_sec

    @classmethod
    def from_config(cls, config, catalog, registry, broadcaster, scheduler, clock=None, logger=None):
        return cls(
            catalog, registry, broadcaster, scheduler, clock=clock, logger=logger,
            pre_delay_ms=int(config.get('PRE_DELAY_MS', 500)),
            popup_show_ms=int(config.get('POPUP_SHOW_MS', 7000)),
            max_points=int(config.get('MAX_POINTS', 1000)),
            leaderboard_size=int(config.get('LEADERBOARD_SIZE', 15)),
            fast_top_size=int(config.get('FAST_TOP_SIZE', 5)),
            max_name_length=int(config.get('MAX_NAME_LENGTH', 24)),
            ended_room_retention_sec=int(config.get('ENDED_ROOM_RETENTION_SEC', 0)),
        )

    # ---- lookups ----

    def get_room(self, code) -> Room:
        room = self.registry.get(code)
        if room is None:
            raise errors.RoomNotFound()
        return room

    @staticmethod
    def _require_host(room: Room, sid: str) -> None:
        if room.host_sid != sid:
            raise errors.NotHost()

    # ---- host operations ----

    def create_room(self, sid: str) -> Room:
        room = self.registry.create(sid, len(self.catalog))
        self.broadcaster.enter(sid, room.code)
        self.logger.info(f"[room-create] room={room.code} host={sid}")
        self._broadcast_state(room)
        return room

    def start(self, sid: str, code) -> None:
        room = self.get_room(code)
        with room.lock:
            self._require_host(room, sid)
            if room.started:
                raise errors.AlreadyStarted()
            room.started = True
            room.ended = False
            room.question_index = 0
            self.logger.info(f"[room-start] room={room.code} players={len(room.players)}")
            self._begin_question(room)

    def force_reveal(self, sid: str, code) -> None:
        room = self.get_room(code)
        with room.lock:
            self._require_host(room, sid)
            self._reveal(room)

    def next(self, sid: str, code) -> bool:
        """Reveal the current question if needed and move on. Returns True when the quiz ended."""
        room = self.get_room(code)
        with room.lock:
            self._require_host(room, sid)
            if not room.started:
                raise errors.NotStarted()
            if room.ended:
                raise errors.RoomEnded()
            self._reveal(room)
            room.question_index += 1
            if room.question_index >= len(self.catalog):
                self._end_game(room)
                self._schedule_eviction(room)
                return True
            self._begin_question(room)
            return False

    # ---- participant operations ----

    def join(self, sid: str, code, name) -> Player:
        room = self.get_room(code)
        with room.lock:
            if room.ended:
                raise errors.RoomEnded()
            clean_name = str(name or '').strip()[:self.max_name_length]
            if not clean_name:
                raise errors.EmptyName()
            player = room.players.get(sid)
            if player is None:
                player = Player(name=clean_name)
                room.players[sid] = player
            else:
                # Same connection joining again keeps its score and current answer
                player.name = clean_name
            self.broadcaster.enter(sid, room.code)
            self.logger.info(f"[join] room={room.code} name={clean_name!r} players={len(room.players)}")
            self._broadcast_player_count(room)
            if room.accepting_answers:
                # Late joiner: still inside the current question's window
                self.broadcaster.send(sid, 'question:start', self._question_payload(room))
            self._broadcast_state(room)
            return player

    def answer(self, sid: str, code, choice_index) -> dict:
        room = self.get_room(code)
        with room.lock:
            if not room.running:
                raise errors.RoomNotActive()
            player = room.players.get(sid)
            if player is None:
                raise errors.NotJoined()
            now = self.clock()
            if now < room.opens_at_ms:
                raise errors.WindowNotOpen()
            if room.revealed:
                raise errors.WindowClosed()
            if player.has_answered(room.question_index):
                raise errors.AlreadyAnswered()

            question = self.catalog[room.question_index]
            elapsed_ms = now - room.opens_at_ms
            chosen = _coerce_choice(choice_index)
            correct = chosen == question.correct_index
            points = compute_points(correct, elapsed_ms, question.time_limit_sec, self.max_points)
            player.score += points
            player.last_answer = AnswerRecord(
                question_index=room.question_index,
                chosen_index=chosen,
                elapsed_ms=elapsed_ms,
                correct=correct,
                points=points,
            )
            rank = rank_of(room, sid)
            self.logger.info(
                f"[answer] room={room.code} question={room.question_index} name={player.name!r} "
                f"correct={correct} elapsed_ms={elapsed_ms:.0f} points={points}"
            )
            # Goes out before the caller's ack, which is this method's return value
            self.broadcaster.publish(room.code, 'question:progress', {
                'answered': room.answered_count(),
                'total_players': len(room.players),
            })
            return {'correct': correct, 'points': points, 'total_score': player.score, 'rank': rank}

    # ---- connection lifecycle ----

    def disconnect(self, sid: str) -> None:
        for room in self.registry.rooms():
            with room.lock:
                if room.host_sid == sid:
                    self._end_via_host_disconnect(room)
                    continue
                if sid in room.players:
                    player = room.players.pop(sid)
                    self.logger.info(f"[leave] room={room.code} name={player.name!r} players={len(room.players)}")
                    self._broadcast_player_count(room)
                    self._broadcast_state(room)

    def _end_via_host_disconnect(self, room: Room) -> None:
        self.logger.info(f"[host-disconnect] room={room.code} ended={room.ended}")
        if not room.ended:
            self._end_game(room)
        if room.eviction_timer is not None:
            room.eviction_timer.cancel()
            room.eviction_timer = None
        self.registry.remove(room.code)
        self.logger.info(f"[evict] room={room.code} reason=host-disconnect")

    # ---- question cycle ----

    def _question_payload(self, room: Room) -> dict:
        question = self.catalog[room.question_index]
        payload = {'question_index': room.question_index, 'total': len(self.catalog)}
        payload.update(question.public_dict())
        payload['opens_at_ms'] = room.opens_at_ms
        payload['pre_delay_ms'] = self.pre_delay_ms
        return payload

    def _begin_question(self, room: Room) -> None:
        room.cancel_timer()
        now = self.clock()
        opens_at = now + self.pre_delay_ms
        if opens_at <= room.opens_at_ms:
            opens_at = room.opens_at_ms + 1
        room.opens_at_ms = opens_at
        room.revealed = False
        for player in room.players.values():
            player.last_answer = None

        question = self.catalog[room.question_index]
        self.broadcaster.publish(room.code, 'question:start', self._question_payload(room))
        delay_sec = (opens_at - now + question.time_limit_ms) / 1000.0
        room.timer = self.scheduler.call_later(
            delay_sec, self._on_reveal_timer, room, room.question_index,
            label=f"room={room.code} question={room.question_index}",
        )
        self.logger.info(f"[question-start] room={room.code} question={room.question_index} opens_at_ms={opens_at:.0f}")
        self._broadcast_state(room)

    def _on_reveal_timer(self, room: Room, question_index: int) -> None:
        with room.lock:
            if not room.running or room.question_index != question_index:
                self.logger.info(f"[timer-abort] room={room.code} expected_question={question_index} actual={room.question_index}")
                return
            room.timer = None
            self._reveal(room)

    def _reveal(self, room: Room) -> bool:
        if not room.running or room.revealed:
            return False
        room.cancel_timer()
        room.revealed = True
        question = self.catalog[room.question_index]
        board = total_leaderboard(room)
        self.broadcaster.publish(room.code, 'question:end', {
            'question_index': room.question_index,
            'correct_index': question.correct_index,
            'leaderboard': board[:self.leaderboard_size],
            'total_players': len(board),
            'fast_top': fast_correct_top(room, room.question_index, self.fast_top_size),
            'popup_show_ms': self.popup_show_ms,
        })
        self.logger.info(f"[reveal] room={room.code} question={room.question_index} answered={room.answered_count()}")
        self._broadcast_state(room)
        return True

    def _end_game(self, room: Room) -> None:
        room.ended = True
        room.cancel_timer()
        board = total_leaderboard(room)
        self.broadcaster.publish(room.code, 'game:end', {
            'leaderboard': board[:self.leaderboard_size],
            'total_players': len(board),
        })
        self.logger.info(f"[game-end] room={room.code} players={len(board)}")
        self._broadcast_state(room)

    def _schedule_eviction(self, room: Room) -> None:
        if self.ended_room_retention_sec <= 0:
            return
        room.eviction_timer = self.scheduler.call_later(
            self.ended_room_retention_sec, self._evict_ended, room,
            label=f"room={room.code} eviction",
        )

    def _evict_ended(self, room: Room) -> None:
        with room.lock:
            room.eviction_timer = None
            if room.ended and self.registry.get(room.code) is room:
                self.registry.remove(room.code)
                self.logger.info(f"[evict] room={room.code} reason=retention")

    # ---- broadcasts ----

    def _broadcast_state(self, room: Room) -> None:
        self.broadcaster.publish(room.code, 'room:state', room.public_state())

    def _broadcast_player_count(self, room: Room) -> None:
        self.broadcaster.publish(room.code, 'players:count', {'count': len(room.players)})
