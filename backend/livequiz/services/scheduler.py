import time


class TimerHandle:
    """A pending deferred call. Cancelling it guarantees the callback never runs."""

    def __init__(self, label: str, delay_sec: float):
        self.label = label
        self.deadline = time.time() + delay_sec
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


class BackgroundScheduler:
    """Runs callbacks after a delay in Socket.IO background tasks.

    The worker sleeps with ``socketio.sleep`` so it cooperates with whatever
    async mode the server runs under. It sleeps in slices of at most
    ``poll_sec`` and exits early once its handle is cancelled.
    """

    def __init__(self, app, socketio, poll_sec: float = 1.0):
        self.app = app
        self.socketio = socketio
        self.poll_sec = poll_sec

    def call_later(self, delay_sec: float, callback, *args, label: str = 'timer') -> TimerHandle:
        handle = TimerHandle(label, delay_sec)
        self.app.logger.info(f"[timer-set] {label} delay={delay_sec:.3f}s deadline={handle.deadline:.3f}")

        def _worker():
            remaining = handle.deadline - time.time()
            while remaining > 0 and not handle.cancelled:
                self.socketio.sleep(min(self.poll_sec, remaining))
                remaining = handle.deadline - time.time()
            if handle.cancelled:
                self.app.logger.info(f"[timer-abort] {label} cancelled")
                return
            handle.fired = True
            self.app.logger.info(f"[timer-fire] {label}")
            with self.app.app_context():
                callback(*args)

        self.socketio.start_background_task(_worker)
        return handle
