class SocketIOBroadcaster:
    """Fan-out of room events over Socket.IO.

    Socket.IO rooms are named after the quiz room code, so every connection
    that joined a code receives what is published to it.
    """

    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def publish(self, code: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=code, namespace=self.namespace)

    def send(self, sid: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)

    def enter(self, sid: str, code: str) -> None:
        self.socketio.server.enter_room(sid, code, namespace=self.namespace)

