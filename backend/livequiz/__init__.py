from flask import Flask
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

bcrypt = Bcrypt()
login_manager = LoginManager()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config, scheduler=None, clock=None):
    """Build the Flask app.

    ``scheduler`` and ``clock`` default to Socket.IO background tasks and wall
    time; tests pass manual versions to drive question timers deterministically.
    """
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    origins = flask_app.config.get('CORS_ORIGINS') or []

    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # Only the hash is kept around for login checks
    flask_app.config['HOST_KEY_HASH'] = bcrypt.generate_password_hash(flask_app.config['HOST_KEY'])

    from livequiz.catalog import load_catalog
    from livequiz.services.broadcast import SocketIOBroadcaster
    from livequiz.services.registry import RoomRegistry
    from livequiz.services.scheduler import BackgroundScheduler
    from livequiz.services.session import SessionController

    catalog = load_catalog(flask_app.config.get('QUIZ_FILE'))
    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    controller = SessionController.from_config(
        flask_app.config,
        catalog,
        RoomRegistry(code_length=int(flask_app.config.get('ROOM_CODE_LENGTH', 6))),
        SocketIOBroadcaster(socketio, namespace=namespace),
        scheduler or BackgroundScheduler(flask_app, socketio),
        clock=clock,
        logger=flask_app.logger,
    )
    flask_app.extensions['livequiz'] = controller
    flask_app.logger.info(f"[catalog] title={catalog.title!r} questions={len(catalog)}")

    from livequiz.main import main
    flask_app.register_blueprint(main)

    from livequiz.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=namespace)

    from livequiz.auth import load_user
    login_manager.user_loader(load_user)

    @click.command('catalog-check')
    @click.argument('path', required=False)
    def catalog_check_command(path):
        """Validates a quiz file (or the configured one) and prints a summary."""
        from livequiz.catalog import CatalogError
        target = path or flask_app.config.get('QUIZ_FILE')
        try:
            checked = load_catalog(target)
        except CatalogError as exc:
            raise click.ClickException(str(exc))
        click.echo(f"{checked.title}: {len(checked)} question(s)")
        for i, q in enumerate(checked.questions):
            click.echo(f"  {i + 1}. {q.text} [{len(q.choices)} choices, {q.time_limit_sec:g}s]")

    flask_app.cli.add_command(catalog_check_command)

    return flask_app
