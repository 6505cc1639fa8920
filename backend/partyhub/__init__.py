from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []
    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from partyhub.main import main
    flask_app.register_blueprint(main)

    from partyhub.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Room registry and session map live for the life of the app and are
    # handed to the router explicitly
    from partyhub.realtime.rooms import RoomBroadcaster, RoomRegistry, SessionTracker
    from partyhub.realtime.router import EventRouter
    from partyhub.socketio_events import register_socketio_handlers

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    broadcaster = RoomBroadcaster(socketio, namespace=namespace, registry=RoomRegistry())
    router = EventRouter(broadcaster, SessionTracker())
    register_socketio_handlers(router, namespace=namespace)
    flask_app.extensions['partyhub.router'] = router

    @click.command('db-reset')
    @click.option('--admin-email', default='admin@example.com', show_default=True)
    @click.option('--admin-password', default='password', show_default=True)
    def db_reset_command(admin_email, admin_password):
        """Drops, recreates, and seeds the database."""
        from partyhub.models import Admin
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            admin = Admin(email=admin_email)
            admin.set_password(admin_password)
            db.session.add(admin)

            db.session.commit()
            click.echo(f'Database has been reset and seeded with admin {admin_email}!')

    @click.command('sweep')
    def sweep_command():
        """Marks all players disconnected and purges anonymous games."""
        from partyhub.store import startup_sweep
        with flask_app.app_context():
            result = startup_sweep()
        click.echo(
            f"Disconnected {result['players_disconnected']} player(s); "
            f"purged {len(result['games_purged'])} anonymous game(s)."
        )

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(sweep_command)

    return flask_app
