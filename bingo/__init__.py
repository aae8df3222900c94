import logging

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    level_name = str(flask_app.config.get('LOG_LEVEL', 'INFO')).upper()
    flask_app.logger.setLevel(getattr(logging, level_name, logging.INFO))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from bingo.error_handlers import register_error_handlers
    register_error_handlers(flask_app)

    # Ensure the store table is registered with SQLAlchemy metadata
    from bingo import models  # noqa: F401
    with flask_app.app_context():
        db.create_all()

    from bingo.services.bingo import init_engine
    init_engine(flask_app, socketio)

    # Import and register blueprints here
    from bingo.routes import main
    flask_app.register_blueprint(main)

    from bingo.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/sessions')

    from bingo.api.wallet import wallet
    flask_app.register_blueprint(wallet, url_prefix='/wallet')

    from bingo.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('store-purge')
    def store_purge_command():
        """Deletes expired entries from the state store."""
        from bingo.services.bingo import get_engine
        with flask_app.app_context():
            removed = get_engine().store.purge_expired()
            print(f'Removed {removed} expired entries.')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the store with a fresh card pool."""
        from bingo.services.bingo import get_engine
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            pool = get_engine().registry.card_pool()
            print(f'Store has been reset and seeded with {len(pool)} cards!')

    flask_app.cli.add_command(store_purge_command)
    flask_app.cli.add_command(db_reset_command)

    return flask_app
