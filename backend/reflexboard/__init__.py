from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

LEADERBOARD_EXT = 'reflexboard.leaderboard'
SCHEDULER_EXT = 'reflexboard.scheduler'


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Ensure the score table is known to metadata before create_all/migrations
    from reflexboard import models  # noqa: F401
    from reflexboard.services.leaderboard import (
        LeaderboardService, MemoryScoreStore, SqlAlchemyScoreStore,
    )
    store_kind = flask_app.config.get('LEADERBOARD_STORE', 'sql')
    if store_kind == 'memory':
        store = MemoryScoreStore()
    elif store_kind == 'sql':
        store = SqlAlchemyScoreStore(db)
    else:
        raise ValueError(f"Unknown LEADERBOARD_STORE: {store_kind!r}")
    flask_app.extensions[LEADERBOARD_EXT] = LeaderboardService.from_config(store, flask_app.config)

    from reflexboard.services.games import BackgroundScheduler, ManualScheduler
    scheduler_kind = flask_app.config.get('REACTION_SCHEDULER', 'background')
    if scheduler_kind == 'manual':
        flask_app.extensions[SCHEDULER_EXT] = ManualScheduler()
    elif scheduler_kind == 'background':
        flask_app.extensions[SCHEDULER_EXT] = BackgroundScheduler(socketio)
    else:
        raise ValueError(f"Unknown REACTION_SCHEDULER: {scheduler_kind!r}")
    flask_app.logger.info(f"[startup] store={store_kind} scheduler={scheduler_kind}")

    # Import and register blueprints here
    from reflexboard.main import main
    flask_app.register_blueprint(main)

    from reflexboard.api.leaderboard import leaderboard
    # Mount under /api to match the frontend API client
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    # Register Socket.IO event handlers
    from reflexboard.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    from reflexboard.cli import register_cli
    register_cli(flask_app)

    return flask_app


def get_leaderboard_service():
    return current_app.extensions[LEADERBOARD_EXT]


def get_scheduler():
    return current_app.extensions[SCHEDULER_EXT]
