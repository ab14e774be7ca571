from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

NAMESPACE = '/ws'

allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
# always_connect: a rejected player still receives its ERROR line before the close
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None, always_connect=True)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    CORS(flask_app, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One coordinator per app; socket handlers and routes reach it through
    # flask_app.extensions
    from memoryrush.registry import ConnectionRegistry
    from memoryrush.services.games.coordinator import TurnCoordinator
    registry = ConnectionRegistry(socketio, namespace=NAMESPACE, logger=flask_app.logger)
    flask_app.extensions['memoryrush'] = TurnCoordinator.from_config(
        flask_app.config,
        registry,
        start_background_task=socketio.start_background_task,
        sleep=socketio.sleep,
        logger=flask_app.logger,
    )

    from memoryrush.main import main
    flask_app.register_blueprint(main)

    from memoryrush.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    return flask_app
