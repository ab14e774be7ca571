import click

from config import Config
from memoryrush import create_app, socketio


@click.command()
@click.option('--host', default=Config.MEMORY_HOST, show_default=True, help='Interface to bind.')
@click.option('--port', default=Config.MEMORY_PORT, type=int, show_default=True, help='Port to bind.')
@click.option('--debug', is_flag=True, help='Enable Flask debug mode.')
def serve(host, port, debug):
    """Run the Memory Rush game server."""
    app = create_app()
    app.logger.info(f"[serve] host={host} port={port} pairs={app.config['NUM_PAIRS']} max_players={app.config['MAX_PLAYERS']}")
    try:
        socketio.run(app, host=host, port=port, debug=debug, allow_unsafe_werkzeug=True)
    except OSError as exc:
        # Only a failed bind is fatal to the server
        app.logger.error(f"[bind-failed] host={host} port={port} error={exc}")
        raise click.ClickException(f"could not bind {host}:{port}: {exc}")


if __name__ == '__main__':
    serve()
