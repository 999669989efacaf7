from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import json
import random
import click
from config import Config

allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Import and register blueprints here
    from norster.main import main
    flask_app.register_blueprint(main)

    from norster.api.games import games
    # Mount game routes under /api to match frontend API client
    flask_app.register_blueprint(games, url_prefix='/api/games')

    # Register Socket.IO event handlers
    from norster.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('simulate')
    @click.argument('tracks_file', type=click.File('r'))
    @click.option('--players', '-p', multiple=True, required=True, help='Player name; repeat per player.')
    @click.option('--tokens', default=None, type=int, help='Starting tokens per player.')
    @click.option('--seed', default=None, type=int, help='Shuffle seed.')
    def simulate_command(tracks_file, players, tokens, seed):
        """Plays a game where every placement is correct and prints the standings."""
        from norster.models import PlayerConfig
        from norster.services.games import GameEngine, GameError, SetupLimits, parse_tracks

        try:
            raw = json.load(tracks_file)
        except ValueError as exc:
            raise click.ClickException(f'Unreadable tracks file: {exc}')
        if tokens is None:
            tokens = flask_app.config['DEFAULT_STARTING_TOKENS']
        try:
            engine = GameEngine(
                parse_tracks(raw),
                PlayerConfig(names=tuple(players), starting_tokens=tokens),
                win_score=flask_app.config['WIN_SCORE'],
                rng=random.Random(seed),
                limits=SetupLimits.from_config(flask_app.config),
            )
            rounds = 0
            while engine.winner is None:
                track = engine.draw()
                engine.reveal()
                engine.check_year_guess(track.year)
                engine.resolve_placement(True)
                rounds += 1
        except GameError as exc:
            raise click.ClickException(str(exc))

        click.echo(f'{engine.winner} wins after {rounds} rounds')
        for p in engine.players:
            click.echo(f'  {p.name}: {p.score} cards, {p.tokens} tokens')

    flask_app.cli.add_command(simulate_command)

    return flask_app
