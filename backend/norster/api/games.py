from flask import Blueprint, jsonify, request, current_app, abort, make_response
from norster import socketio
from norster.models import PlayerConfig, generate_game_code, playback_uri
from norster.services.games import GameEngine, GameError, SetupLimits, parse_tracks
import random
import time
from typing import Dict


games = Blueprint('games', __name__)

# Live sessions, keyed by game code. In-memory only; a restart ends every game.
sessions: Dict[str, GameEngine] = {}
_last_controller_action: dict[str, float] = {}


@games.errorhandler(GameError)
def handle_game_error(exc: GameError):
    current_app.logger.info(f"[rejected] {exc.code}: {exc}")
    return jsonify({'error': str(exc), 'code': exc.code}), exc.status_code


def _engine_or_404(game_code: str) -> GameEngine:
    engine = sessions.get(game_code.upper())
    if engine is None:
        abort(make_response(jsonify({'error': 'Game not found'}), 404))
    return engine


def _debounced(action: str, game_code: str) -> bool:
    try:
        debounce_ms = int(current_app.config.get('CONTROLLER_DEBOUNCE_MS', 0))
    except (TypeError, ValueError):
        debounce_ms = 0
    if debounce_ms <= 0:
        return False
    key = f"{action}:{game_code.upper()}"
    now = time.time() * 1000.0
    last = _last_controller_action.get(key, 0)
    if now - last < debounce_ms:
        return True
    _last_controller_action[key] = now
    return False


def _state_payload(game_code: str, engine: GameEngine) -> dict:
    payload = engine.snapshot().to_dict()
    payload['game_code'] = game_code.upper()
    return payload


def _broadcast(game_code: str, engine: GameEngine) -> dict:
    payload = _state_payload(game_code, engine)
    socketio.emit('state_update', payload, to=f"game:{game_code.upper()}", namespace='/ws')
    return payload


def end_session(game_code: str) -> bool:
    """Drop the engine for ``game_code`` and tell connected clients."""
    code = game_code.upper()
    engine = sessions.pop(code, None)
    _last_controller_action.pop(f"draw:{code}", None)
    _last_controller_action.pop(f"skip:{code}", None)
    _last_controller_action.pop(f"resolve:{code}", None)
    socketio.emit('session_ended', {'game_code': code}, to=f"game:{code}", namespace='/ws')
    return engine is not None


@games.route('/create', methods=['POST'])
def create_game():
    data = request.get_json(silent=True) or {}
    tracks = parse_tracks(data.get('tracks', []))
    starting_tokens = data.get('starting_tokens', current_app.config.get('DEFAULT_STARTING_TOKENS', 3))
    config = PlayerConfig(names=data.get('players'), starting_tokens=starting_tokens)

    seed = data.get('seed', current_app.config.get('SHUFFLE_SEED'))
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        return jsonify({'error': 'seed must be an integer'}), 400
    engine = GameEngine(
        tracks,
        config,
        win_score=int(current_app.config.get('WIN_SCORE', 10)),
        rng=random.Random(seed),
        limits=SetupLimits.from_config(current_app.config),
    )
    code = generate_game_code(sessions)
    sessions[code] = engine
    current_app.logger.info(f"[create] game={code} players={len(engine.players)} tracks={len(tracks)}")
    return jsonify({
        'message': 'New game created!',
        'game_code': code,
        'state': _state_payload(code, engine),
    }), 201


@games.route('/<string:game_code>/state', methods=['GET'])
def get_game_state(game_code):
    engine = _engine_or_404(game_code)
    return jsonify(_state_payload(game_code, engine))


@games.route('/<string:game_code>/draw', methods=['POST'])
def draw_card(game_code):
    engine = _engine_or_404(game_code)
    if _debounced('draw', game_code):
        return jsonify({'message': 'debounced'}), 202
    engine.draw()
    return jsonify(_broadcast(game_code, engine))


@games.route('/<string:game_code>/reveal', methods=['POST'])
def reveal_card(game_code):
    engine = _engine_or_404(game_code)
    engine.reveal()
    return jsonify(_broadcast(game_code, engine))


@games.route('/<string:game_code>/skip', methods=['POST'])
def skip_card(game_code):
    engine = _engine_or_404(game_code)
    if _debounced('skip', game_code):
        return jsonify({'message': 'debounced'}), 202
    engine.skip()
    return jsonify(_broadcast(game_code, engine))


@games.route('/<string:game_code>/guess', methods=['POST'])
def guess_year(game_code):
    engine = _engine_or_404(game_code)
    data = request.get_json(silent=True) or {}
    guess = data.get('guess')
    if isinstance(guess, int) and not isinstance(guess, bool):
        guess = str(guess)
    engine.check_year_guess(guess, data.get('guesser_index'))
    return jsonify(_broadcast(game_code, engine))


@games.route('/<string:game_code>/resolve', methods=['POST'])
def resolve_placement(game_code):
    engine = _engine_or_404(game_code)
    data = request.get_json(silent=True) or {}
    correct = data.get('correct')
    if not isinstance(correct, bool):
        return jsonify({'error': 'correct must be true or false'}), 400
    if _debounced('resolve', game_code):
        return jsonify({'message': 'debounced'}), 202
    engine.resolve_placement(correct)
    if engine.winner:
        current_app.logger.info(f"[finish] game={game_code.upper()} winner={engine.winner}")
    return jsonify(_broadcast(game_code, engine))


@games.route('/<string:game_code>/tokens', methods=['POST'])
def adjust_tokens(game_code):
    engine = _engine_or_404(game_code)
    data = request.get_json(silent=True) or {}
    engine.adjust_tokens(data.get('player_index'), data.get('delta'))
    return jsonify(_broadcast(game_code, engine))


@games.route('/<string:game_code>/new', methods=['POST'])
def new_game(game_code):
    engine = _engine_or_404(game_code)
    data = request.get_json(silent=True) or {}
    config = PlayerConfig(
        names=data.get('players', engine.config.names),
        starting_tokens=data.get('starting_tokens', engine.config.starting_tokens),
    )
    engine.new_game(config)
    current_app.logger.info(f"[new_game] game={game_code.upper()} players={len(engine.players)}")
    return jsonify(_broadcast(game_code, engine))


@games.route('/<string:game_code>/playback', methods=['GET'])
def get_playback(game_code):
    engine = _engine_or_404(game_code)
    track = engine.current_track
    if track is None:
        return jsonify({'error': 'No card in play'}), 409
    scheme = current_app.config.get('PLAYBACK_URI_SCHEME', 'spotify')
    return jsonify({'track_id': track.id, 'uri': playback_uri(track.id, scheme)})


@games.route('/<string:game_code>', methods=['DELETE'])
def delete_game(game_code):
    if not end_session(game_code):
        return jsonify({'error': 'Game not found'}), 404
    current_app.logger.info(f"[end] game={game_code.upper()}")
    return jsonify({'ok': True})
