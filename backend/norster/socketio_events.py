from flask_socketio import join_room, leave_room, emit
from flask import request
from norster import socketio
from norster.api.games import sessions, end_session
from typing import Dict, Any


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    _sid_to_ctx.pop(_get_sid(), None)


def handle_join_game(data):
    game_code = (data or {}).get('game_code')
    is_session_owner = bool((data or {}).get('is_session_owner'))
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    code = game_code.upper()
    room = f"game:{code}"
    join_room(room)
    _sid_to_ctx[_get_sid()] = {'game_code': code, 'is_session_owner': is_session_owner}
    emit('joined', {'room': room})
    # Late joiners get the current snapshot straight away
    engine = sessions.get(code)
    if engine is not None:
        payload = engine.snapshot().to_dict()
        payload['game_code'] = code
        emit('state_update', payload)


def handle_leave_game(data):
    game_code = (data or {}).get('game_code')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    code = game_code.upper()
    room = f"game:{code}"
    leave_room(room)
    emit('left', {'room': room})
    # The facilitator quitting explicitly ends the game for everyone
    ctx = _sid_to_ctx.pop(_get_sid(), None)
    if ctx and ctx.get('is_session_owner') and ctx.get('game_code') == code:
        end_session(code)


def handle_ping(data):
    emit('pong', data or {})


_sid_to_ctx: Dict[str, Dict[str, Any]] = {}

def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('join_game', handle_join_game, namespace=namespace)
        socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
