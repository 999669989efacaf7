from flask import Blueprint, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Norster game server!'})

@main.route('/health')
def health():
    from norster.api.games import sessions
    return jsonify({'status': 'ok', 'sessions': len(sessions)})
