from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required

from livequiz.auth import HostUser, check_host_key

main = Blueprint('main', __name__)


def _controller():
    return current_app.extensions['livequiz']


@main.route('/health')
def health():
    return jsonify({'ok': True})


@main.route('/')
def index():
    catalog = _controller().catalog
    return jsonify({
        'message': 'Live quiz server. Players join over Socket.IO; the host logs in at /host-login.',
        'title': catalog.title,
        'questions': len(catalog),
    })


@main.route('/host-login', methods=['POST', 'OPTIONS'])
def host_login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    if not check_host_key(current_app.config, data.get('key')):
        current_app.logger.info(f"[host-login] rejected from {request.remote_addr}")
        return jsonify({'success': False, 'error': 'Invalid host key'}), 401
    host = HostUser()
    login_user(host)
    current_app.logger.info(f"[host-login] accepted from {request.remote_addr}")
    return jsonify({'success': True, 'user': host.to_dict()})


@main.route('/host-logout', methods=['POST'])
@login_required
def host_logout():
    logout_user()
    return jsonify({'success': True})


@main.route('/api/rooms/<string:code>', methods=['GET'])
def room_state(code):
    room = _controller().registry.get(code)
    if room is None:
        return jsonify({'error': 'Room not found'}), 404
    with room.lock:
        return jsonify(room.public_state())
