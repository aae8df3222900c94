from flask_socketio import join_room, leave_room, emit

from bingo.services.bingo import get_engine
from bingo.services.bingo.channel import room_for


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_session(data):
    session_id = (data or {}).get('session_id')
    if not session_id:
        emit('error', {'message': 'session_id is required'})
        return
    session = get_engine().registry.get_session(session_id)
    if session is None:
        emit('error', {'message': 'Session not found'})
        return
    room = room_for(session_id)
    join_room(room)
    emit('joined', {'room': room})
    # Same initial snapshot the SSE stream sends
    snapshot = session.to_public_dict()
    snapshot.pop('players', None)
    emit('session', snapshot)


def handle_leave_session(data):
    session_id = (data or {}).get('session_id')
    if not session_id:
        emit('error', {'message': 'session_id is required'})
        return
    room = room_for(session_id)
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from bingo import socketio

    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_session', handle_join_session, namespace=namespace)
        socketio.on_event('leave_session', handle_leave_session, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
