from flask import Blueprint, Response, current_app, jsonify, request, stream_with_context
import json

from bingo.errors import NotFoundError
from bingo.models import FINISHED
from bingo.schemas import JoinSessionSchema, PollQuerySchema
from bingo.services.bingo import get_engine


sessions = Blueprint('sessions', __name__)

_join_schema = JoinSessionSchema()
_poll_schema = PollQuerySchema()


def format_sse(event: str, data) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def _game_end_payload(session) -> dict:
    return {
        'reason': 'Session ended',
        'winners': session.winners,
        'prizePerWinner': session.prize_per_winner,
        'totalPot': session.total_pot,
        'drawnNumbers': list(session.drawn_numbers),
        'finishedAt': session.finished_at,
    }


@sessions.route('', methods=['POST'])
def create_session():
    engine = get_engine()
    session = engine.registry.create_session()
    return jsonify({
        'sessionId': session.id,
        'session': session.to_dict(),
    })


@sessions.route('/join', methods=['POST'])
def join_session():
    data = _join_schema.load(request.get_json(silent=True) or {})
    engine = get_engine()
    result = engine.registry.join_session(
        data.get('sessionId'),
        data['userId'],
        data['cardIndices'],
        data['cardCost'],
    )
    return jsonify({
        'sessionId': result.session.id,
        'playerId': result.player.id,
        'gameState': result.session.game_state,
        'message': 'Joined session successfully' if result.joined else 'Already in session',
    })


@sessions.route('/<string:session_id>', methods=['GET'])
def get_session_state(session_id):
    session = get_engine().registry.require_session(session_id)
    payload = session.to_public_dict()
    if session.game_state == FINISHED:
        payload['winners'] = session.winners
        payload['prizePerWinner'] = session.prize_per_winner
        payload['totalPot'] = session.total_pot
        payload['finishedAt'] = session.finished_at
    return jsonify(payload)


@sessions.route('/<string:session_id>/draws', methods=['GET'])
def poll_draws(session_id):
    """Polling fallback for clients without SSE support."""
    args = _poll_schema.load(request.args)
    session = get_engine().registry.require_session(session_id)
    last_index = args['lastDrawIndex']
    finished = session.game_state == FINISHED
    return jsonify({
        'sessionId': session.id,
        'gameState': session.game_state,
        'countdown': session.countdown if session.game_state == 'countdown' else 0,
        'drawnNumbers': list(session.drawn_numbers),
        'newDraws': session.drawn_numbers[last_index:],
        'playerCount': len(session.players),
        'winners': session.winners if finished else [],
        'prizePerWinner': session.prize_per_winner if finished else 0,
        'lastDrawIndex': len(session.drawn_numbers),
    })


@sessions.route('/<string:session_id>/stream', methods=['GET'])
def stream_session(session_id):
    engine = get_engine()
    engine.registry.require_session(session_id)
    keepalive = float(current_app.config.get('SSE_KEEPALIVE_SEC', 30))
    logger = current_app.logger

    # Subscribe before taking the snapshot so no event falls in between
    sub = engine.channel.subscribe(session_id)
    session = engine.registry.get_session(session_id)
    if session is None or session.game_state == FINISHED:
        engine.channel.unsubscribe(sub)
        sub = None
    if session is None:
        raise NotFoundError('Session not found')
    snapshot = session.to_public_dict()
    snapshot.pop('players', None)

    def generate():
        try:
            yield format_sse('session', snapshot)
            if sub is None:
                yield format_sse('gameEnd', _game_end_payload(session))
                return
            for item in sub.listen(keepalive):
                if item is None:
                    yield ': keepalive\n\n'
                    continue
                event, data = item
                yield format_sse(event, data)
        finally:
            if sub is not None:
                engine.channel.unsubscribe(sub)
                logger.info(f"[unsubscribe] session={session_id}")

    headers = {
        'Cache-Control': 'no-cache',
        'X-Accel-Buffering': 'no',
    }
    return Response(stream_with_context(generate()), mimetype='text/event-stream', headers=headers)
