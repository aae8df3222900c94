from flask import Blueprint, jsonify

from bingo.services.bingo import get_engine
from bingo.services.bingo.cards import card_rows

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Bingo game server!'})

@main.route('/health')
def health():
    return jsonify({'status': 'ok'})

@main.route('/cards')
def list_cards():
    """The shared card pool with which slots are currently reserved."""
    registry = get_engine().registry
    pool = registry.card_pool()
    reserved = registry.reservations()
    return jsonify({
        'cards': [
            {
                'index': i,
                'card': card,
                'rows': card_rows(card),
                'reserved': i in reserved,
            }
            for i, card in enumerate(pool)
        ],
        'maxCardsPerPlayer': registry.max_cards,
    })
