"""Line-based win detection.

Pure functions only: no store, no clock, no randomness.
"""

from typing import Any, Dict, Iterable, List, Sequence

from .cards import CARD_SIZE, FREE, LETTERS, Card


def _token(letter: str, value) -> str:
    return FREE if value == FREE else f"{letter}{value}"


def card_lines(card: Card) -> List[Dict[str, Any]]:
    """The 12 lines of a card: 5 rows, 5 columns, 2 diagonals."""
    lines = []
    for row in range(CARD_SIZE):
        lines.append({
            'type': 'row',
            'index': row,
            'cells': [_token(letter, card[letter][row]) for letter in LETTERS],
        })
    for col, letter in enumerate(LETTERS):
        lines.append({
            'type': 'column',
            'index': col,
            'cells': [_token(letter, v) for v in card[letter]],
        })
    lines.append({
        'type': 'diagonal',
        'index': 0,
        'cells': [_token(LETTERS[i], card[LETTERS[i]][i]) for i in range(CARD_SIZE)],
    })
    lines.append({
        'type': 'diagonal',
        'index': 1,
        'cells': [_token(LETTERS[CARD_SIZE - 1 - i], card[LETTERS[CARD_SIZE - 1 - i]][i]) for i in range(CARD_SIZE)],
    })
    return lines


def winning_lines(card: Card, drawn: Iterable[str]) -> List[Dict[str, Any]]:
    drawn = set(drawn)
    return [
        {'type': line['type'], 'index': line['index']}
        for line in card_lines(card)
        if all(cell == FREE or cell in drawn for cell in line['cells'])
    ]


def check_card_for_win(card: Card, drawn: Iterable[str]) -> bool:
    return bool(winning_lines(card, drawn))


def find_winners(players: Sequence, pool: Sequence[Card], drawn: Iterable[str],
                 last_draw: str = None, evaluate=check_card_for_win) -> List[Dict[str, Any]]:
    """Collect every player (not already a winner) holding a winning card.

    ``players`` are ``Player`` records; their ``card_indices`` point into
    ``pool``. All winners of one pass are returned together.
    """
    drawn = set(drawn)
    winners = []
    for player in players:
        if player.has_won:
            continue
        cards = [i for i in player.card_indices if 0 <= i < len(pool)]
        winning_cards = [i for i in cards if evaluate(pool[i], drawn)]
        if winning_cards:
            winners.append({
                'userId': player.user_id,
                'playerId': player.id,
                'cardIndices': winning_cards,
                'winningDraw': last_draw,
            })
    return winners
