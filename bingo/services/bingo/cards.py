"""Card generation and the draw source.

A card maps each column letter to five values; the centre of the N column
is the FREE marker. Draw tokens are column letter + number ("B7", "O61").
"""

import random
from typing import Dict, Iterable, List, Optional

COLUMNS = (
    ('B', 1, 15),
    ('I', 16, 30),
    ('N', 31, 45),
    ('G', 46, 60),
    ('O', 61, 75),
)
LETTERS = tuple(letter for letter, _, _ in COLUMNS)
RANGES = {letter: (lo, hi) for letter, lo, hi in COLUMNS}
FREE = 'FREE'
FREE_COLUMN = 'N'
FREE_ROW = 2
CARD_SIZE = 5
TOTAL_NUMBERS = 75

Card = Dict[str, list]


def generate_card(rng: Optional[random.Random] = None) -> Card:
    rng = rng or random
    card = {}
    for letter, lo, hi in COLUMNS:
        values = list(range(lo, hi + 1))
        rng.shuffle(values)
        card[letter] = values[:CARD_SIZE]
    card[FREE_COLUMN][FREE_ROW] = FREE
    return card


def generate_card_pool(n: int, rng: Optional[random.Random] = None) -> List[Card]:
    return [generate_card(rng) for _ in range(n)]


def draw_next(used: Iterable[str], rng: Optional[random.Random] = None) -> Optional[str]:
    """Pick the next token not in ``used``.

    Chooses uniformly among columns that still have undrawn values, then
    uniformly among that column's undrawn values. Returns None once all 75
    tokens are used.
    """
    rng = rng or random
    used = set(used)
    open_columns = []
    for letter, lo, hi in COLUMNS:
        remaining = [n for n in range(lo, hi + 1) if f"{letter}{n}" not in used]
        if remaining:
            open_columns.append((letter, remaining))
    if not open_columns:
        return None
    letter, remaining = rng.choice(open_columns)
    return f"{letter}{rng.choice(remaining)}"


def generate_draw_sequence(rng: Optional[random.Random] = None) -> List[str]:
    draws: List[str] = []
    while True:
        token = draw_next(draws, rng)
        if token is None:
            return draws
        draws.append(token)


def is_valid_draw(token) -> bool:
    if not isinstance(token, str) or not 2 <= len(token) <= 3:
        return False
    letter, digits = token[0].upper(), token[1:]
    if letter not in RANGES or not digits.isdigit():
        return False
    lo, hi = RANGES[letter]
    return lo <= int(digits) <= hi


def validate_card(card) -> List[str]:
    """Return the rule violations of ``card``; empty when valid."""
    errors = []
    for letter, lo, hi in COLUMNS:
        column = card.get(letter) if isinstance(card, dict) else None
        if not isinstance(column, list) or len(column) != CARD_SIZE:
            errors.append(f"Column {letter} must have exactly {CARD_SIZE} numbers")
            continue
        numbers = [v for v in column if v != FREE]
        if len(numbers) != len(set(numbers)):
            errors.append(f"Column {letter} has duplicate numbers")
        for row, value in enumerate(column):
            if value == FREE:
                if (letter, row) != (FREE_COLUMN, FREE_ROW):
                    errors.append(f"{letter}{row + 1} cannot be FREE")
            elif not isinstance(value, int) or not lo <= value <= hi:
                errors.append(f"{letter}{row + 1} must be between {lo}-{hi}")
    centre = card.get(FREE_COLUMN) if isinstance(card, dict) else None
    if isinstance(centre, list) and len(centre) == CARD_SIZE and centre[FREE_ROW] != FREE:
        errors.append(f"{FREE_COLUMN}{FREE_ROW + 1} (center) must be FREE")
    return errors


def card_rows(card: Card) -> List[list]:
    """Row-major 5x5 grid for display."""
    return [[card[letter][row] for letter in LETTERS] for row in range(CARD_SIZE)]
