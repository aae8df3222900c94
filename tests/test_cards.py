import random

from bingo.services.bingo.cards import (
    COLUMNS,
    FREE,
    card_rows,
    draw_next,
    generate_card,
    generate_card_pool,
    generate_draw_sequence,
    is_valid_draw,
    validate_card,
)


ALL_TOKENS = {f"{letter}{n}" for letter, lo, hi in COLUMNS for n in range(lo, hi + 1)}


def test_generated_cards_respect_column_ranges():
    rng = random.Random(1)
    for _ in range(200):
        card = generate_card(rng)
        for letter, lo, hi in COLUMNS:
            values = [v for v in card[letter] if v != FREE]
            assert len(card[letter]) == 5
            assert len(values) == len(set(values))
            assert all(lo <= v <= hi for v in values)
        assert card['N'][2] == FREE
        assert sum(col.count(FREE) for col in card.values()) == 1
        assert validate_card(card) == []


def test_card_pool_size():
    pool = generate_card_pool(20, random.Random(2))
    assert len(pool) == 20
    assert all(validate_card(c) == [] for c in pool)


def test_full_draw_sequence_is_complete_and_unique():
    for seed in range(5):
        draws = generate_draw_sequence(random.Random(seed))
        assert len(draws) == 75
        assert len(set(draws)) == 75
        assert set(draws) == ALL_TOKENS


def test_draw_next_reports_exhaustion():
    assert draw_next(ALL_TOKENS) is None


def test_draw_next_skips_exhausted_columns():
    used = {f"B{n}" for n in range(1, 16)}
    rng = random.Random(3)
    for _ in range(50):
        token = draw_next(used, rng)
        assert token is not None
        assert not token.startswith('B')


def test_draw_next_returns_last_remaining_token():
    remaining = 'G50'
    assert draw_next(ALL_TOKENS - {remaining}) == remaining


def test_is_valid_draw():
    assert is_valid_draw('B1')
    assert is_valid_draw('O75')
    assert is_valid_draw('n31')
    assert not is_valid_draw('B16')
    assert not is_valid_draw('X5')
    assert not is_valid_draw('B')
    assert not is_valid_draw(12)


def test_validate_card_reports_problems():
    card = generate_card(random.Random(4))
    card['B'][0] = 40
    card['N'][2] = 33
    errors = validate_card(card)
    assert any(e.startswith('B1') for e in errors)
    assert any('center' in e for e in errors)

    assert validate_card({'B': [1, 2]})


def test_card_rows_is_row_major():
    card = generate_card(random.Random(5))
    rows = card_rows(card)
    assert len(rows) == 5 and all(len(r) == 5 for r in rows)
    assert rows[2][2] == FREE
    assert rows[0][0] == card['B'][0]
    assert rows[4][3] == card['G'][4]
