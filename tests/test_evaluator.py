import random

from bingo.models import Player
from bingo.services.bingo.cards import FREE, LETTERS, generate_card
from bingo.services.bingo.evaluator import check_card_for_win, find_winners, winning_lines


def make_card():
    return generate_card(random.Random(42))


def tokens(card, cells):
    out = []
    for letter, row in cells:
        value = card[letter][row]
        if value != FREE:
            out.append(f"{letter}{value}")
    return out


def test_empty_draw_never_wins():
    assert not check_card_for_win(make_card(), [])


def test_row_win():
    card = make_card()
    drawn = tokens(card, [(letter, 0) for letter in LETTERS])
    assert check_card_for_win(card, drawn)
    assert {'type': 'row', 'index': 0} in winning_lines(card, drawn)


def test_column_win():
    card = make_card()
    drawn = tokens(card, [('O', row) for row in range(5)])
    assert check_card_for_win(card, drawn)
    assert winning_lines(card, drawn) == [{'type': 'column', 'index': 4}]


def test_middle_row_uses_free_cell():
    card = make_card()
    drawn = tokens(card, [(letter, 2) for letter in LETTERS])
    assert len(drawn) == 4
    assert check_card_for_win(card, drawn)


def test_both_diagonals():
    card = make_card()
    main = tokens(card, [(LETTERS[i], i) for i in range(5)])
    anti = tokens(card, [(LETTERS[4 - i], i) for i in range(5)])
    assert winning_lines(card, main) == [{'type': 'diagonal', 'index': 0}]
    assert winning_lines(card, anti) == [{'type': 'diagonal', 'index': 1}]


def test_four_of_five_is_not_a_win():
    card = make_card()
    drawn = tokens(card, [(letter, 0) for letter in LETTERS[:4]])
    assert not check_card_for_win(card, drawn)


def test_verdict_ignores_draw_order():
    card = make_card()
    drawn = tokens(card, [('I', row) for row in range(5)]) + ['B1', 'O70', 'G50']
    rng = random.Random(9)
    verdicts = set()
    for _ in range(20):
        shuffled = list(drawn)
        rng.shuffle(shuffled)
        verdicts.add(check_card_for_win(card, shuffled))
    assert verdicts == {True}


def test_find_winners_collects_all_and_skips_previous_winners():
    card = make_card()
    other = generate_card(random.Random(43))
    pool = [card, other]
    drawn = tokens(card, [(letter, 1) for letter in LETTERS])
    players = [
        Player(id='p1', user_id='u1', card_indices=[0], card_cost=1, joined_at=''),
        Player(id='p2', user_id='u2', card_indices=[0, 1], card_cost=2, joined_at=''),
        Player(id='p3', user_id='u3', card_indices=[0], card_cost=1, joined_at='', has_won=True),
    ]
    winners = find_winners(players, pool, drawn, last_draw=drawn[-1])
    assert [w['playerId'] for w in winners] == ['p1', 'p2']
    assert 0 in winners[1]['cardIndices']
    assert winners[0]['winningDraw'] == drawn[-1]
