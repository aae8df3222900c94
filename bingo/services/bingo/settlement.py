from decimal import ROUND_DOWN, Decimal
from typing import Any, Dict, List

from bingo.models import GameSession

PRIZE_POOL_RATIO = 0.8
CENT = Decimal('0.01')


def total_pot(session: GameSession) -> float:
    return float(sum(p.card_cost for p in session.players))


def prize_per_winner(pot: float, winner_count: int, ratio: float = PRIZE_POOL_RATIO) -> float:
    """Even split of the prize pool in whole cents; 0 when nobody won.

    Rounded down so the credited total never exceeds the pool.
    """
    if winner_count <= 0:
        return 0.0
    share = Decimal(str(pot)) * Decimal(str(ratio)) / winner_count
    return float(share.quantize(CENT, rounding=ROUND_DOWN))


def apply_settlement(session: GameSession, winners: List[Dict[str, Any]],
                     ratio: float = PRIZE_POOL_RATIO) -> float:
    """Record pot, prize and winner flags on the session.

    Mutates ``session`` and each winner entry in place. Wallet credits are
    made by the caller, once, guarded by ``session.settled``.
    """
    pot = total_pot(session)
    prize = prize_per_winner(pot, len(winners), ratio)
    winner_ids = {w['playerId'] for w in winners}
    for player in session.players:
        if player.id in winner_ids:
            player.has_won = True
            player.prize += prize
    for w in winners:
        w['prize'] = prize
    session.winners = winners
    session.total_pot = pot
    session.prize_per_winner = prize
    return prize
