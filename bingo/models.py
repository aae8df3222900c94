from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bingo import db

# Game states, in lifecycle order
WAITING = 'waiting'
COUNTDOWN = 'countdown'
PLAYING = 'playing'
FINISHED = 'finished'
GAME_STATES = (WAITING, COUNTDOWN, PLAYING, FINISHED)


def isoformat(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class StoreEntry(db.Model):
    """One key of the SQL-backed state store."""
    __tablename__ = 'store_entry'
    key = db.Column(db.String(191), primary_key=True)
    value = db.Column(db.Text, nullable=False)  # JSON-encoded
    expires_at = db.Column(db.Float, nullable=True, index=True)  # epoch seconds, NULL = never

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


@dataclass
class Player:
    id: str
    user_id: str
    card_indices: List[int]
    card_cost: float
    joined_at: str
    has_won: bool = False
    prize: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'cardIndices': list(self.card_indices),
            'cardCost': self.card_cost,
            'joinedAt': self.joined_at,
            'hasWon': self.has_won,
            'prize': self.prize,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'joinedAt': self.joined_at,
            'cardCount': len(self.card_indices),
            'hasWon': self.has_won,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        return cls(
            id=data['id'],
            user_id=data['userId'],
            card_indices=[int(i) for i in data.get('cardIndices') or []],
            card_cost=float(data.get('cardCost') or 0),
            joined_at=data.get('joinedAt') or '',
            has_won=bool(data.get('hasWon')),
            prize=float(data.get('prize') or 0),
        )


@dataclass
class GameSession:
    id: str
    created_at: str
    players: List[Player] = field(default_factory=list)
    drawn_numbers: List[str] = field(default_factory=list)
    game_state: str = WAITING
    countdown: int = 60
    min_players: int = 2
    max_players: int = 50
    active: bool = True
    game_started_at: Optional[str] = None
    finished_at: Optional[str] = None
    winners: List[Dict[str, Any]] = field(default_factory=list)
    prize_per_winner: float = 0.0
    total_pot: float = 0.0
    # Prizes credited to wallets; guards against paying twice
    settled: bool = False

    def find_player(self, user_id: str) -> Optional[Player]:
        for p in self.players:
            if p.user_id == user_id:
                return p
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'createdAt': self.created_at,
            'players': [p.to_dict() for p in self.players],
            'drawnNumbers': list(self.drawn_numbers),
            'gameState': self.game_state,
            'countdown': self.countdown,
            'minPlayers': self.min_players,
            'maxPlayers': self.max_players,
            'active': self.active,
            'gameStartedAt': self.game_started_at,
            'finishedAt': self.finished_at,
            'winners': list(self.winners),
            'prizePerWinner': self.prize_per_winner,
            'totalPot': self.total_pot,
            'settled': self.settled,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Snapshot safe to hand to any client (no wallet user ids)."""
        return {
            'sessionId': self.id,
            'createdAt': self.created_at,
            'gameState': self.game_state,
            'countdown': self.countdown,
            'drawnNumbers': list(self.drawn_numbers),
            'playerCount': len(self.players),
            'minPlayers': self.min_players,
            'maxPlayers': self.max_players,
            'active': self.active,
            'gameStartedAt': self.game_started_at,
            'players': [p.to_public_dict() for p in self.players],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameSession':
        return cls(
            id=data['id'],
            created_at=data.get('createdAt') or '',
            players=[Player.from_dict(p) for p in data.get('players') or []],
            drawn_numbers=list(data.get('drawnNumbers') or []),
            game_state=data.get('gameState') or WAITING,
            countdown=int(data.get('countdown') or 0),
            min_players=int(data.get('minPlayers') or 2),
            max_players=int(data.get('maxPlayers') or 50),
            active=bool(data.get('active')),
            game_started_at=data.get('gameStartedAt'),
            finished_at=data.get('finishedAt'),
            winners=list(data.get('winners') or []),
            prize_per_winner=float(data.get('prizePerWinner') or 0),
            total_pot=float(data.get('totalPot') or 0),
            settled=bool(data.get('settled')),
        )


@dataclass
class Transaction:
    id: str
    user_id: str
    amount: float
    direction: str  # deposit | withdrawal
    status: str
    created_at: str
    reference_id: Optional[str] = None
    currency: str = 'ETB'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'transactionId': self.id,
            'userId': self.user_id,
            'amount': self.amount,
            'direction': self.direction,
            'status': self.status,
            'createdAt': self.created_at,
            'referenceId': self.reference_id,
            'currency': self.currency,
        }
