"""Session creation, lookup, card reservation and player intake."""

import logging
import random
import time
import uuid
from typing import Callable, Dict, List, Optional

from bingo.errors import CardUnavailable, InvalidSelection, NotFoundError, SessionClosed, SessionFull
from bingo.models import COUNTDOWN, FINISHED, PLAYING, WAITING, GameSession, Player, isoformat
from bingo.store import Store
from .cards import generate_card_pool
from .channel import BroadcastChannel

POOL_KEY = 'cards:pool'
RESERVATIONS_KEY = 'cards:reservations'
CURRENT_SESSION_KEY = 'sessions:current'


def session_key(session_id: str) -> str:
    return f"session:{session_id}"


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class JoinResult:
    def __init__(self, session: GameSession, player: Player, joined: bool, countdown_started: bool) -> None:
        self.session = session
        self.player = player
        # False when the user was already in the session
        self.joined = joined
        self.countdown_started = countdown_started


class SessionRegistry:
    def __init__(self, store: Store, *, min_players: int = 2, max_players: int = 50,
                 countdown_sec: int = 60, pool_size: int = 20, max_cards: int = 3,
                 session_ttl: float = 3600, finished_ttl: float = 600,
                 clock: Callable[[], float] = time.time, rng: Optional[random.Random] = None,
                 on_countdown: Optional[Callable[[str], None]] = None,
                 channel: Optional[BroadcastChannel] = None,
                 logger: Optional[logging.Logger] = None) -> None:
        self.store = store
        self.min_players = min_players
        self.max_players = max_players
        self.countdown_sec = countdown_sec
        self.pool_size = pool_size
        self.max_cards = max_cards
        self.session_ttl = session_ttl
        self.finished_ttl = finished_ttl
        self.clock = clock
        self.rng = rng
        # Called with the session id when a session first enters countdown
        self.on_countdown = on_countdown
        # Join and countdown transitions are announced here; the loop announces the rest
        self.channel = channel
        self.logger = logger or logging.getLogger(__name__)

    # ---- Sessions ----

    def create_session(self) -> GameSession:
        session = GameSession(
            id=new_id('session'),
            created_at=isoformat(self.clock()),
            game_state=WAITING,
            countdown=self.countdown_sec,
            min_players=self.min_players,
            max_players=self.max_players,
            active=True,
        )
        self.save_session(session)
        self.logger.info(f"[session-create] session={session.id}")
        return session

    def get_session(self, session_id: str) -> Optional[GameSession]:
        data = self.store.get(session_key(session_id))
        return GameSession.from_dict(data) if data else None

    def require_session(self, session_id: str) -> GameSession:
        session = self.get_session(session_id)
        if session is None:
            raise NotFoundError('Session not found')
        return session

    def save_session(self, session: GameSession) -> None:
        ttl = self.finished_ttl if session.game_state == FINISHED else self.session_ttl
        self.store.put(session_key(session.id), session.to_dict(), ttl)

    def delete_session(self, session_id: str) -> None:
        self.store.delete(session_key(session_id))
        if self.store.get(CURRENT_SESSION_KEY) == session_id:
            self.store.delete(CURRENT_SESSION_KEY)

    def current_session(self) -> GameSession:
        """The canonical open session, created when missing or closed."""
        current_id = self.store.get(CURRENT_SESSION_KEY)
        session = self.get_session(current_id) if current_id else None
        if (session is None or session.game_state not in (WAITING, COUNTDOWN)
                or len(session.players) >= session.max_players):
            session = self.create_session()
            self.store.put(CURRENT_SESSION_KEY, session.id, self.session_ttl)
        return session

    # ---- Cards ----

    def card_pool(self) -> List[dict]:
        pool = self.store.get(POOL_KEY)
        if not pool:
            pool = generate_card_pool(self.pool_size, self.rng)
            self.store.put(POOL_KEY, pool)
        return pool

    def reservations(self) -> Dict[int, str]:
        raw = self.store.get(RESERVATIONS_KEY) or {}
        return {int(k): v for k, v in raw.items()}

    def _save_reservations(self, reserved: Dict[int, str]) -> None:
        self.store.put(RESERVATIONS_KEY, {str(k): v for k, v in reserved.items()}, self.session_ttl)

    def reserve_cards(self, indices: List[int], user_id: str) -> None:
        reserved = self.reservations()
        taken = [i for i in indices if i in reserved and reserved[i] != user_id]
        if taken:
            raise CardUnavailable(
                f"Card {taken[0]} is already reserved",
                details={'cardIndices': taken},
            )
        for i in indices:
            reserved[i] = user_id
        self._save_reservations(reserved)

    def release_cards(self, session: GameSession) -> int:
        reserved = self.reservations()
        released = 0
        for player in session.players:
            for i in player.card_indices:
                if reserved.get(i) == player.user_id:
                    del reserved[i]
                    released += 1
        if released:
            self._save_reservations(reserved)
        return released

    def validate_selection(self, card_indices) -> List[int]:
        if not isinstance(card_indices, list) or not 1 <= len(card_indices) <= self.max_cards:
            raise InvalidSelection(f"Must select 1-{self.max_cards} cards")
        for index in card_indices:
            if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < self.pool_size:
                raise InvalidSelection(f"Invalid card index: {index}. Must be 0-{self.pool_size - 1}.")
        if len(set(card_indices)) != len(card_indices):
            raise InvalidSelection('Card indices must be unique')
        return list(card_indices)

    # ---- Players ----

    def join_session(self, session_id: Optional[str], user_id: str, card_indices, card_cost: float) -> JoinResult:
        indices = self.validate_selection(card_indices)

        session = self.require_session(session_id) if session_id else self.current_session()

        existing = session.find_player(user_id)
        if existing is not None:
            return JoinResult(session, existing, joined=False, countdown_started=False)

        if session.game_state in (PLAYING, FINISHED) or not session.active:
            raise SessionClosed()
        if len(session.players) >= session.max_players:
            raise SessionFull()

        self.reserve_cards(indices, user_id)

        player = Player(
            id=new_id('player'),
            user_id=user_id,
            card_indices=indices,
            card_cost=float(card_cost),
            joined_at=isoformat(self.clock()),
        )
        session.players.append(player)
        countdown_started = False
        if session.game_state == WAITING and len(session.players) >= session.min_players:
            session.game_state = COUNTDOWN
            countdown_started = True
        self.save_session(session)
        self.logger.info(
            f"[join] session={session.id} player={player.id} cards={indices} players={len(session.players)} state={session.game_state}"
        )

        if self.channel is not None:
            self.channel.publish(session.id, 'gameState', {
                'gameState': session.game_state,
                'countdown': session.countdown,
                'playerCount': len(session.players),
            })
        if countdown_started and self.on_countdown is not None:
            self.on_countdown(session.id)
        return JoinResult(session, player, joined=True, countdown_started=countdown_started)
