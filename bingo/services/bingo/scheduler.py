"""Per-session game loop: waiting -> countdown -> playing -> finished.

The supervisor keeps at most one loop per session. Each loop wakes every
``interval`` seconds and calls ``tick``; a tick either steps the countdown
or draws one number. The loop ends itself once the session is finished,
inactive, missing, or a tick raises. Tests construct the supervisor with
``autostart=False`` and call ``tick`` directly.
"""

import contextlib
import logging
import random
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Set

from bingo.models import COUNTDOWN, FINISHED, PLAYING, WAITING, GameSession, isoformat
from .cards import TOTAL_NUMBERS, draw_next
from .channel import BroadcastChannel
from .evaluator import check_card_for_win, find_winners
from .registry import SessionRegistry
from .settlement import PRIZE_POOL_RATIO, apply_settlement


def _thread_task(target, *args):
    worker = threading.Thread(target=target, args=args, daemon=True)
    worker.start()
    return worker


class GameLoopSupervisor:
    def __init__(self, registry: SessionRegistry, channel: BroadcastChannel, wallet=None, *,
                 app=None, interval: float = 1.0, autostart: bool = True,
                 start_task: Callable[..., Any] = _thread_task,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.time,
                 rng: Optional[random.Random] = None,
                 evaluate: Callable[[dict, Set[str]], bool] = check_card_for_win,
                 prize_ratio: float = PRIZE_POOL_RATIO,
                 logger: Optional[logging.Logger] = None) -> None:
        self.registry = registry
        self.channel = channel
        self.wallet = wallet
        self.app = app
        self.interval = interval
        self.autostart = autostart
        self._start_task = start_task
        self._sleep = sleep
        self.clock = clock
        self.rng = rng
        self.evaluate = evaluate
        self.prize_ratio = prize_ratio
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._running: Set[str] = set()

    # ---- Lifecycle ----

    def start(self, session_id: str) -> bool:
        """Begin ticking a session. Returns False if a loop already exists."""
        with self._lock:
            if session_id in self._running:
                self.logger.info(f"[loop-skip] session={session_id} already running")
                return False
            self._running.add(session_id)
        self.logger.info(f"[loop-start] session={session_id} interval={self.interval}s")
        if self.autostart:
            self._start_task(self._run, session_id)
        return True

    def stop(self, session_id: str) -> None:
        with self._lock:
            self._running.discard(session_id)

    def is_running(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._running

    def running_sessions(self) -> List[str]:
        with self._lock:
            return sorted(self._running)

    def _run(self, session_id: str) -> None:
        while self.is_running(session_id):
            self._sleep(self.interval)
            if not self.tick(session_id):
                break
        self.logger.info(f"[loop-stop] session={session_id}")

    def _context(self):
        if self.app is not None:
            return self.app.app_context()
        return contextlib.nullcontext()

    def tick(self, session_id: str) -> bool:
        """Advance one step. Returns True while the loop should keep going."""
        if not self.is_running(session_id):
            return False
        try:
            with self._context():
                keep_going = self._advance(session_id)
        except Exception:
            self.logger.exception(f"[tick-error] session={session_id} tearing down loop")
            self._abort(session_id)
            keep_going = False
        if not keep_going:
            self.stop(session_id)
        return keep_going

    def _abort(self, session_id: str) -> None:
        """Detach listeners and free the cards of a loop that crashed."""
        self.channel.close(session_id)
        try:
            with self._context():
                session = self.registry.get_session(session_id)
                if session is not None:
                    self.registry.release_cards(session)
        except Exception:
            self.logger.exception(f"[release-failed] session={session_id}")

    # ---- State machine ----

    def _advance(self, session_id: str) -> bool:
        session = self.registry.get_session(session_id)
        if session is None:
            self.logger.info(f"[loop-abort] session={session_id} record gone")
            self.channel.publish(session_id, 'gameEnd', {
                'reason': 'Session ended',
                'finishedAt': isoformat(self.clock()),
                'winners': [],
            })
            self.channel.close(session_id)
            return False
        if session.game_state == FINISHED or not session.active:
            self.channel.close(session_id)
            return False
        if session.game_state == WAITING:
            return True
        if session.game_state == COUNTDOWN:
            return self._countdown_step(session)
        if session.game_state == PLAYING:
            return self._draw_step(session)
        self.logger.warning(f"[loop-abort] session={session_id} unknown state={session.game_state}")
        return False

    def _countdown_step(self, session: GameSession) -> bool:
        session.countdown = max(0, session.countdown - 1)
        if session.countdown == 0:
            session.game_state = PLAYING
            session.game_started_at = isoformat(self.clock())
            self.registry.save_session(session)
            self.logger.info(f"[game-start] session={session.id} players={len(session.players)}")
            self.channel.publish(session.id, 'gameState', {
                'gameState': PLAYING,
                'gameStartedAt': session.game_started_at,
                'drawnNumbers': list(session.drawn_numbers),
                'playerCount': len(session.players),
            })
            return True
        self.registry.save_session(session)
        self.channel.publish(session.id, 'countdown', {
            'countdown': session.countdown,
            'gameState': COUNTDOWN,
        })
        return True

    def _draw_step(self, session: GameSession) -> bool:
        token = draw_next(session.drawn_numbers, self.rng)
        if token is None:
            self._finish(session, [], 'All numbers drawn')
            return False
        session.drawn_numbers.append(token)
        self.registry.save_session(session)
        self.logger.debug(f"[draw] session={session.id} n={len(session.drawn_numbers)} token={token}")
        self.channel.publish(session.id, 'draw', {
            'draw': token,
            'drawIndex': len(session.drawn_numbers) - 1,
            'drawnNumbers': list(session.drawn_numbers),
            'gameState': PLAYING,
        })

        pool = self.registry.card_pool()
        winners = find_winners(session.players, pool, session.drawn_numbers, token, self.evaluate)
        if winners:
            self._finish(session, winners, 'Bingo')
            return False
        if len(session.drawn_numbers) >= TOTAL_NUMBERS:
            self._finish(session, [], 'All numbers drawn')
            return False
        return True

    def _finish(self, session: GameSession, winners: List[Dict[str, Any]], reason: str) -> None:
        prize = apply_settlement(session, winners, self.prize_ratio)
        session.game_state = FINISHED
        session.active = False
        session.finished_at = isoformat(self.clock())
        if not session.settled:
            if self.wallet is not None:
                for w in winners:
                    self.wallet.credit_prize(w['userId'], prize)
            session.settled = True
        self.registry.save_session(session)
        self.registry.release_cards(session)
        self.logger.info(
            f"[game-end] session={session.id} reason={reason} winners={len(winners)} pot={session.total_pot} prize={prize}"
        )
        self.channel.publish(session.id, 'gameEnd', {
            'reason': reason,
            'winners': winners,
            'prizePerWinner': prize,
            'totalPot': session.total_pot,
            'drawnNumbers': list(session.drawn_numbers),
            'finishedAt': session.finished_at,
        })
        self.channel.close(session.id)
