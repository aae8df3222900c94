"""Bingo domain services: cards, win detection, settlement, sessions, loop.

This package contains the game engine imported by HTTP routes and socket
handlers, keeping transport concerns separated from core game mechanics.
``init_engine`` wires one instance of each component onto the Flask app.
"""

from flask import Flask, current_app

from .channel import BroadcastChannel
from .registry import SessionRegistry
from .scheduler import GameLoopSupervisor


class Engine:
    def __init__(self, store, registry: SessionRegistry, channel: BroadcastChannel,
                 supervisor: GameLoopSupervisor, wallet) -> None:
        self.store = store
        self.registry = registry
        self.channel = channel
        self.supervisor = supervisor
        self.wallet = wallet


def init_engine(flask_app: Flask, socketio=None) -> Engine:
    from bingo.services.wallet import MockPaymentProvider, WalletService
    from bingo.store import create_store

    cfg = flask_app.config
    logger = flask_app.logger
    store = create_store(flask_app)

    emit = socketio.emit if socketio is not None else None
    channel = BroadcastChannel(maxsize=int(cfg.get('SUBSCRIBER_QUEUE_SIZE', 256)), emit=emit, logger=logger)

    provider = MockPaymentProvider(delay_sec=float(cfg.get('PAYMENT_DELAY_SEC', 0)), logger=logger)
    wallet = WalletService(
        store,
        provider,
        default_balance=cfg.get('DEFAULT_BALANCE', '10.00'),
        min_deposit=cfg.get('MIN_DEPOSIT', '1.00'),
        max_deposit=cfg.get('MAX_DEPOSIT', '10000'),
        min_withdrawal=cfg.get('MIN_WITHDRAWAL', '1.00'),
        max_withdrawal=cfg.get('MAX_WITHDRAWAL', '5000'),
        currency=cfg.get('CURRENCY', 'ETB'),
        ttl=int(cfg.get('WALLET_TTL_SEC', 30 * 24 * 3600)),
        logger=logger,
    )

    registry = SessionRegistry(
        store,
        min_players=int(cfg.get('MIN_PLAYERS', 2)),
        max_players=int(cfg.get('MAX_PLAYERS', 50)),
        countdown_sec=int(cfg.get('COUNTDOWN_SEC', 60)),
        pool_size=int(cfg.get('CARD_POOL_SIZE', 20)),
        max_cards=int(cfg.get('MAX_CARDS_PER_PLAYER', 3)),
        session_ttl=int(cfg.get('SESSION_TTL_SEC', 3600)),
        finished_ttl=int(cfg.get('FINISHED_SESSION_TTL_SEC', 600)),
        channel=channel,
        logger=logger,
    )

    loop_kwargs = {}
    if socketio is not None:
        loop_kwargs = {'start_task': socketio.start_background_task, 'sleep': socketio.sleep}
    supervisor = GameLoopSupervisor(
        registry,
        channel,
        wallet,
        app=flask_app,
        interval=float(cfg.get('TICK_INTERVAL_SEC', 1)),
        autostart=bool(cfg.get('SCHEDULER_AUTOSTART', True)),
        prize_ratio=float(cfg.get('PRIZE_POOL_RATIO', 0.8)),
        logger=logger,
        **loop_kwargs,
    )
    registry.on_countdown = supervisor.start

    engine = Engine(store, registry, channel, supervisor, wallet)
    flask_app.extensions['bingo'] = engine
    return engine


def get_engine() -> Engine:
    return current_app.extensions['bingo']
