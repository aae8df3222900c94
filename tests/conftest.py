import logging
import os
import random
import sys
import pytest

# Ensure the project root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import Config
from bingo import create_app, db, socketio
from bingo.store import MemoryStore
from bingo.services.bingo.channel import BroadcastChannel
from bingo.services.bingo.registry import SessionRegistry
from bingo.services.bingo.scheduler import GameLoopSupervisor
from bingo.services.wallet import MockPaymentProvider, WalletService


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    STORE_BACKEND = 'sql'
    # Loops are ticked by hand in tests
    SCHEDULER_AUTOSTART = False
    PAYMENT_DELAY_SEC = 0
    SSE_KEEPALIVE_SEC = 0.05


class FakeClock:
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def engine(flask_app):
    return flask_app.extensions['bingo']


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture()
def channel():
    return BroadcastChannel(maxsize=1000)


@pytest.fixture()
def wallet(store, clock):
    return WalletService(store, MockPaymentProvider(delay_sec=0), clock=clock)


@pytest.fixture()
def registry(store, clock, channel):
    return SessionRegistry(store, clock=clock, rng=random.Random(7), channel=channel)


@pytest.fixture()
def supervisor(registry, channel, wallet, clock):
    sup = GameLoopSupervisor(
        registry,
        channel,
        wallet,
        autostart=False,
        clock=clock,
        rng=random.Random(11),
        logger=logging.getLogger('tests.loop'),
    )
    registry.on_countdown = sup.start
    return sup
