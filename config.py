import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///bingo.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # "sql" keeps state in the store_entry table, "memory" in a process-local dict
    STORE_BACKEND = os.environ.get('STORE_BACKEND', 'sql')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Session lifecycle
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    MAX_PLAYERS = int(os.environ.get('MAX_PLAYERS', '50'))
    COUNTDOWN_SEC = int(os.environ.get('COUNTDOWN_SEC', '60'))
    # One countdown step or one draw per tick
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # Set to False to drive loops by hand (tests)
    SCHEDULER_AUTOSTART = True
    # Cards
    CARD_POOL_SIZE = int(os.environ.get('CARD_POOL_SIZE', '20'))
    MAX_CARDS_PER_PLAYER = int(os.environ.get('MAX_CARDS_PER_PLAYER', '3'))
    PRIZE_POOL_RATIO = float(os.environ.get('PRIZE_POOL_RATIO', '0.8'))
    # Store expiry (seconds)
    SESSION_TTL_SEC = int(os.environ.get('SESSION_TTL_SEC', '3600'))
    FINISHED_SESSION_TTL_SEC = int(os.environ.get('FINISHED_SESSION_TTL_SEC', '600'))
    WALLET_TTL_SEC = int(os.environ.get('WALLET_TTL_SEC', str(30 * 24 * 3600)))
    # Wallet
    DEFAULT_BALANCE = os.environ.get('DEFAULT_BALANCE', '10.00')
    CURRENCY = os.environ.get('CURRENCY', 'ETB')
    MIN_DEPOSIT = os.environ.get('MIN_DEPOSIT', '1.00')
    MAX_DEPOSIT = os.environ.get('MAX_DEPOSIT', '10000')
    MIN_WITHDRAWAL = os.environ.get('MIN_WITHDRAWAL', '1.00')
    MAX_WITHDRAWAL = os.environ.get('MAX_WITHDRAWAL', '5000')
    # Simulated provider latency (seconds). 0 disables.
    PAYMENT_DELAY_SEC = float(os.environ.get('PAYMENT_DELAY_SEC', '2'))
    # Live updates
    SSE_KEEPALIVE_SEC = float(os.environ.get('SSE_KEEPALIVE_SEC', '30'))
    SUBSCRIBER_QUEUE_SIZE = int(os.environ.get('SUBSCRIBER_QUEUE_SIZE', '256'))
