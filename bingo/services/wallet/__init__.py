"""Mocked mobile-money wallet: balances, transactions, provider stub."""

from .provider import PAYMENT_METHODS, MockPaymentProvider, PaymentResult
from .service import DEPOSIT, WITHDRAWAL, WalletService, to_money

__all__ = [
    'DEPOSIT',
    'WITHDRAWAL',
    'PAYMENT_METHODS',
    'MockPaymentProvider',
    'PaymentResult',
    'WalletService',
    'to_money',
]
