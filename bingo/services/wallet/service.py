"""Wallet balances and transaction history.

Balances are stored directly under ``balance:<userId>`` (not derived from
the transaction log); transactions are an audit trail only. Every update is
read-modify-write on one key with no locking.
"""

import logging
import time
import uuid
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, List, Optional

from bingo.errors import InsufficientBalanceError, UpstreamPaymentError, ValidationError
from bingo.models import Transaction, isoformat
from bingo.store import Store
from .provider import MockPaymentProvider

CENT = Decimal('0.01')
DEPOSIT = 'deposit'
WITHDRAWAL = 'withdrawal'


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def balance_key(user_id: str) -> str:
    return f"balance:{user_id}"


def transaction_key(transaction_id: str) -> str:
    return f"transaction:{transaction_id}"


def history_key(user_id: str, direction: str) -> str:
    return f"transactions:{user_id}:{direction}"


class WalletService:
    def __init__(self, store: Store, provider: Optional[MockPaymentProvider] = None, *,
                 default_balance='10.00', min_deposit='1.00', max_deposit='10000',
                 min_withdrawal='1.00', max_withdrawal='5000', currency: str = 'ETB',
                 ttl: float = 30 * 24 * 3600, clock: Callable[[], float] = time.time,
                 logger: Optional[logging.Logger] = None) -> None:
        self.store = store
        self.provider = provider or MockPaymentProvider()
        self.default_balance = to_money(default_balance)
        self.min_deposit = to_money(min_deposit)
        self.max_deposit = to_money(max_deposit)
        self.min_withdrawal = to_money(min_withdrawal)
        self.max_withdrawal = to_money(max_withdrawal)
        self.currency = currency
        self.ttl = ttl
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    # ---- Balances ----

    def get_balance(self, user_id: str) -> Decimal:
        data = self.store.get(balance_key(user_id))
        if data and data.get('balance') is not None:
            return to_money(data['balance'])
        return self.default_balance

    def _store_balance(self, user_id: str, balance: Decimal) -> None:
        self.store.put(balance_key(user_id), {
            'balance': str(balance),
            'updatedAt': isoformat(self.clock()),
        }, self.ttl)

    def credit_prize(self, user_id: str, amount) -> Decimal:
        new_balance = self.get_balance(user_id) + to_money(amount)
        self._store_balance(user_id, new_balance)
        self.logger.info(f"[prize-credit] user={user_id} amount={to_money(amount)} balance={new_balance}")
        return new_balance

    # ---- Transactions ----

    def _record(self, tx: Transaction) -> None:
        self.store.put(transaction_key(tx.id), tx.to_dict(), self.ttl)
        key = history_key(tx.user_id, tx.direction)
        ids = self.store.get(key) or []
        ids.append(tx.id)
        self.store.put(key, ids, self.ttl)

    def history(self, user_id: str, direction: str, limit: int = 10, offset: int = 0) -> Dict[str, Any]:
        ids = list(reversed(self.store.get(history_key(user_id, direction)) or []))
        items: List[Dict[str, Any]] = []
        for tx_id in ids[offset:offset + limit]:
            data = self.store.get(transaction_key(tx_id))
            if data:
                items.append(data)
        return {'userId': user_id, 'transactions': items, 'totalCount': len(ids), 'limit': limit, 'offset': offset}

    # ---- Provider-backed operations ----

    def _check_range(self, amount: Decimal, lo: Decimal, hi: Decimal, kind: str) -> None:
        if amount <= 0:
            raise ValidationError('Amount must be greater than 0')
        if amount < lo:
            raise ValidationError(f"Minimum {kind} amount is {lo} {self.currency}")
        if amount > hi:
            raise ValidationError(f"Maximum {kind} amount is {hi} {self.currency}")

    def _call_provider(self, call, user_id: str, amount: Decimal, tx_id: str):
        try:
            result = call(user_id, float(amount), tx_id)
        except Exception as exc:
            self.logger.exception(f"[provider-error] user={user_id} tx={tx_id}")
            raise UpstreamPaymentError('Payment processing failed, please try again later',
                                       details={'transactionId': tx_id}) from exc
        return result

    def _complete(self, direction: str, user_id: str, amount: Decimal, new_balance: Decimal,
                  tx_id: str, result) -> Dict[str, Any]:
        now = isoformat(self.clock())
        self._store_balance(user_id, new_balance)
        self._record(Transaction(
            id=tx_id, user_id=user_id, amount=float(amount), direction=direction,
            status='completed', created_at=now, reference_id=result.reference_id, currency=self.currency,
        ))
        self.logger.info(f"[{direction}] user={user_id} amount={amount} balance={new_balance} tx={tx_id}")
        return {
            'newBalance': float(new_balance),
            'transactionId': tx_id,
            'amount': float(amount),
            'currency': self.currency,
            'status': 'completed',
            'message': result.message,
            'timestamp': now,
            'referenceId': result.reference_id,
        }

    def _fail(self, direction: str, user_id: str, amount: Decimal, tx_id: str, result) -> None:
        self._record(Transaction(
            id=tx_id, user_id=user_id, amount=float(amount), direction=direction,
            status='failed', created_at=isoformat(self.clock()), currency=self.currency,
        ))
        raise UpstreamPaymentError(result.message or f"{direction.capitalize()} failed",
                                   details={'transactionId': tx_id})

    def deposit(self, user_id: str, amount) -> Dict[str, Any]:
        amount = to_money(amount)
        self._check_range(amount, self.min_deposit, self.max_deposit, DEPOSIT)
        current = self.get_balance(user_id)
        tx_id = f"tx_{uuid.uuid4().hex[:12]}"
        result = self._call_provider(self.provider.deposit, user_id, amount, tx_id)
        if not result.success:
            self._fail(DEPOSIT, user_id, amount, tx_id, result)
        return self._complete(DEPOSIT, user_id, amount, current + amount, tx_id, result)

    def withdraw(self, user_id: str, amount) -> Dict[str, Any]:
        amount = to_money(amount)
        self._check_range(amount, self.min_withdrawal, self.max_withdrawal, WITHDRAWAL)
        current = self.get_balance(user_id)
        if amount > current:
            raise InsufficientBalanceError(float(current), float(amount))
        tx_id = f"tx_{uuid.uuid4().hex[:12]}"
        result = self._call_provider(self.provider.withdraw, user_id, amount, tx_id)
        if not result.success:
            self._fail(WITHDRAWAL, user_id, amount, tx_id, result)
        return self._complete(WITHDRAWAL, user_id, amount, current - amount, tx_id, result)

    def withdrawal_info(self) -> Dict[str, Any]:
        return {
            'limits': {
                'minAmount': float(self.min_withdrawal),
                'maxAmountPerTransaction': float(self.max_withdrawal),
            },
            'fees': {'telebirr': 0.0, 'bankTransfer': 0.0, 'processingTime': '1-5 minutes'},
            'currency': self.currency,
        }
