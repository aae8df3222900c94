from decimal import Decimal

import pytest

from bingo.errors import InsufficientBalanceError, UpstreamPaymentError, ValidationError
from bingo.services.wallet import DEPOSIT, WITHDRAWAL, to_money


def test_new_user_gets_default_balance(wallet):
    assert wallet.get_balance('u1') == Decimal('10.00')


def test_deposit_then_overdraw(wallet):
    result = wallet.deposit('u1', 5)
    assert result['newBalance'] == 15.0
    assert result['status'] == 'completed'
    assert result['referenceId'] == f"TBR_{result['transactionId']}"
    assert wallet.get_balance('u1') == Decimal('15.00')

    with pytest.raises(InsufficientBalanceError) as exc:
        wallet.withdraw('u1', 20)
    assert exc.value.status_code == 400
    assert exc.value.details == {'currentBalance': 15.0, 'requestedAmount': 20.0}
    assert wallet.get_balance('u1') == Decimal('15.00')


def test_withdraw_reduces_balance(wallet):
    result = wallet.withdraw('u1', '2.50')
    assert result['newBalance'] == 7.5
    assert wallet.get_balance('u1') == Decimal('7.50')


def test_money_is_exact(wallet):
    for _ in range(10):
        wallet.deposit('u1', '1.10')
    assert wallet.get_balance('u1') == Decimal('21.00')
    assert to_money(0.1 + 0.2) == Decimal('0.30')


@pytest.mark.parametrize('amount', [0, -5, '0.50', 10001])
def test_deposit_limits(wallet, amount):
    with pytest.raises(ValidationError):
        wallet.deposit('u1', amount)
    assert wallet.get_balance('u1') == Decimal('10.00')


def test_withdraw_limits(wallet):
    wallet.deposit('u1', 9000)
    with pytest.raises(ValidationError) as exc:
        wallet.withdraw('u1', 5000.01)
    assert 'Maximum' in exc.value.message


def test_provider_failure_leaves_balance_and_records_attempt(wallet):
    wallet.provider.fail_next = 'Telebirr unavailable'
    with pytest.raises(UpstreamPaymentError) as exc:
        wallet.deposit('u1', 5)
    assert exc.value.status_code == 500
    assert wallet.get_balance('u1') == Decimal('10.00')

    history = wallet.history('u1', DEPOSIT)
    assert history['totalCount'] == 1
    assert history['transactions'][0]['status'] == 'failed'
    assert history['transactions'][0]['transactionId'] == exc.value.details['transactionId']


def test_provider_exception_becomes_upstream_error(wallet):
    def boom(*args):
        raise ConnectionError('gateway timeout')

    wallet.provider.withdraw = boom
    with pytest.raises(UpstreamPaymentError):
        wallet.withdraw('u1', 5)
    assert wallet.get_balance('u1') == Decimal('10.00')


def test_history_is_newest_first_and_paginated(wallet):
    for amount in (1, 2, 3):
        wallet.deposit('u1', amount)
    wallet.withdraw('u1', 4)

    deposits = wallet.history('u1', DEPOSIT, limit=2)
    assert deposits['totalCount'] == 3
    assert [t['amount'] for t in deposits['transactions']] == [3.0, 2.0]
    assert [t['amount'] for t in wallet.history('u1', DEPOSIT, limit=2, offset=2)['transactions']] == [1.0]

    withdrawals = wallet.history('u1', WITHDRAWAL)
    assert [t['direction'] for t in withdrawals['transactions']] == [WITHDRAWAL]
    assert wallet.history('other', DEPOSIT)['transactions'] == []


def test_credit_prize(wallet):
    assert wallet.credit_prize('u1', 4.0) == Decimal('14.00')
    assert wallet.history('u1', DEPOSIT)['totalCount'] == 0
