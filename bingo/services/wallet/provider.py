"""Mock mobile-money provider.

Stands in for the real payment gateway: every call sleeps for the
configured latency and succeeds with a provider reference id unless told
to fail.
"""

import logging
import time
from typing import Callable, Optional


class PaymentResult:
    def __init__(self, success: bool, reference_id: Optional[str] = None, message: str = '') -> None:
        self.success = success
        self.reference_id = reference_id
        self.message = message

    def to_dict(self):
        return {
            'success': self.success,
            'referenceId': self.reference_id,
            'message': self.message,
        }


class MockPaymentProvider:
    name = 'telebirr'

    def __init__(self, delay_sec: float = 0.0, sleep: Callable[[float], None] = time.sleep,
                 logger: Optional[logging.Logger] = None) -> None:
        self.delay_sec = delay_sec
        self._sleep = sleep
        self.logger = logger or logging.getLogger(__name__)
        # Set to a message to make the next call fail (used by tests and demos)
        self.fail_next: Optional[str] = None

    def _process(self, kind: str, user_id: str, amount: float, transaction_id: str) -> PaymentResult:
        if self.delay_sec > 0:
            self._sleep(self.delay_sec)
        if self.fail_next is not None:
            message, self.fail_next = self.fail_next, None
            self.logger.warning(f"[provider-fail] kind={kind} user={user_id} tx={transaction_id} message={message}")
            return PaymentResult(False, None, message)
        return PaymentResult(True, f"TBR_{transaction_id}", f"{kind.capitalize()} successful (mock)")

    def deposit(self, user_id: str, amount: float, transaction_id: str) -> PaymentResult:
        return self._process('deposit', user_id, amount, transaction_id)

    def withdraw(self, user_id: str, amount: float, transaction_id: str) -> PaymentResult:
        return self._process('withdrawal', user_id, amount, transaction_id)


PAYMENT_METHODS = [
    {
        'id': 'telebirr',
        'name': 'Telebirr',
        'type': 'mobile_money',
        'currencies': ['ETB'],
        'minAmount': 1.00,
        'maxAmount': 10000.00,
        'processingTime': 'Instant',
        'fees': '0%',
    },
    {
        'id': 'cbe',
        'name': 'CBE Mobile Banking',
        'type': 'bank_transfer',
        'currencies': ['ETB'],
        'minAmount': 5.00,
        'maxAmount': 50000.00,
        'processingTime': '1-2 minutes',
        'fees': '0%',
    },
]
