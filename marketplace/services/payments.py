# Mock payment gateway. Card and PayPal flows are stubs; no money moves.
import re
import uuid
from collections import namedtuple

PaymentResult = namedtuple('PaymentResult', ['success', 'reference', 'message'])

PAYMENT_METHODS = ('card', 'paypal')

def _card_errors(card):
    card = card or {}
    number = re.sub(r'[\s-]', '', card.get('number') or '')
    errors = []
    if not re.fullmatch(r'\d{12,19}', number):
        errors.append('card number')
    if not re.fullmatch(r'(0[1-9]|1[0-2])/\d{2}', (card.get('expiry') or '').strip()):
        errors.append('expiry')
    if not re.fullmatch(r'\d{3,4}', (card.get('cvv') or '').strip()):
        errors.append('cvv')
    if not (card.get('name') or '').strip():
        errors.append('cardholder name')
    return errors

def charge(method, amount, card=None):
    if method not in PAYMENT_METHODS:
        return PaymentResult(False, None, f"Unsupported payment method: {method}")
    if method == 'card':
        errors = _card_errors(card)
        if errors:
            return PaymentResult(False, None, f"Invalid {', '.join(errors)}.")
    reference = f"{method}_{uuid.uuid4().hex[:12]}"
    return PaymentResult(True, reference, f"Payment of {amount:.2f} accepted.")
