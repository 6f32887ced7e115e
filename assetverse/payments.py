# assetverse/payments.py
"""Client for the external payment processor (Stripe payment intents API)."""
import logging
from decimal import ROUND_HALF_UP, Decimal

import requests

from assetverse.errors import PaymentProviderError

logger = logging.getLogger(__name__)


def to_minor_units(amount):
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class PaymentGateway:
    def __init__(self, api_key, api_base='https://api.stripe.com/v1', currency='usd',
                 timeout=10, session=None):
        self.api_key = api_key
        self.api_base = api_base.rstrip('/')
        self.currency = currency
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.get('PAYMENT_API_KEY'),
            api_base=config.get('PAYMENT_API_BASE', 'https://api.stripe.com/v1'),
            currency=config.get('PAYMENT_CURRENCY', 'usd'),
            timeout=config.get('PAYMENT_TIMEOUT', 10),
        )

    @property
    def initialized(self):
        return bool(self.api_key)

    def create_intent(self, amount, metadata, currency=None):
        """Create a payment intent for ``amount`` (major units).

        Returns the processor's intent object; ``client_secret`` is handed to
        the browser to complete the charge.
        """
        data = {
            'amount': to_minor_units(amount),
            'currency': currency or self.currency,
            'automatic_payment_methods[enabled]': 'true',
        }
        for key, value in metadata.items():
            data[f'metadata[{key}]'] = str(value)
        return self._request('POST', '/payment_intents', data=data)

    def retrieve_intent(self, intent_id):
        return self._request('GET', f'/payment_intents/{intent_id}')

    def _request(self, method, path, data=None):
        if not self.initialized:
            raise PaymentProviderError('Payment processor is not configured')
        try:
            response = self.session.request(
                method,
                f'{self.api_base}{path}',
                data=data,
                auth=(self.api_key, ''),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error('Payment processor request failed: %s', e)
            raise PaymentProviderError()

        if response.status_code >= 400:
            try:
                detail = response.json().get('error', {}).get('message')
            except ValueError:
                detail = None
            logger.error('Payment processor returned %s: %s', response.status_code, detail)
            raise PaymentProviderError(detail or PaymentProviderError.message)
        return response.json()
