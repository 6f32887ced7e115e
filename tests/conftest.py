from datetime import datetime, timedelta, timezone

import jwt
import pytest

from assetverse import create_app, db
from assetverse.config import TestingConfig
from assetverse.errors import PaymentProviderError
from assetverse.models import User
from assetverse.payments import to_minor_units


class FakeGateway:
    """Stands in for the payment processor."""
    initialized = True

    def __init__(self):
        self.intents = {}

    def create_intent(self, amount, metadata, currency=None):
        intent_id = f'pi_test_{len(self.intents) + 1}'
        self.intents[intent_id] = {
            'id': intent_id,
            'client_secret': f'{intent_id}_secret_abc',
            'status': 'requires_payment_method',
            'amount': to_minor_units(amount),
            'currency': currency or 'usd',
            'metadata': {key: str(value) for key, value in metadata.items()},
        }
        return self.intents[intent_id]

    def retrieve_intent(self, intent_id):
        if intent_id not in self.intents:
            raise PaymentProviderError(f'No such payment_intent: {intent_id}')
        return self.intents[intent_id]

    def succeed(self, intent_id):
        self.intents[intent_id]['status'] = 'succeeded'


def make_token(email, uid=None, expires_in=3600, secret=None, **claims):
    now = datetime.now(timezone.utc)
    payload = {
        'sub': uid or f'uid-{email}',
        'email': email,
        'email_verified': True,
        'iat': now,
        'exp': now + timedelta(seconds=expires_in),
    }
    payload.update(claims)
    return jwt.encode(payload, secret or TestingConfig.AUTH_SECRET, algorithm='HS256')


def auth_headers(email, **kwargs):
    return {'Authorization': f'Bearer {make_token(email, **kwargs)}'}


def create_user(app, email, role='employee', name=None, **fields):
    with app.app_context():
        user = User(
            firebase_uid=f'uid-{email}',
            name=name or email.split('@')[0].title(),
            email=email,
            role=role,
            **fields,
        )
        if role == 'hr':
            user.company_name = user.company_name or f'{user.name} Inc'
            user.package_limit = fields.get('package_limit', 5)
            user.current_employees = fields.get('current_employees', 0)
            user.subscription = 'basic'
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    app.extensions['payment_gateway'] = FakeGateway()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gateway(app):
    return app.extensions['payment_gateway']


@pytest.fixture
def hr(app):
    create_user(app, 'hr@acme.com', role='hr', name='Hannah', company_name='Acme')
    return auth_headers('hr@acme.com')


@pytest.fixture
def other_hr(app):
    create_user(app, 'hr@globex.com', role='hr', name='Gary', company_name='Globex')
    return auth_headers('hr@globex.com')


@pytest.fixture
def employee(app):
    create_user(app, 'emma@mail.com', name='Emma')
    return auth_headers('emma@mail.com')


@pytest.fixture
def second_employee(app):
    create_user(app, 'sam@mail.com', name='Sam')
    return auth_headers('sam@mail.com')


def add_asset(client, headers, name='Laptop', quantity=3, product_type='Returnable'):
    response = client.post('/api/hr/assets', headers=headers, json={
        'productName': name,
        'productType': product_type,
        'productQuantity': quantity,
        'productImage': 'https://img.example.com/laptop.png',
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()['assetId']


def request_asset(client, headers, asset_id, note='Need it for work'):
    response = client.post('/api/employee/request-asset', headers=headers,
                           json={'assetId': asset_id, 'note': note})
    assert response.status_code == 201, response.get_json()
    return response.get_json()['request']['id']
