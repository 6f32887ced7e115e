# assetverse/auth.py
"""Bearer token verification and role guards.

Tokens are issued by the external identity provider (Firebase by default) and
verified here with PyJWT. The verified principal becomes Flask-Login's
``current_user`` for the duration of the request; it is never stored in the
session.
"""
import logging
from functools import wraps

import jwt
from flask import g
from flask_login import UserMixin, current_user, login_required

from assetverse import login_manager
from assetverse.errors import (ExpiredCredential, Forbidden, InvalidCredential,
                               NotFound, Unauthenticated)

logger = logging.getLogger(__name__)


class TokenVerifier:
    def __init__(self, secret=None, jwks_url=None, audience=None, issuer=None,
                 algorithms=None):
        self.secret = secret
        self.audience = audience
        self.issuer = issuer
        if secret:
            self.algorithms = ['HS256']
            self._jwks_client = None
        else:
            self.algorithms = list(algorithms or ['RS256'])
            self._jwks_client = jwt.PyJWKClient(jwks_url) if jwks_url else None

    @classmethod
    def from_config(cls, config):
        return cls(
            secret=config.get('AUTH_SECRET'),
            jwks_url=config.get('AUTH_JWKS_URL'),
            audience=config.get('AUTH_AUDIENCE'),
            issuer=config.get('AUTH_ISSUER'),
            algorithms=config.get('AUTH_ALGORITHMS'),
        )

    @property
    def initialized(self):
        return bool(self.secret or self._jwks_client)

    def verify(self, token):
        """Return the principal for ``token`` or raise an Unauthenticated error."""
        if not self.initialized:
            raise InvalidCredential('Identity provider is not configured')
        try:
            key = self.secret
            if self._jwks_client is not None:
                key = self._jwks_client.get_signing_key_from_jwt(token).key
            options = {'require': ['exp', 'sub']}
            if not self.audience:
                options['verify_aud'] = False
            claims = jwt.decode(
                token,
                key,
                algorithms=self.algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options=options,
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredCredential()
        except jwt.DecodeError:
            raise InvalidCredential('Invalid token format')
        except (jwt.InvalidTokenError, jwt.PyJWKClientError) as e:
            logger.warning('Token verification failed: %s', e)
            raise InvalidCredential()

        email = claims.get('email')
        if not email:
            raise InvalidCredential('Token does not carry an email address')
        return Principal(
            uid=claims.get('user_id') or claims['sub'],
            email=email.lower(),
            email_verified=bool(claims.get('email_verified', False)),
        )


class Principal(UserMixin):
    """A verified identity, plus its stored account when one exists."""

    def __init__(self, uid, email, email_verified=False):
        self.uid = uid
        self.email = email
        self.email_verified = email_verified
        self._account = None
        self._account_loaded = False

    def get_id(self):
        return self.uid

    @property
    def account(self):
        if not self._account_loaded:
            from assetverse.models import User
            self._account = User.query.filter_by(email=self.email).first()
            self._account_loaded = True
        return self._account

    def to_dict(self):
        return {'uid': self.uid, 'email': self.email, 'emailVerified': self.email_verified}


def bearer_token(header):
    if not header or not header.startswith('Bearer '):
        raise Unauthenticated()
    token = header[len('Bearer '):].strip()
    if not token:
        raise Unauthenticated('Unauthorized access - Invalid token format')
    return token


def init_auth(app):
    app.extensions['token_verifier'] = TokenVerifier.from_config(app.config)


@login_manager.request_loader
def load_principal(request):
    from flask import current_app
    try:
        token = bearer_token(request.headers.get('Authorization'))
        principal = current_app.extensions['token_verifier'].verify(token)
    except Unauthenticated as e:
        g.auth_error = e
        return None
    logger.debug('Token verified for %s', principal.email)
    return principal


@login_manager.unauthorized_handler
def unauthorized():
    raise g.pop('auth_error', None) or Unauthenticated()


def account_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if current_user.account is None:
            raise NotFound('User not found')
        return view(*args, **kwargs)
    return login_required(wrapped)


def role_required(role, message):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            account = current_user.account
            if account is None or account.role != role:
                raise Forbidden(message)
            return view(*args, **kwargs)
        return login_required(wrapped)
    return decorator


hr_required = role_required('hr', 'Forbidden: HR access only')
employee_required = role_required('employee', 'Forbidden: employee access only')
