# assetverse/database.py
import logging
import threading
import time
from enum import Enum

from flask import request
from sqlalchemy import text

from assetverse import db
from assetverse.errors import Unavailable

logger = logging.getLogger(__name__)

# Endpoints that answer even while the store is not ready
UNGUARDED_ENDPOINTS = {'health.index', 'health.health', 'static'}

DEFAULT_PACKAGES = [
    ('basic', 5, 5, ['Asset tracking', 'Employee management', 'Basic support']),
    ('standard', 10, 8, ['All Basic features', 'Advanced analytics', 'Priority support']),
    ('premium', 20, 15, ['All Standard features', 'Custom branding', '24/7 support']),
]


class StoreState(Enum):
    CONNECTING = "connecting"
    READY = "ready"
    FAILED = "failed"


def init_store():
    """Check connectivity, create tables and indexes, seed packages."""
    from assetverse import models

    db.session.execute(text('SELECT 1'))
    db.create_all()
    seed_packages(models.Package)


def seed_packages(package_model):
    # Seed only an empty packages table
    if db.session.query(package_model.id).first() is not None:
        return
    for name, limit, price, features in DEFAULT_PACKAGES:
        db.session.add(package_model(name=name, employee_limit=limit, price=price, features=features))
    db.session.commit()
    logger.info('Seeded %d subscription packages', len(DEFAULT_PACKAGES))


class StoreSupervisor:
    """Owns the store connection state and the retry loop that establishes it."""

    def __init__(self, app=None, connect=init_store, sleep=time.sleep):
        self.state = StoreState.CONNECTING
        self.attempts = 0
        self.last_error = None
        self._connect = connect
        self._sleep = sleep
        self._thread = None
        self.app = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.app = app
        self.retry_delay = app.config.get('STORE_RETRY_DELAY', 5)
        self.max_delay = app.config.get('STORE_RETRY_MAX_DELAY', 60)
        self.max_attempts = app.config.get('STORE_MAX_ATTEMPTS')
        app.extensions['store'] = self
        app.before_request(self.guard)

    @property
    def ready(self):
        return self.state is StoreState.READY

    def start(self):
        if self.app.config.get('STORE_CONNECT_IN_BACKGROUND'):
            self._thread = threading.Thread(target=self.run, name='store-supervisor', daemon=True)
            self._thread.start()
        else:
            self.run()

    def run(self):
        while True:
            if self.connect_once():
                return True
            if self.max_attempts is not None and self.attempts >= self.max_attempts:
                logger.error('Giving up on the database after %d attempts', self.attempts)
                return False
            delay = self.next_delay()
            logger.info('Retrying database connection in %.1f seconds...', delay)
            self._sleep(delay)

    def connect_once(self):
        self.attempts += 1
        logger.info('Connecting to the database (attempt %d)...', self.attempts)
        try:
            with self.app.app_context():
                self._connect()
        except Exception as e:
            self.state = StoreState.FAILED
            self.last_error = str(e)
            logger.error('Database connection error: %s', e)
            return False
        self.state = StoreState.READY
        self.last_error = None
        logger.info('Database fully initialized and ready')
        return True

    def next_delay(self):
        return min(self.max_delay, self.retry_delay * (2 ** max(self.attempts - 1, 0)))

    def guard(self):
        # Unrouted URLs fall through to the usual 404
        if self.ready or request.endpoint is None or request.endpoint in UNGUARDED_ENDPOINTS:
            return None
        logger.warning('Request received but database not ready (%s)', self.state.value)
        raise Unavailable()
