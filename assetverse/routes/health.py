# assetverse/routes/health.py
import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

health_bp = Blueprint('health', __name__)

STARTED_AT = time.monotonic()


@health_bp.route('/')
def index():
    return 'AssetVerse backend is running!'


@health_bp.route('/health')
def health():
    store = current_app.extensions['store']
    verifier = current_app.extensions['token_verifier']
    gateway = current_app.extensions['payment_gateway']
    collection_state = 'ready' if store.ready else 'not ready'

    body = {
        'status': 'healthy' if store.ready else 'degraded',
        'database': 'connected' if store.ready else store.state.value,
        'identityProvider': 'initialized' if verifier.initialized else 'not initialized',
        'paymentProcessor': 'initialized' if gateway.initialized else 'not initialized',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'uptime': f'{int(time.monotonic() - STARTED_AT)} seconds',
        'collections': {
            name: collection_state
            for name in ('users', 'assets', 'requests', 'assignedAssets',
                         'affiliations', 'packages', 'payments')
        },
    }
    if store.last_error and current_app.config.get('EXPOSE_ERROR_DETAILS'):
        body['error'] = store.last_error
    return jsonify(body), 200 if store.ready else 503
