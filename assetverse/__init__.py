import logging
import os

from flask import Flask, request
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_mail import Mail

from assetverse.config import get_config

db = SQLAlchemy()
login_manager = LoginManager()
mail = Mail()

logger = logging.getLogger(__name__)


def create_app(config_class=None):
    app = Flask(__name__)
    app.config.from_object(config_class or get_config())

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )

    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
        os.makedirs(os.path.join(os.path.dirname(__file__), 'data'), exist_ok=True)

    db.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)

    from assetverse.auth import init_auth
    from assetverse.database import StoreSupervisor
    from assetverse.errors import register_error_handlers
    from assetverse.payments import PaymentGateway

    init_auth(app)
    app.extensions['payment_gateway'] = PaymentGateway.from_config(app.config)
    register_error_handlers(app)

    @app.before_request
    def log_request():
        logger.info('%s %s', request.method, request.path)
        if request.path.startswith('/api/auth'):
            logger.debug('Auth endpoint hit, Authorization header present: %s',
                         'Authorization' in request.headers)

    # Import blueprints inside the factory
    from assetverse.routes import (assets_bp, requests_bp, employees_bp,
                                   portal_bp, dashboard_bp)
    from assetverse.routes.auth import auth_bp
    from assetverse.routes.profile import profile_bp
    from assetverse.routes.payments import packages_bp, payments_bp
    from assetverse.routes.health import health_bp

    # Register blueprints
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(profile_bp, url_prefix='/api/profile')
    app.register_blueprint(assets_bp)
    app.register_blueprint(requests_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(portal_bp)
    app.register_blueprint(packages_bp, url_prefix='/api/packages')
    app.register_blueprint(payments_bp, url_prefix='/api/payment')

    supervisor = StoreSupervisor(app)
    supervisor.start()

    return app
