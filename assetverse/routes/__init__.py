# assetverse/routes/__init__.py
from flask import Blueprint

# Create blueprints
assets_bp = Blueprint('assets', __name__, url_prefix='/api/hr/assets')
requests_bp = Blueprint('requests', __name__, url_prefix='/api/hr/requests')
employees_bp = Blueprint('employees', __name__, url_prefix='/api/hr')
dashboard_bp = Blueprint('dashboard', __name__, url_prefix='/api/hr/analytics')
portal_bp = Blueprint('portal', __name__, url_prefix='/api/employee')

# Import views after blueprints are created
from . import assets, asset_requests, employees, dashboard, portal
