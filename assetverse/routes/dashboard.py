# assetverse/routes/dashboard.py
from flask import jsonify, make_response
from flask_login import current_user

from assetverse.auth import hr_required
from assetverse.routes import dashboard_bp as bp
from assetverse.services import analytics


@bp.route('', methods=['GET'])
@hr_required
def dashboard():
    return jsonify(analytics.dashboard(current_user.account))


@bp.route('/report', methods=['GET'])
@hr_required
def download_report():
    response = make_response(analytics.assets_report(current_user.account))
    response.headers["Content-Disposition"] = "attachment; filename=asset_report.csv"
    response.headers["Content-type"] = "text/csv"

    return response
