# assetverse/routes/portal.py
"""Employee-facing endpoints."""
from flask import request, jsonify
from flask_login import current_user

from assetverse.auth import employee_required
from assetverse.forms import AssetRequestForm
from assetverse.routes import portal_bp as bp
from assetverse.services import affiliations, catalog, workflow


@bp.route('/my-assets', methods=['GET'])
@employee_required
def my_assets():
    return jsonify(workflow.my_assets(
        current_user.account,
        search=request.args.get('search', '').strip(),
        asset_type=request.args.get('type', 'All'),
    ))


@bp.route('/available-assets', methods=['GET'])
@employee_required
def available_assets():
    return jsonify([asset.to_dict() for asset in catalog.available_assets()])


@bp.route('/request-asset', methods=['POST'])
@employee_required
def request_asset():
    form = AssetRequestForm.from_json().validate_or_raise()
    asset_request = workflow.submit_request(current_user.account, form.assetId.data, form.note.data)
    return jsonify({
        'message': 'Asset request submitted successfully',
        'request': asset_request.to_dict(),
    }), 201


@bp.route('/return-asset/<int:assignment_id>', methods=['POST'])
@employee_required
def return_asset(assignment_id):
    assignment = workflow.return_asset(current_user.account, assignment_id)
    return jsonify({'message': 'Asset returned successfully', 'assignment': assignment.to_dict()})


@bp.route('/my-companies', methods=['GET'])
@employee_required
def my_companies():
    return jsonify(affiliations.my_companies(current_user.email))


@bp.route('/team/<int:company_id>', methods=['GET'])
@employee_required
def team(company_id):
    return jsonify(affiliations.team_members(current_user.email, company_id))
