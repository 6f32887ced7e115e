# assetverse/routes/asset_requests.py
from flask import request, jsonify
from flask_login import current_user

from assetverse.auth import hr_required
from assetverse.forms import RejectForm
from assetverse.routes import requests_bp as bp
from assetverse.services import workflow


@bp.route('', methods=['GET'])
@hr_required
def list_requests():
    return jsonify(workflow.list_requests(current_user.account, request.args.get('status')))


@bp.route('/<int:request_id>/approve', methods=['POST'])
@hr_required
def approve_request(request_id):
    asset_request, assignment = workflow.approve(current_user.account, request_id)
    return jsonify({
        'message': 'Request approved successfully',
        'request': asset_request.to_dict(),
        'assignment': assignment.to_dict(),
    })


@bp.route('/<int:request_id>/reject', methods=['POST'])
@hr_required
def reject_request(request_id):
    form = RejectForm.from_json().validate_or_raise()
    asset_request = workflow.reject(current_user.account, request_id, form.reason.data)
    return jsonify({'message': 'Request rejected', 'request': asset_request.to_dict()})
