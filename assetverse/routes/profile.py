# assetverse/routes/profile.py
from flask import Blueprint, jsonify
from flask_login import current_user

from assetverse.auth import account_required
from assetverse.forms import ProfileForm
from assetverse.services import accounts

profile_bp = Blueprint('profile', __name__)


@profile_bp.route('', methods=['GET'])
@account_required
def get_profile():
    return jsonify(current_user.account.to_dict())


@profile_bp.route('', methods=['PUT'])
@account_required
def update_profile():
    form = ProfileForm.from_json().validate_or_raise()
    patch = accounts.ProfilePatch.from_form(form)
    user = accounts.update_profile(current_user.account, patch)
    return jsonify({'message': 'Profile updated successfully', 'user': user.to_dict()})
