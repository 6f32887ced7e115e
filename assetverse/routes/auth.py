# assetverse/routes/auth.py
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from assetverse.auth import account_required
from assetverse.forms import RegistrationForm
from assetverse.services import accounts

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
@login_required
def register():
    form = RegistrationForm.from_json().validate_or_raise()
    user = accounts.register(
        current_user,
        name=form.name.data,
        role=form.role.data,
        date_of_birth=form.dateOfBirth.data,
        photo=form.photo.data,
        company_name=form.companyName.data,
        company_logo=form.companyLogo.data,
    )
    return jsonify({'message': 'User registered successfully', 'user': user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
@login_required
def login():
    user = accounts.login(current_user)
    return jsonify({'message': 'Login successful', 'user': user.to_dict()})


@auth_bp.route('/me', methods=['GET'])
@account_required
def me():
    return jsonify(current_user.account.to_dict())
