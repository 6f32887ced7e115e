# assetverse/routes/payments.py
from flask import Blueprint, jsonify
from flask_login import current_user

from assetverse.auth import hr_required
from assetverse.forms import PaymentConfirmForm, PaymentIntentForm
from assetverse.services import ledger

packages_bp = Blueprint('packages', __name__)
payments_bp = Blueprint('payments', __name__)


@packages_bp.route('', methods=['GET'])
def list_packages():
    return jsonify([package.to_dict() for package in ledger.list_packages()])


@payments_bp.route('/create-intent', methods=['POST'])
@hr_required
def create_intent():
    form = PaymentIntentForm.from_json().validate_or_raise()
    client_secret = ledger.create_intent(
        current_user.account,
        package_name=form.packageName.data,
        amount=form.amount.data,
        employee_limit=form.employeeLimit.data,
    )
    return jsonify({'clientSecret': client_secret})


@payments_bp.route('/confirm', methods=['POST'])
@hr_required
def confirm_payment():
    form = PaymentConfirmForm.from_json().validate_or_raise()
    payment = ledger.confirm(
        current_user.account,
        intent_id=form.paymentIntentId.data,
        package_name=form.packageName.data,
        employee_limit=form.employeeLimit.data,
        amount=form.amount.data,
    )
    return jsonify({'message': 'Package upgraded successfully', 'payment': payment.to_dict()})


@payments_bp.route('/history', methods=['GET'])
@hr_required
def payment_history():
    return jsonify([payment.to_dict() for payment in ledger.history(current_user.account)])
