# assetverse/services/ledger.py
"""Package upgrades and the payment history of each tenant."""
import logging
from datetime import datetime

from flask import current_app

from assetverse import db
from assetverse.errors import DuplicatePayment, Forbidden, InvalidInput, PaymentIncomplete
from assetverse.models import Package, Payment
from assetverse.payments import to_minor_units

logger = logging.getLogger(__name__)


def _gateway():
    return current_app.extensions['payment_gateway']


def list_packages():
    return Package.query.order_by(Package.employee_limit).all()


def create_intent(hr, package_name, amount, employee_limit):
    intent = _gateway().create_intent(amount, metadata={
        'hrEmail': hr.email,
        'packageName': package_name,
        'employeeLimit': employee_limit,
    })
    logger.info('Payment intent %s created for %s (%s)', intent.get('id'), hr.email, package_name)
    return intent['client_secret']


def confirm(hr, intent_id, package_name, employee_limit, amount):
    intent = _gateway().retrieve_intent(intent_id)
    if intent.get('status') != 'succeeded':
        logger.warning('Payment %s for %s not completed (%s)', intent_id, hr.email, intent.get('status'))
        raise PaymentIncomplete()

    metadata = intent.get('metadata') or {}
    owner = metadata.get('hrEmail')
    if owner and owner.lower() != hr.email:
        raise Forbidden('Payment belongs to another account')

    if Payment.query.filter_by(transaction_id=intent_id).first() is not None:
        raise DuplicatePayment()

    # The body must agree with what was charged
    if (str(metadata.get('packageName', '')).lower() != package_name.lower()
            or str(metadata.get('employeeLimit')) != str(employee_limit)
            or intent.get('amount') != to_minor_units(amount)):
        logger.warning('Payment %s does not match the confirmed package for %s', intent_id, hr.email)
        raise InvalidInput('Payment does not match the selected package')

    hr.package_limit = employee_limit
    hr.subscription = package_name.lower()
    hr.updated_at = datetime.utcnow()

    payment = Payment(
        hr_email=hr.email,
        package_name=package_name,
        employee_limit=employee_limit,
        amount=amount,
        transaction_id=intent_id,
        payment_date=datetime.utcnow(),
        status='completed',
    )
    db.session.add(payment)
    db.session.commit()
    logger.info('Package upgraded to %s (%d employees) for %s', package_name, employee_limit, hr.email)
    return payment


def history(hr):
    return (Payment.query
            .filter_by(hr_email=hr.email)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
            .all())
