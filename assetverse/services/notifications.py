# assetverse/services/notifications.py
import logging
from smtplib import SMTPException

from flask import current_app
from flask_mail import Message

from assetverse import mail

logger = logging.getLogger(__name__)


def send_assignment_email(assignment):
    if not current_app.config.get('NOTIFY_ON_ASSIGNMENT'):
        return False

    msg = Message('New Asset Assignment',
                  recipients=[assignment.employee_email])
    msg.body = f'''Dear {assignment.employee_name},

You have been assigned a new asset:
Asset: {assignment.asset_name}
Type: {assignment.asset_type}
Company: {assignment.company_name}
Assigned on: {assignment.assignment_date.strftime('%Y-%m-%d')}

Please log in to AssetVerse to view the details.

Thank you,
{assignment.company_name or 'AssetVerse'}
'''
    try:
        mail.send(msg)
    except (SMTPException, OSError) as e:
        # The assignment is already committed
        logger.error('Could not send assignment email to %s: %s', assignment.employee_email, e)
        return False
    return True
