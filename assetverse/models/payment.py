# assetverse/models/payment.py
from datetime import datetime

from assetverse import db
from assetverse.models.user import _iso


class Package(db.Model):
    """Subscription packages offered to HR tenants"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(40), unique=True, nullable=False)
    employee_limit = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    features = db.Column(db.JSON)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'employeeLimit': self.employee_limit,
            'price': float(self.price),
            'features': self.features or [],
        }


class Payment(db.Model):
    """Confirmed package purchases. Rows are never updated."""
    id = db.Column(db.Integer, primary_key=True)
    hr_email = db.Column(db.String(120), nullable=False, index=True)
    package_name = db.Column(db.String(40), nullable=False)
    employee_limit = db.Column(db.Integer, nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    transaction_id = db.Column(db.String(255), unique=True, nullable=False)
    payment_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    status = db.Column(db.String(20), nullable=False, default="completed")

    def to_dict(self):
        return {
            'id': self.id,
            'hrEmail': self.hr_email,
            'packageName': self.package_name,
            'employeeLimit': self.employee_limit,
            'amount': float(self.amount),
            'transactionId': self.transaction_id,
            'paymentDate': _iso(self.payment_date),
            'status': self.status,
        }
