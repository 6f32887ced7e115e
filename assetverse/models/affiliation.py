# assetverse/models/affiliation.py
from datetime import datetime
from enum import Enum

from assetverse import db
from assetverse.models.user import _iso


class AffiliationStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Affiliation(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    employee_email = db.Column(db.String(120), nullable=False, index=True)
    employee_name = db.Column(db.String(120))
    hr_email = db.Column(db.String(120), nullable=False, index=True)
    company_name = db.Column(db.String(120))
    company_logo = db.Column(db.String(500))
    affiliation_date = db.Column(db.DateTime, default=datetime.utcnow)
    status = db.Column(db.String(20), nullable=False, default=AffiliationStatus.ACTIVE.value)

    # At most one active affiliation per employee, system-wide
    __table_args__ = (
        db.Index(
            'uq_affiliation_active_employee', 'employee_email', unique=True,
            sqlite_where=db.text("status = 'active'"),
            postgresql_where=db.text("status = 'active'"),
        ),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'employeeEmail': self.employee_email,
            'employeeName': self.employee_name,
            'hrEmail': self.hr_email,
            'companyName': self.company_name,
            'companyLogo': self.company_logo or '',
            'affiliationDate': _iso(self.affiliation_date),
            'status': self.status,
        }
