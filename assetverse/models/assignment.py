# assetverse/models/assignment.py
from datetime import datetime
from enum import Enum

from assetverse import db
from assetverse.models.user import _iso


class AssignmentStatus(Enum):
    ASSIGNED = "assigned"
    RETURNED = "returned"


class AssignedAsset(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset.id', ondelete='SET NULL'), nullable=True)
    request_id = db.Column(db.Integer, db.ForeignKey('asset_request.id'), nullable=True)
    asset_name = db.Column(db.String(200))
    asset_image = db.Column(db.String(500))
    asset_type = db.Column(db.String(30))
    employee_email = db.Column(db.String(120), nullable=False, index=True)
    employee_name = db.Column(db.String(120))
    hr_email = db.Column(db.String(120), nullable=False, index=True)
    company_name = db.Column(db.String(120))
    assignment_date = db.Column(db.DateTime, default=datetime.utcnow)
    return_date = db.Column(db.DateTime)
    status = db.Column(db.String(20), nullable=False, default=AssignmentStatus.ASSIGNED.value)
    assignment_type = db.Column(db.String(20))
    assigned_by = db.Column(db.String(120))

    request = db.relationship('AssetRequest', backref='assignments', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'assetId': self.asset_id,
            'requestId': self.request_id,
            'assetName': self.asset_name,
            'assetImage': self.asset_image,
            'assetType': self.asset_type,
            'employeeEmail': self.employee_email,
            'employeeName': self.employee_name,
            'hrEmail': self.hr_email,
            'companyName': self.company_name,
            'assignmentDate': _iso(self.assignment_date),
            'returnDate': _iso(self.return_date),
            'status': self.status,
            'assignmentType': self.assignment_type,
            'assignedBy': self.assigned_by,
        }
