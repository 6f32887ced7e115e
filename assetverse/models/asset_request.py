# assetverse/models/asset_request.py
from datetime import datetime
from enum import Enum

from assetverse import db
from assetverse.models.user import _iso


class RequestStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    RETURNED = "returned"


class AssignmentType(Enum):
    REQUEST = "request"
    DIRECT = "direct"


class AssetRequest(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    asset_id = db.Column(db.Integer, db.ForeignKey('asset.id', ondelete='SET NULL'), nullable=True)
    asset_name = db.Column(db.String(200))
    asset_type = db.Column(db.String(30))
    requester_name = db.Column(db.String(120))
    requester_email = db.Column(db.String(120), nullable=False)
    hr_email = db.Column(db.String(120), nullable=False)
    company_name = db.Column(db.String(120))
    request_date = db.Column(db.DateTime, default=datetime.utcnow)
    approval_date = db.Column(db.DateTime)
    request_status = db.Column(db.String(20), nullable=False, default=RequestStatus.PENDING.value)
    note = db.Column(db.Text, default='')
    processed_by = db.Column(db.String(120))
    rejection_reason = db.Column(db.Text)
    assignment_type = db.Column(db.String(20), default=AssignmentType.REQUEST.value)

    __table_args__ = (
        db.Index('ix_asset_request_requester_hr', 'requester_email', 'hr_email'),
    )

    @property
    def is_pending(self):
        return self.request_status == RequestStatus.PENDING.value

    def to_dict(self):
        return {
            'id': self.id,
            'assetId': self.asset_id,
            'assetName': self.asset_name,
            'assetType': self.asset_type,
            'requesterName': self.requester_name,
            'requesterEmail': self.requester_email,
            'hrEmail': self.hr_email,
            'companyName': self.company_name,
            'requestDate': _iso(self.request_date),
            'approvalDate': _iso(self.approval_date),
            'requestStatus': self.request_status,
            'note': self.note or '',
            'processedBy': self.processed_by,
            'rejectionReason': self.rejection_reason,
            'assignmentType': self.assignment_type,
        }

    def __repr__(self):
        return f'<AssetRequest {self.id} {self.requester_email} -> {self.asset_name} ({self.request_status})>'
