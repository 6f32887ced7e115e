# assetverse/models/user.py
from datetime import datetime
from enum import Enum
from urllib.parse import quote

from assetverse import db


class UserRole(Enum):
    HR = "hr"
    EMPLOYEE = "employee"


def default_avatar(name):
    return f"https://ui-avatars.com/api/?name={quote(name or '')}&size=200"


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    firebase_uid = db.Column(db.String(128), unique=True, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    role = db.Column(db.String(20), nullable=False, index=True)
    date_of_birth = db.Column(db.Date)
    profile_image = db.Column(db.String(500))
    phone = db.Column(db.String(40))
    address = db.Column(db.String(255))
    bio = db.Column(db.Text)

    # HR-only fields
    company_name = db.Column(db.String(120))
    company_logo = db.Column(db.String(500))
    package_limit = db.Column(db.Integer)
    current_employees = db.Column(db.Integer)
    subscription = db.Column(db.String(40))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime)

    @property
    def is_hr(self):
        return self.role == UserRole.HR.value

    @property
    def photo(self):
        return self.profile_image or default_avatar(self.name)

    def to_dict(self):
        data = {
            'id': self.id,
            'firebaseUid': self.firebase_uid,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'dateOfBirth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'profileImage': self.photo,
            'phone': self.phone,
            'address': self.address,
            'bio': self.bio,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
            'lastLogin': _iso(self.last_login),
        }
        if self.is_hr:
            data.update({
                'companyName': self.company_name,
                'companyLogo': self.company_logo or '',
                'packageLimit': self.package_limit,
                'currentEmployees': self.current_employees,
                'subscription': self.subscription,
            })
        return data

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'


def _iso(value):
    return value.isoformat() if value else None
