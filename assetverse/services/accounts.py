# assetverse/services/accounts.py
"""Registration, login stamps and profile updates."""
import logging
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Optional

from flask import current_app

from assetverse import db
from assetverse.errors import DuplicateRegistration, NotFound
from assetverse.models import User, UserRole
from assetverse.models.user import default_avatar

logger = logging.getLogger(__name__)


def register(principal, name, role, date_of_birth=None, photo=None,
             company_name=None, company_logo=None):
    existing = User.query.filter(
        (User.email == principal.email) | (User.firebase_uid == principal.uid)
    ).first()
    if existing is not None:
        logger.warning('User already exists: %s', principal.email)
        raise DuplicateRegistration()

    name = name.strip()
    user = User(
        firebase_uid=principal.uid,
        name=name,
        email=principal.email,
        role=role,
        date_of_birth=date_of_birth,
        profile_image=photo or default_avatar(name),
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow(),
    )

    if role == UserRole.HR.value:
        user.company_name = company_name.strip()
        user.company_logo = company_logo or ''
        user.package_limit = current_app.config['DEFAULT_PACKAGE_LIMIT']
        user.current_employees = 0
        user.subscription = current_app.config['DEFAULT_SUBSCRIPTION']

    db.session.add(user)
    db.session.commit()
    logger.info('User registered successfully: %s (%s)', user.email, user.role)
    return user


def login(principal):
    user = principal.account
    if user is None:
        raise NotFound('User not found. Please register first.')
    user.last_login = datetime.utcnow()
    db.session.commit()
    return user


@dataclass
class ProfilePatch:
    """Sparse profile update: ``None`` leaves the attribute untouched."""
    name: Optional[str] = None
    date_of_birth: Optional[date] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None

    def apply(self, user):
        changed = []
        for field in fields(self):
            value = getattr(self, field.name)
            if value is None:
                continue
            if isinstance(value, str):
                value = value.strip()
            setattr(user, field.name, value)
            changed.append(field.name)
        user.updated_at = datetime.utcnow()
        return changed

    @classmethod
    def from_form(cls, form):
        def given(name):
            return form[name].data if form.provided(name) else None

        return cls(
            # Blank name and photo are ignored rather than cleared
            name=given('name') or None,
            date_of_birth=given('dateOfBirth'),
            phone=given('phone'),
            profile_image=given('photo') or None,
            address=given('address'),
            bio=given('bio'),
        )


def update_profile(user, patch):
    changed = patch.apply(user)
    db.session.commit()
    logger.info('Profile updated for %s (%s)', user.email, ', '.join(changed) or 'no fields')
    return user
