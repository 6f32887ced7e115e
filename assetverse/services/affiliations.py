# assetverse/services/affiliations.py
"""Employee-to-tenant membership and the tenant employee count."""
import logging
from datetime import datetime

from sqlalchemy import func

from assetverse import db
from assetverse.errors import (AlreadyAffiliatedOtherTenant, AlreadyAffiliatedSameTenant,
                               LimitReached, NotFound)
from assetverse.models import (Affiliation, AffiliationStatus, AssignedAsset, AssignmentStatus,
                               RequestStatus, User, UserRole)
from assetverse.services import catalog

logger = logging.getLogger(__name__)

ACTIVE = AffiliationStatus.ACTIVE.value


def active_affiliation(employee_email, hr_email=None):
    query = Affiliation.query.filter_by(employee_email=employee_email, status=ACTIVE)
    if hr_email is not None:
        query = query.filter_by(hr_email=hr_email)
    return query.first()


def ensure_not_affiliated(hr, employee_email):
    current = active_affiliation(employee_email)
    if current is None:
        return
    if current.hr_email == hr.email:
        raise AlreadyAffiliatedSameTenant()
    raise AlreadyAffiliatedOtherTenant(
        f'This employee is already affiliated with {current.company_name}')


def reserve_seat(hr):
    """Increment the tenant's employee count, iff it is below the package limit."""
    reserved = (User.query
                .filter(User.id == hr.id, User.current_employees < User.package_limit)
                .update({User.current_employees: User.current_employees + 1},
                        synchronize_session=False))
    db.session.expire(hr, ['current_employees'])
    if not reserved:
        logger.warning('Employee limit reached for %s (%s)', hr.email, hr.package_limit)
        raise LimitReached(
            f'Employee limit reached ({hr.package_limit}). Please upgrade your package.')


def release_seat(hr):
    (User.query
     .filter(User.id == hr.id, User.current_employees > 0)
     .update({User.current_employees: User.current_employees - 1},
             synchronize_session=False))
    db.session.expire(hr, ['current_employees'])


def affiliate(hr, employee_email, employee_name):
    """Create an active affiliation and take a seat. Does not commit."""
    ensure_not_affiliated(hr, employee_email)
    reserve_seat(hr)
    affiliation = Affiliation(
        employee_email=employee_email,
        employee_name=employee_name,
        hr_email=hr.email,
        company_name=hr.company_name,
        company_logo=hr.company_logo or '',
        affiliation_date=datetime.utcnow(),
        status=ACTIVE,
    )
    db.session.add(affiliation)
    return affiliation


def assign_employee(hr, employee_email):
    employee = User.query.filter_by(email=employee_email, role=UserRole.EMPLOYEE.value).first()
    if employee is None:
        raise NotFound('Employee not found or invalid role')

    affiliation = affiliate(hr, employee.email, employee.name)
    db.session.commit()
    logger.info('Employee %s affiliated with %s', employee.email, hr.email)
    return employee, affiliation


def remove_employee(hr, employee_email):
    """Deactivate the affiliation and return everything the employee holds.

    Each returned assignment gives its unit back to the asset and closes the
    request that produced it, exactly like a single return.
    """
    affiliation = active_affiliation(employee_email, hr.email)
    if affiliation is None:
        raise NotFound('Employee not found in your company')

    affiliation.status = AffiliationStatus.INACTIVE.value

    now = datetime.utcnow()
    held = AssignedAsset.query.filter_by(
        employee_email=employee_email,
        hr_email=hr.email,
        status=AssignmentStatus.ASSIGNED.value,
    ).all()
    for assignment in held:
        assignment.status = AssignmentStatus.RETURNED.value
        assignment.return_date = now
        if assignment.request is not None:
            assignment.request.request_status = RequestStatus.RETURNED.value
        catalog.restore_unit(assignment.asset_id, assignment.hr_email)

    release_seat(hr)
    db.session.commit()
    logger.info('Employee %s removed from %s, %d asset(s) returned',
                employee_email, hr.email, len(held))
    return len(held)


def list_employees(hr):
    affiliations = Affiliation.query.filter_by(hr_email=hr.email, status=ACTIVE).all()
    by_email = {a.employee_email: a for a in affiliations}
    if not by_email:
        return []

    employees = User.query.filter(
        User.email.in_(list(by_email)),
        User.role == UserRole.EMPLOYEE.value,
    ).all()

    counts = dict(
        db.session.query(AssignedAsset.employee_email, func.count(AssignedAsset.id))
        .filter(
            AssignedAsset.hr_email == hr.email,
            AssignedAsset.status == AssignmentStatus.ASSIGNED.value,
            AssignedAsset.employee_email.in_(list(by_email)),
        )
        .group_by(AssignedAsset.employee_email)
        .all()
    )

    result = []
    for employee in employees:
        data = employee.to_dict()
        data['assetsCount'] = counts.get(employee.email, 0)
        data['joinDate'] = by_email[employee.email].affiliation_date.isoformat()
        result.append(data)
    return result


def list_available_employees():
    """Employees with no active affiliation to any tenant."""
    affiliated = db.select(Affiliation.employee_email).where(Affiliation.status == ACTIVE)
    return (User.query
            .filter(User.role == UserRole.EMPLOYEE.value, User.email.not_in(affiliated))
            .order_by(User.created_at.desc())
            .all())


def my_companies(employee_email):
    affiliations = (Affiliation.query
                    .filter_by(employee_email=employee_email, status=ACTIVE)
                    .order_by(Affiliation.affiliation_date.desc())
                    .all())
    return [{
        'id': a.id,
        'name': a.company_name,
        'logo': a.company_logo or '',
        'hrEmail': a.hr_email,
        'joinDate': a.affiliation_date.isoformat(),
    } for a in affiliations]


def team_members(employee_email, affiliation_id):
    company = db.session.get(Affiliation, affiliation_id)
    if company is None or active_affiliation(employee_email, company.hr_email) is None:
        raise NotFound('Company not found')

    teammates = (db.session.query(User)
                 .join(Affiliation, Affiliation.employee_email == User.email)
                 .filter(
                     Affiliation.hr_email == company.hr_email,
                     Affiliation.status == ACTIVE,
                     User.role == UserRole.EMPLOYEE.value,
                     User.email != employee_email,
                 )
                 .order_by(User.name)
                 .all())
    return [{
        'id': member.id,
        'name': member.name,
        'email': member.email,
        'photo': member.photo,
        'position': 'Employee',
        'birthday': member.date_of_birth.isoformat() if member.date_of_birth else None,
    } for member in teammates]

