# assetverse/services/workflow.py
"""Asset lifecycle: request -> approve/reject -> assignment -> return.

State per request record::

    pending -> approved -> returned
    pending -> rejected

``rejected`` and ``returned`` are terminal; the employee may file a new
request afterwards. Each operation commits all of its writes together.
Availability and seat counts change through conditional single-statement
updates, so two concurrent approvals cannot both take the last unit.
"""
import logging
from datetime import datetime

from assetverse import db
from assetverse.errors import (AlreadyAffiliatedOtherTenant, AssetUnavailable,
                               DuplicateAssignment, DuplicateRequest, InvalidTransition,
                               LimitReached, NotFound)
from assetverse.models import (Asset, AssetRequest, AssignedAsset, AssignmentStatus,
                               AssignmentType, RequestStatus, User)
from assetverse.services import affiliations, catalog, notifications

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (RequestStatus.PENDING.value, RequestStatus.APPROVED.value)


def submit_request(employee, asset_id, note=''):
    asset = db.session.get(Asset, asset_id)
    if asset is None:
        raise NotFound('Asset not found')
    if asset.available_quantity < 1:
        raise AssetUnavailable()

    # One pending or approved request per employee and asset
    active = AssetRequest.query.filter(
        AssetRequest.asset_id == asset.id,
        AssetRequest.requester_email == employee.email,
        AssetRequest.request_status.in_(ACTIVE_STATUSES),
    ).first()
    if active is not None:
        raise DuplicateRequest()

    request = AssetRequest(
        asset_id=asset.id,
        asset_name=asset.product_name,
        asset_type=asset.product_type,
        requester_name=employee.name,
        requester_email=employee.email,
        hr_email=asset.hr_email,
        company_name=asset.company_name,
        request_date=datetime.utcnow(),
        request_status=RequestStatus.PENDING.value,
        note=note or '',
        assignment_type=AssignmentType.REQUEST.value,
    )
    db.session.add(request)
    db.session.commit()
    logger.info('%s requested asset %s', employee.email, asset.id)
    return request


def list_requests(hr, status=None):
    query = AssetRequest.query.filter_by(hr_email=hr.email)
    if status and status.lower() != 'all':
        query = query.filter_by(request_status=status.lower())
    requests = query.order_by(AssetRequest.request_date.desc(), AssetRequest.id.desc()).all()

    emails = {r.requester_email for r in requests}
    users = {u.email: u for u in User.query.filter(User.email.in_(emails)).all()} if emails else {}

    result = []
    for request in requests:
        data = request.to_dict()
        requester = users.get(request.requester_email)
        data['requesterPhoto'] = requester.photo if requester else None
        result.append(data)
    return result


def _pending_request(hr, request_id):
    request = AssetRequest.query.filter_by(id=request_id, hr_email=hr.email).first()
    if request is None:
        raise NotFound('Request not found')
    if not request.is_pending:
        raise InvalidTransition(f'Request is already {request.request_status}')
    return request


def _assign(hr, asset, request, employee_email, employee_name, assignment_type):
    catalog.take_unit(asset)
    assignment = AssignedAsset(
        asset_id=asset.id,
        request=request,
        asset_name=asset.product_name,
        asset_image=asset.product_image,
        asset_type=asset.product_type,
        employee_email=employee_email,
        employee_name=employee_name,
        hr_email=hr.email,
        company_name=hr.company_name,
        assignment_date=datetime.utcnow(),
        status=AssignmentStatus.ASSIGNED.value,
        assignment_type=assignment_type,
        assigned_by=hr.email,
    )
    db.session.add(assignment)
    return assignment


def approve(hr, request_id):
    request = _pending_request(hr, request_id)

    # First approved request between this employee and tenant affiliates them
    first_time = affiliations.active_affiliation(request.requester_email, hr.email) is None
    if first_time:
        other = affiliations.active_affiliation(request.requester_email)
        if other is not None:
            raise AlreadyAffiliatedOtherTenant(
                f'This employee is already affiliated with {other.company_name}')
        if hr.current_employees >= hr.package_limit:
            logger.warning('Employee limit reached for %s, request %s not approved',
                           hr.email, request.id)
            raise LimitReached()

    asset = None
    if request.asset_id is not None:
        asset = Asset.query.filter_by(id=request.asset_id, hr_email=request.hr_email).first()
    if asset is None or asset.available_quantity < 1:
        raise AssetUnavailable()

    if first_time:
        affiliations.affiliate(hr, request.requester_email, request.requester_name)

    now = datetime.utcnow()
    request.request_status = RequestStatus.APPROVED.value
    request.approval_date = now
    request.processed_by = hr.email

    assignment = _assign(hr, asset, request, request.requester_email,
                         request.requester_name, AssignmentType.REQUEST.value)
    db.session.commit()
    logger.info('Request %s approved by %s', request.id, hr.email)
    notifications.send_assignment_email(assignment)
    return request, assignment


def reject(hr, request_id, reason=''):
    request = _pending_request(hr, request_id)
    request.request_status = RequestStatus.REJECTED.value
    request.processed_by = hr.email
    request.rejection_reason = reason or ''
    db.session.commit()
    logger.info('Request %s rejected by %s', request.id, hr.email)
    return request


def direct_assign(hr, employee_email, asset_id, note=''):
    affiliation = affiliations.active_affiliation(employee_email, hr.email)
    if affiliation is None:
        raise NotFound('Employee not found in your company')

    asset = catalog.get_owned_asset(hr, asset_id)
    if asset.available_quantity < 1:
        raise AssetUnavailable('Asset is not available (quantity: 0)')

    existing = AssignedAsset.query.filter_by(
        asset_id=asset.id,
        employee_email=employee_email,
        status=AssignmentStatus.ASSIGNED.value,
    ).first()
    if existing is not None:
        raise DuplicateAssignment()

    now = datetime.utcnow()
    # Pre-approved request kept for the audit trail
    request = AssetRequest(
        asset_id=asset.id,
        asset_name=asset.product_name,
        asset_type=asset.product_type,
        requester_name=affiliation.employee_name,
        requester_email=employee_email,
        hr_email=hr.email,
        company_name=affiliation.company_name,
        request_date=now,
        approval_date=now,
        request_status=RequestStatus.APPROVED.value,
        note=note or 'Directly assigned by HR',
        processed_by=hr.email,
        assignment_type=AssignmentType.DIRECT.value,
    )
    db.session.add(request)

    assignment = _assign(hr, asset, request, employee_email, affiliation.employee_name,
                         AssignmentType.DIRECT.value)
    db.session.commit()
    logger.info('Asset %s assigned directly to %s by %s', asset.id, employee_email, hr.email)
    notifications.send_assignment_email(assignment)
    return assignment


def return_asset(employee, assignment_id):
    assignment = AssignedAsset.query.filter_by(
        id=assignment_id,
        employee_email=employee.email,
        status=AssignmentStatus.ASSIGNED.value,
    ).first()
    if assignment is None:
        raise NotFound('Asset not found')

    assignment.status = AssignmentStatus.RETURNED.value
    assignment.return_date = datetime.utcnow()
    if assignment.request is not None:
        assignment.request.request_status = RequestStatus.RETURNED.value
    catalog.restore_unit(assignment.asset_id, assignment.hr_email)
    db.session.commit()
    logger.info('%s returned assignment %s', employee.email, assignment.id)
    return assignment


def my_assets(employee, search='', asset_type=None):
    query = AssignedAsset.query.filter_by(
        employee_email=employee.email,
        status=AssignmentStatus.ASSIGNED.value,
    )
    if asset_type and asset_type != 'All':
        query = query.filter_by(asset_type=asset_type)
    assignments = query.order_by(AssignedAsset.assignment_date.desc(), AssignedAsset.id.desc()).all()

    if search:
        assignments = [a for a in assignments if search.lower() in (a.asset_name or '').lower()]

    result = []
    for assignment in assignments:
        data = assignment.to_dict()
        request = assignment.request
        data['requestDate'] = (request.request_date if request else assignment.assignment_date).isoformat()
        data['approvalDate'] = ((request.approval_date if request else None)
                                or assignment.assignment_date).isoformat()
        result.append(data)
    return result
