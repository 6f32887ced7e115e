from assetverse import db, mail
from assetverse.models import Affiliation, Asset, AssetRequest, AssignedAsset, User

from conftest import add_asset, auth_headers, create_user, request_asset


def approve(client, headers, request_id):
    return client.post(f'/api/hr/requests/{request_id}/approve', headers=headers)


def inventory(app, asset_id):
    with app.app_context():
        asset = db.session.get(Asset, asset_id)
        return asset.product_quantity, asset.available_quantity


def test_request_approve_return_cycle(client, app, hr, employee):
    asset_id = add_asset(client, hr, name='Laptop', quantity=3)

    request_id = request_asset(client, employee, asset_id)
    requests = client.get('/api/hr/requests', headers=hr).get_json()
    assert [r['requestStatus'] for r in requests] == ['pending']
    assert requests[0]['requesterPhoto'].startswith('https://ui-avatars.com/api/?name=Emma')

    response = approve(client, hr, request_id)
    assert response.status_code == 200
    body = response.get_json()
    assert body['request']['requestStatus'] == 'approved'
    assert body['request']['processedBy'] == 'hr@acme.com'
    assignment = body['assignment']
    assert assignment['status'] == 'assigned'
    assert assignment['requestId'] == request_id
    assert assignment['assignmentType'] == 'request'
    assert inventory(app, asset_id) == (3, 2)

    with app.app_context():
        hr_user = User.query.filter_by(email='hr@acme.com').first()
        assert hr_user.current_employees == 1
        affiliation = Affiliation.query.filter_by(employee_email='emma@mail.com').one()
        assert affiliation.hr_email == 'hr@acme.com'
        assert affiliation.status == 'active'

    my_assets = client.get('/api/employee/my-assets', headers=employee).get_json()
    assert [a['id'] for a in my_assets] == [assignment['id']]
    assert my_assets[0]['requestDate'] is not None

    response = client.post(f"/api/employee/return-asset/{assignment['id']}", headers=employee)
    assert response.status_code == 200
    assert response.get_json()['assignment']['status'] == 'returned'
    assert inventory(app, asset_id) == (3, 3)

    with app.app_context():
        assert db.session.get(AssetRequest, request_id).request_status == 'returned'
        # Returning does not end the affiliation
        assert User.query.filter_by(email='hr@acme.com').first().current_employees == 1

    assert client.get('/api/employee/my-assets', headers=employee).get_json() == []


def test_second_approval_reuses_affiliation(client, app, hr, employee):
    laptop = add_asset(client, hr, name='Laptop', quantity=3)
    monitor = add_asset(client, hr, name='Monitor', quantity=3)
    for asset_id in (laptop, monitor):
        assert approve(client, hr, request_asset(client, employee, asset_id)).status_code == 200

    with app.app_context():
        assert Affiliation.query.filter_by(employee_email='emma@mail.com').count() == 1
        assert User.query.filter_by(email='hr@acme.com').first().current_employees == 1
    assert inventory(app, laptop) == (3, 2)
    assert inventory(app, monitor) == (3, 2)


def test_reject_has_no_inventory_effect(client, app, hr, employee):
    asset_id = add_asset(client, hr, quantity=2)
    request_id = request_asset(client, employee, asset_id)

    response = client.post(f'/api/hr/requests/{request_id}/reject', headers=hr,
                           json={'reason': 'Budget freeze'})
    assert response.status_code == 200
    rejected = response.get_json()['request']
    assert rejected['requestStatus'] == 'rejected'
    assert rejected['rejectionReason'] == 'Budget freeze'
    assert inventory(app, asset_id) == (2, 2)

    with app.app_context():
        assert Affiliation.query.count() == 0


def test_processed_request_cannot_change_again(client, hr, employee):
    asset_id = add_asset(client, hr)
    request_id = request_asset(client, employee, asset_id)
    client.post(f'/api/hr/requests/{request_id}/reject', headers=hr)

    response = approve(client, hr, request_id)
    assert response.status_code == 409
    assert response.get_json()['message'] == 'Request is already rejected'

    response = client.post(f'/api/hr/requests/{request_id}/reject', headers=hr)
    assert response.status_code == 409


def test_other_tenant_cannot_process_request(client, app, hr, other_hr, employee):
    asset_id = add_asset(client, hr)
    request_id = request_asset(client, employee, asset_id)

    assert approve(client, other_hr, request_id).status_code == 404
    assert client.post(f'/api/hr/requests/{request_id}/reject', headers=other_hr).status_code == 404
    assert client.get('/api/hr/requests', headers=other_hr).get_json() == []

    with app.app_context():
        assert db.session.get(AssetRequest, request_id).request_status == 'pending'


def test_list_requests_filters_by_status(client, hr, employee, second_employee):
    asset_id = add_asset(client, hr)
    first = request_asset(client, employee, asset_id)
    request_asset(client, second_employee, asset_id)
    approve(client, hr, first)

    pending = client.get('/api/hr/requests?status=pending', headers=hr).get_json()
    assert [r['requesterEmail'] for r in pending] == ['sam@mail.com']
    approved = client.get('/api/hr/requests?status=approved', headers=hr).get_json()
    assert [r['id'] for r in approved] == [first]
    assert len(client.get('/api/hr/requests?status=all', headers=hr).get_json()) == 2


def test_request_unavailable_asset_creates_nothing(client, app, hr, employee, second_employee):
    asset_id = add_asset(client, hr, quantity=1)
    approve(client, hr, request_asset(client, employee, asset_id))

    response = client.post('/api/employee/request-asset', headers=second_employee,
                           json={'assetId': asset_id})
    assert response.status_code == 409
    assert response.get_json()['message'] == 'Asset not available'

    with app.app_context():
        assert AssetRequest.query.filter_by(requester_email='sam@mail.com').count() == 0


def test_request_unknown_asset(client, employee):
    response = client.post('/api/employee/request-asset', headers=employee, json={'assetId': 999})
    assert response.status_code == 404

    response = client.post('/api/employee/request-asset', headers=employee, json={'note': 'hi'})
    assert response.status_code == 400


def test_last_unit_cannot_be_approved_twice(client, app, hr, employee, second_employee):
    asset_id = add_asset(client, hr, quantity=1)
    first = request_asset(client, employee, asset_id)
    second = request_asset(client, second_employee, asset_id)

    assert approve(client, hr, first).status_code == 200
    response = approve(client, hr, second)
    assert response.status_code == 409
    assert response.get_json()['message'] == 'Asset not available'
    assert inventory(app, asset_id) == (1, 0)

    with app.app_context():
        assert db.session.get(AssetRequest, second).request_status == 'pending'
        assert Affiliation.query.filter_by(employee_email='sam@mail.com').count() == 0
        assert User.query.filter_by(email='hr@acme.com').first().current_employees == 1


def test_limit_reached_has_no_side_effects(client, app, employee, second_employee):
    create_user(app, 'hr@tiny.com', role='hr', company_name='Tiny', package_limit=1)
    tiny = auth_headers('hr@tiny.com')

    asset_id = add_asset(client, tiny, quantity=5)
    assert approve(client, tiny, request_asset(client, employee, asset_id)).status_code == 200

    request_id = request_asset(client, second_employee, asset_id)
    response = approve(client, tiny, request_id)
    assert response.status_code == 409
    assert response.get_json()['message'] == 'Employee limit reached. Please upgrade your package.'
    assert inventory(app, asset_id) == (5, 4)

    with app.app_context():
        assert db.session.get(AssetRequest, request_id).request_status == 'pending'
        assert Affiliation.query.filter_by(employee_email='sam@mail.com').count() == 0
        assert AssignedAsset.query.filter_by(employee_email='sam@mail.com').count() == 0

    # Existing members are not counted again
    headset = add_asset(client, tiny, name='Headset', quantity=1)
    assert approve(client, tiny, request_asset(client, employee, headset)).status_code == 200


def test_employee_affiliated_elsewhere_cannot_be_approved(client, app, hr, other_hr, employee):
    approve(client, hr, request_asset(client, employee, add_asset(client, hr)))

    globex_asset = add_asset(client, other_hr, name='Phone')
    request_id = request_asset(client, employee, globex_asset)
    response = approve(client, other_hr, request_id)
    assert response.status_code == 409
    assert response.get_json()['message'] == 'This employee is already affiliated with Acme'
    assert inventory(app, globex_asset) == (3, 3)

    with app.app_context():
        assert User.query.filter_by(email='hr@globex.com').first().current_employees == 0


def test_direct_assignment(client, app, hr, employee):
    client.post('/api/hr/employees/assign', headers=hr, json={'employeeEmail': 'emma@mail.com'})
    asset_id = add_asset(client, hr, name='Headset', quantity=2)

    response = client.post('/api/hr/assign-asset-directly', headers=hr,
                           json={'employeeEmail': 'emma@mail.com', 'assetId': asset_id})
    assert response.status_code == 200
    assignment = response.get_json()['assignment']
    assert assignment['assignmentType'] == 'direct'
    assert assignment['assignedBy'] == 'hr@acme.com'
    assert inventory(app, asset_id) == (2, 1)

    with app.app_context():
        request = db.session.get(AssetRequest, assignment['requestId'])
        assert request.request_status == 'approved'
        assert request.assignment_type == 'direct'
        assert request.note == 'Directly assigned by HR'

    response = client.post('/api/hr/assign-asset-directly', headers=hr,
                           json={'employeeEmail': 'emma@mail.com', 'assetId': asset_id})
    assert response.status_code == 409
    assert response.get_json()['message'] == 'This employee already has this asset'
    assert inventory(app, asset_id) == (2, 1)

    # A returned direct assignment closes its request like any other
    client.post(f"/api/employee/return-asset/{assignment['id']}", headers=employee)
    assert inventory(app, asset_id) == (2, 2)
    with app.app_context():
        assert db.session.get(AssetRequest, assignment['requestId']).request_status == 'returned'


def test_direct_assignment_requires_affiliation(client, app, hr, employee):
    asset_id = add_asset(client, hr)
    response = client.post('/api/hr/assign-asset-directly', headers=hr,
                           json={'employeeEmail': 'emma@mail.com', 'assetId': asset_id})
    assert response.status_code == 404
    assert response.get_json()['message'] == 'Employee not found in your company'
    assert inventory(app, asset_id) == (3, 3)


def test_direct_assignment_of_exhausted_asset(client, app, hr, employee, second_employee):
    asset_id = add_asset(client, hr, quantity=1)
    approve(client, hr, request_asset(client, employee, asset_id))
    client.post('/api/hr/employees/assign', headers=hr, json={'employeeEmail': 'sam@mail.com'})

    response = client.post('/api/hr/assign-asset-directly', headers=hr,
                           json={'employeeEmail': 'sam@mail.com', 'assetId': asset_id})
    assert response.status_code == 409
    assert response.get_json()['message'] == 'Asset is not available (quantity: 0)'


def test_return_requires_ownership(client, hr, employee, second_employee):
    asset_id = add_asset(client, hr)
    assignment = approve(client, hr, request_asset(client, employee, asset_id)).get_json()['assignment']
    url = f"/api/employee/return-asset/{assignment['id']}"

    assert client.post(url, headers=second_employee).status_code == 404
    assert client.post(url, headers=employee).status_code == 200
    assert client.post(url, headers=employee).status_code == 404


def test_my_assets_search_and_type_filter(client, hr, employee):
    laptop = add_asset(client, hr, name='Laptop')
    mouse = add_asset(client, hr, name='Mouse', product_type='Non-returnable')
    approve(client, hr, request_asset(client, employee, laptop))
    approve(client, hr, request_asset(client, employee, mouse))

    names = [a['assetName'] for a in client.get('/api/employee/my-assets', headers=employee).get_json()]
    assert sorted(names) == ['Laptop', 'Mouse']

    found = client.get('/api/employee/my-assets?search=lap', headers=employee).get_json()
    assert [a['assetName'] for a in found] == ['Laptop']

    found = client.get('/api/employee/my-assets?type=Non-returnable', headers=employee).get_json()
    assert [a['assetName'] for a in found] == ['Mouse']


def test_assignment_sends_email(client, app, hr, employee):
    asset_id = add_asset(client, hr, name='Laptop')
    request_id = request_asset(client, employee, asset_id)

    with mail.record_messages() as outbox:
        approve(client, hr, request_id)

    assert len(outbox) == 1
    assert outbox[0].recipients == ['emma@mail.com']
    assert outbox[0].subject == 'New Asset Assignment'
    assert 'Asset: Laptop' in outbox[0].body

    app.config['NOTIFY_ON_ASSIGNMENT'] = False
    with mail.record_messages() as outbox:
        approve(client, hr, request_asset(client, employee, add_asset(client, hr, name='Mouse')))
    assert outbox == []


def test_inventory_stays_consistent(client, app, hr, employee, second_employee):
    asset_id = add_asset(client, hr, quantity=2)

    def check():
        with app.app_context():
            asset = db.session.get(Asset, asset_id)
            held = AssignedAsset.query.filter_by(asset_id=asset_id, status='assigned').count()
            assert 0 <= asset.available_quantity <= asset.product_quantity
            assert asset.product_quantity - asset.available_quantity == held

    assignments = []
    for headers in (employee, second_employee, employee):
        response = client.post('/api/employee/request-asset', headers=headers,
                               json={'assetId': asset_id})
        if response.status_code == 201:
            approved = approve(client, hr, response.get_json()['request']['id'])
            if approved.status_code == 200:
                assignments.append((headers, approved.get_json()['assignment']['id']))
        check()

    assert len(assignments) == 2
    for headers, assignment_id in assignments:
        client.post(f'/api/employee/return-asset/{assignment_id}', headers=headers)
        check()

    client.put(f'/api/hr/assets/{asset_id}', headers=hr, json={
        'productName': 'Laptop', 'productType': 'Returnable', 'productQuantity': 4,
    })
    check()
    client.delete('/api/hr/employees/emma@mail.com', headers=hr)
    check()


def test_one_active_request_per_asset(client, app, hr, employee):
    asset_id = add_asset(client, hr, quantity=3)
    request_id = request_asset(client, employee, asset_id)

    response = client.post('/api/employee/request-asset', headers=employee, json={'assetId': asset_id})
    assert response.status_code == 409
    assert response.get_json()['message'] == 'You already have an active request for this asset'

    # A rejected request can be filed again
    client.post(f'/api/hr/requests/{request_id}/reject', headers=hr)
    request_id = request_asset(client, employee, asset_id)

    assignment = approve(client, hr, request_id).get_json()['assignment']
    response = client.post('/api/employee/request-asset', headers=employee, json={'assetId': asset_id})
    assert response.status_code == 409

    client.post(f"/api/employee/return-asset/{assignment['id']}", headers=employee)
    request_asset(client, employee, asset_id)
    assert inventory(app, asset_id) == (3, 3)

    with app.app_context():
        held = AssignedAsset.query.filter_by(employee_email='emma@mail.com', status='assigned')
        assert held.count() == 0


def test_deleted_asset_links_are_cut(client, app, hr, other_hr, employee, second_employee):
    create_user(app, 'lee@mail.com', name='Lee')
    laptop = add_asset(client, hr, name='Laptop', quantity=2)
    assignment = approve(client, hr, request_asset(client, employee, laptop)).get_json()['assignment']
    pending_id = request_asset(client, second_employee, laptop)

    assert client.delete(f'/api/hr/assets/{laptop}', headers=hr).status_code == 200

    with app.app_context():
        assert db.session.get(AssetRequest, pending_id).asset_id is None
        assert db.session.get(AssignedAsset, assignment['id']).asset_id is None

    # Another tenant's asset, possibly under the freed id, with one unit out
    phone = add_asset(client, other_hr, name='Phone', quantity=2)
    approve(client, other_hr, request_asset(client, auth_headers('lee@mail.com'), phone))
    assert inventory(app, phone) == (2, 1)

    response = approve(client, hr, pending_id)
    assert response.status_code == 409
    assert response.get_json()['message'] == 'Asset not available'

    response = client.post(f"/api/employee/return-asset/{assignment['id']}", headers=employee)
    assert response.status_code == 200
    assert inventory(app, phone) == (2, 1)


def test_return_never_restores_another_tenants_asset(client, app, hr, other_hr, employee):
    laptop = add_asset(client, hr, name='Laptop', quantity=1)
    assignment = approve(client, hr, request_asset(client, employee, laptop)).get_json()['assignment']
    phone = add_asset(client, other_hr, name='Phone', quantity=2)

    with app.app_context():
        # Point the assignment at the other tenant's asset
        held = db.session.get(AssignedAsset, assignment['id'])
        held.asset_id = phone
        asset = db.session.get(Asset, phone)
        asset.available_quantity = 1
        db.session.commit()

    client.post(f"/api/employee/return-asset/{assignment['id']}", headers=employee)
    assert inventory(app, phone) == (2, 1)
