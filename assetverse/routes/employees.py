# assetverse/routes/employees.py
from flask import jsonify
from flask_login import current_user

from assetverse.auth import hr_required
from assetverse.forms import AssignEmployeeForm, DirectAssignForm
from assetverse.routes import employees_bp as bp
from assetverse.services import affiliations, workflow


@bp.route('/employees', methods=['GET'])
@hr_required
def list_employees():
    hr = current_user.account
    return jsonify({
        'employees': affiliations.list_employees(hr),
        'packageLimit': hr.package_limit,
        'currentEmployees': hr.current_employees,
    })


@bp.route('/employees/assign', methods=['POST'])
@hr_required
def assign_employee():
    form = AssignEmployeeForm.from_json().validate_or_raise()
    employee, affiliation = affiliations.assign_employee(
        current_user.account, form.employeeEmail.data.strip().lower())
    return jsonify({
        'message': f'{employee.name} has been added to your company successfully!',
        'employee': {
            'name': employee.name,
            'email': employee.email,
            'profileImage': employee.photo,
        },
        'affiliation': affiliation.to_dict(),
    })


@bp.route('/employees/<email>', methods=['DELETE'])
@hr_required
def remove_employee(email):
    returned = affiliations.remove_employee(current_user.account, email.strip().lower())
    return jsonify({'message': 'Employee removed successfully', 'returnedAssets': returned})


@bp.route('/available-employees', methods=['GET'])
@hr_required
def available_employees():
    return jsonify([employee.to_dict() for employee in affiliations.list_available_employees()])


@bp.route('/assign-asset-directly', methods=['POST'])
@hr_required
def assign_asset_directly():
    form = DirectAssignForm.from_json().validate_or_raise()
    assignment = workflow.direct_assign(
        current_user.account,
        form.employeeEmail.data.strip().lower(),
        form.assetId.data,
        form.note.data,
    )
    return jsonify({
        'message': f'{assignment.asset_name} has been assigned to {assignment.employee_name} successfully!',
        'assignment': assignment.to_dict(),
    })
