# assetverse/forms.py
"""Input forms. Bodies arrive as JSON; Flask-WTF feeds them to the fields."""
from flask import request
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import DateField, DecimalField, IntegerField, StringField
from wtforms.validators import (AnyOf, DataRequired, Email, InputRequired, Length,
                                NumberRange, Optional, ValidationError)

from assetverse.errors import InvalidInput, form_errors
from assetverse.models import AssetType, UserRole


class ApiForm(FlaskForm):
    class Meta:
        # Authentication is by bearer token, so there is no CSRF cookie to check
        csrf = False

    @classmethod
    def from_json(cls):
        """Build the form from the JSON body, dropping nulls and nested values."""
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            body = {}
        formdata = MultiDict({
            key: str(value) for key, value in body.items()
            if value is not None and not isinstance(value, (dict, list, bool))
        })
        return cls(formdata=formdata)

    def provided(self, name):
        """True when the body carried the field at all."""
        return bool(self[name].raw_data)

    def validate_or_raise(self):
        if not self.validate():
            errors = form_errors(self)
            field, message = next(iter(errors.items()))
            raise InvalidInput(f'{field}: {message}', errors=errors)
        return self


def _valid_asset_type(form, field):
    try:
        AssetType.parse(field.data)
    except ValueError as e:
        raise ValidationError(str(e))


class RegistrationForm(ApiForm):
    name = StringField('Name', validators=[DataRequired(), Length(max=120)])
    role = StringField('Role', validators=[DataRequired(), AnyOf([r.value for r in UserRole])])
    dateOfBirth = DateField('Date of Birth', validators=[Optional()])
    photo = StringField('Photo', validators=[Optional(), Length(max=500)])
    companyName = StringField('Company Name', validators=[Length(max=120)])
    companyLogo = StringField('Company Logo', validators=[Optional(), Length(max=500)])

    def validate_companyName(self, field):
        if self.role.data == UserRole.HR.value and not (field.data or '').strip():
            raise ValidationError('Company name is required for HR accounts.')


class ProfileForm(ApiForm):
    name = StringField('Name', validators=[Optional(), Length(max=120)])
    dateOfBirth = DateField('Date of Birth', validators=[Optional()])
    phone = StringField('Phone', validators=[Optional(), Length(max=40)])
    photo = StringField('Photo', validators=[Optional(), Length(max=500)])
    address = StringField('Address', validators=[Optional(), Length(max=255)])
    bio = StringField('Bio', validators=[Optional()])


class AssetForm(ApiForm):
    productName = StringField('Product Name', validators=[DataRequired(), Length(max=200)])
    productImage = StringField('Product Image', validators=[Optional(), Length(max=500)])
    productType = StringField('Product Type', validators=[DataRequired(), _valid_asset_type])
    productQuantity = IntegerField('Quantity', validators=[
        InputRequired(), NumberRange(min=1, message='Quantity must be a positive integer.')])


class AssetRequestForm(ApiForm):
    assetId = IntegerField('Asset', validators=[InputRequired()])
    note = StringField('Note', validators=[Optional(), Length(max=1000)])


class RejectForm(ApiForm):
    reason = StringField('Reason', validators=[Optional(), Length(max=1000)])


class AssignEmployeeForm(ApiForm):
    employeeEmail = StringField('Employee Email', validators=[DataRequired(), Email()])
    employeeName = StringField('Employee Name', validators=[Optional()])


class DirectAssignForm(ApiForm):
    employeeEmail = StringField('Employee Email', validators=[DataRequired(), Email()])
    assetId = IntegerField('Asset', validators=[InputRequired()])
    note = StringField('Note', validators=[Optional(), Length(max=1000)])


class PaymentIntentForm(ApiForm):
    packageName = StringField('Package', validators=[DataRequired(), Length(max=40)])
    amount = DecimalField('Amount', validators=[
        InputRequired(), NumberRange(min=0.01, message='Amount must be positive.')])
    employeeLimit = IntegerField('Employee Limit', validators=[InputRequired(), NumberRange(min=1)])


class PaymentConfirmForm(PaymentIntentForm):
    paymentIntentId = StringField('Payment Intent', validators=[DataRequired(), Length(max=255)])
