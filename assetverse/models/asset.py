# assetverse/models/asset.py
from datetime import datetime
from enum import Enum

from assetverse import db
from assetverse.models.user import _iso


class AssetType(Enum):
    RETURNABLE = "Returnable"
    NON_RETURNABLE = "Non-returnable"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            # Try to match the input to an enum value
            return next(t for t in cls if t.value.lower() == str(value).strip().lower())
        except StopIteration:
            raise ValueError(f"Invalid asset type: {value}")


class Asset(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    product_name = db.Column(db.String(200), nullable=False)
    product_image = db.Column(db.String(500))
    product_type = db.Column(db.String(30), nullable=False)
    product_quantity = db.Column(db.Integer, nullable=False)
    available_quantity = db.Column(db.Integer, nullable=False)
    hr_email = db.Column(db.String(120), nullable=False, index=True)
    company_name = db.Column(db.String(120))
    date_added = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime)

    __table_args__ = (
        db.CheckConstraint('available_quantity >= 0', name='ck_asset_available_non_negative'),
        db.CheckConstraint('available_quantity <= product_quantity', name='ck_asset_available_within_total'),
    )

    def __init__(self, product_name, product_type, product_quantity, hr_email,
                 product_image=None, company_name=None):
        self.product_name = str(product_name).strip()
        self.product_type = AssetType.parse(product_type).value
        self.product_quantity = product_quantity
        self.available_quantity = product_quantity
        self.hr_email = hr_email
        self.product_image = product_image
        self.company_name = company_name
        self.date_added = datetime.utcnow()

    def to_dict(self):
        return {
            'id': self.id,
            'productName': self.product_name,
            'productImage': self.product_image,
            'productType': self.product_type,
            'productQuantity': self.product_quantity,
            'availableQuantity': self.available_quantity,
            'hrEmail': self.hr_email,
            'companyName': self.company_name,
            'dateAdded': _iso(self.date_added),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Asset {self.product_name}: {self.available_quantity}/{self.product_quantity}>'
