# assetverse/models/__init__.py
from assetverse import db

# Import models after db
from .user import User, UserRole
from .asset import Asset, AssetType
from .asset_request import AssetRequest, RequestStatus, AssignmentType
from .assignment import AssignedAsset, AssignmentStatus
from .affiliation import Affiliation, AffiliationStatus
from .payment import Package, Payment

__all__ = ['User', 'UserRole', 'Asset', 'AssetType', 'AssetRequest', 'RequestStatus',
    'AssignmentType', 'AssignedAsset', 'AssignmentStatus', 'Affiliation',
    'AffiliationStatus', 'Package', 'Payment']
