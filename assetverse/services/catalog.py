# assetverse/services/catalog.py
"""Per-tenant asset inventory: total vs. available quantity."""
import base64
import logging
from datetime import datetime
from io import BytesIO

import qrcode
from flask import current_app

from assetverse import db
from assetverse.errors import AssetUnavailable, Conflict, InvalidInput, NotFound
from assetverse.models import Asset, AssetRequest, AssetType, AssignedAsset

logger = logging.getLogger(__name__)


def _like_pattern(term):
    escaped = term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f'%{escaped}%'


def _positive_int(value, name='productQuantity'):
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInput(f'{name} must be a positive integer')
    return value


def list_assets(hr, page=1, page_size=10, search=''):
    page = max(int(page or 1), 1)
    page_size = min(max(int(page_size or 10), 1), current_app.config['MAX_PAGE_SIZE'])

    query = Asset.query.filter_by(hr_email=hr.email)
    if search:
        query = query.filter(Asset.product_name.ilike(_like_pattern(search), escape='\\'))

    pagination = (query
                  .order_by(Asset.date_added.desc(), Asset.id.desc())
                  .paginate(page=page, per_page=page_size, error_out=False))
    return {
        'assets': [asset.to_dict() for asset in pagination.items],
        'total': pagination.total,
        'totalPages': pagination.pages,
        'currentPage': page,
    }


def get_owned_asset(hr, asset_id):
    asset = Asset.query.filter_by(id=asset_id, hr_email=hr.email).first()
    if asset is None:
        raise NotFound('Asset not found')
    return asset


def create_asset(hr, name, product_type, quantity, image=None):
    _positive_int(quantity)
    try:
        asset = Asset(
            product_name=name,
            product_type=product_type,
            product_quantity=quantity,
            product_image=image,
            hr_email=hr.email,
            company_name=hr.company_name,
        )
    except ValueError as e:
        raise InvalidInput(str(e))
    db.session.add(asset)
    db.session.commit()
    logger.info('Asset %s (%d units) created by %s', asset.product_name, quantity, hr.email)
    return asset


def update_asset(hr, asset_id, name, product_type, quantity, image=None):
    _positive_int(quantity)
    asset = get_owned_asset(hr, asset_id)
    try:
        asset_type = AssetType.parse(product_type)
    except ValueError as e:
        raise InvalidInput(str(e))

    difference = quantity - asset.product_quantity
    available = asset.available_quantity + difference
    if available < 0:
        raise Conflict(
            f'Cannot reduce quantity to {quantity}: '
            f'{asset.product_quantity - asset.available_quantity} unit(s) are assigned')

    logger.info('Updating asset %s quantity %d -> %d (available %d -> %d)',
                asset.id, asset.product_quantity, quantity, asset.available_quantity, available)
    asset.product_name = str(name).strip()
    asset.product_image = image
    asset.product_type = asset_type.value
    asset.product_quantity = quantity
    asset.available_quantity = available
    asset.updated_at = datetime.utcnow()
    db.session.commit()
    return asset


def delete_asset(hr, asset_id):
    # Requests and assignments keep their denormalized copy; the link is cut
    # so a reused id never points them at another asset
    asset = get_owned_asset(hr, asset_id)
    for model in (AssetRequest, AssignedAsset):
        (model.query
         .filter(model.asset_id == asset.id)
         .update({model.asset_id: None}, synchronize_session=False))
    db.session.delete(asset)
    db.session.commit()
    logger.info('Asset %s deleted by %s', asset_id, hr.email)


def take_unit(asset):
    """Decrement availability by one, iff a unit is available."""
    taken = (Asset.query
             .filter(Asset.id == asset.id, Asset.available_quantity > 0)
             .update({Asset.available_quantity: Asset.available_quantity - 1},
                     synchronize_session=False))
    db.session.expire(asset, ['available_quantity'])
    if not taken:
        logger.warning('Asset %s has no available units', asset.id)
        raise AssetUnavailable()


def restore_unit(asset_id, hr_email):
    """Increment availability by one, never past the total quantity.

    Only the tenant's own asset is touched. Returns False when the asset is
    gone or already fully available.
    """
    if asset_id is None:
        return False
    restored = (Asset.query
                .filter(Asset.id == asset_id,
                        Asset.hr_email == hr_email,
                        Asset.available_quantity < Asset.product_quantity)
                .update({Asset.available_quantity: Asset.available_quantity + 1},
                        synchronize_session=False))
    asset = db.session.get(Asset, asset_id)
    if asset is not None:
        db.session.expire(asset, ['available_quantity'])
    if not restored:
        logger.warning('Could not restore a unit of asset %s', asset_id)
    return bool(restored)


def available_assets():
    return (Asset.query
            .filter(Asset.available_quantity > 0)
            .order_by(Asset.date_added.desc(), Asset.id.desc())
            .all())


def asset_qr_code(hr, asset_id):
    asset = get_owned_asset(hr, asset_id)

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )

    qr_data = {
        'id': asset.id,
        'name': asset.product_name,
        'type': asset.product_type,
        'company': asset.company_name,
    }
    qr.add_data(str(qr_data))
    qr.make(fit=True)

    img_buffer = BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(img_buffer, format='PNG')
    return asset, base64.b64encode(img_buffer.getvalue()).decode()
