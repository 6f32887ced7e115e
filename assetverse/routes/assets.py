# assetverse/routes/assets.py
from flask import request, jsonify
from flask_login import current_user

from assetverse.auth import hr_required
from assetverse.forms import AssetForm
from assetverse.routes import assets_bp as bp
from assetverse.services import catalog


@bp.route('', methods=['GET'])
@hr_required
def list_assets():
    result = catalog.list_assets(
        current_user.account,
        page=request.args.get('page', 1, type=int),
        page_size=request.args.get('limit', 10, type=int),
        search=request.args.get('search', '').strip(),
    )
    return jsonify(result)


@bp.route('', methods=['POST'])
@hr_required
def add_asset():
    form = AssetForm.from_json().validate_or_raise()
    asset = catalog.create_asset(
        current_user.account,
        name=form.productName.data,
        product_type=form.productType.data,
        quantity=form.productQuantity.data,
        image=form.productImage.data,
    )
    return jsonify({
        'message': 'Asset added successfully',
        'assetId': asset.id,
        'asset': asset.to_dict(),
    }), 201


@bp.route('/<int:asset_id>', methods=['PUT'])
@hr_required
def update_asset(asset_id):
    form = AssetForm.from_json().validate_or_raise()
    asset = catalog.update_asset(
        current_user.account,
        asset_id,
        name=form.productName.data,
        product_type=form.productType.data,
        quantity=form.productQuantity.data,
        image=form.productImage.data,
    )
    return jsonify({'message': 'Asset updated successfully', 'updatedAsset': asset.to_dict()})


@bp.route('/<int:asset_id>', methods=['DELETE'])
@hr_required
def delete_asset(asset_id):
    catalog.delete_asset(current_user.account, asset_id)
    return jsonify({'message': 'Asset deleted successfully'})


@bp.route('/<int:asset_id>/qr', methods=['GET'])
@hr_required
def get_asset_qr(asset_id):
    asset, qr_code = catalog.asset_qr_code(current_user.account, asset_id)
    return jsonify({'assetId': asset.id, 'productName': asset.product_name, 'qrCode': qr_code})
