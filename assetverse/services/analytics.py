# assetverse/services/analytics.py
import csv
import io

from sqlalchemy import func

from assetverse import db
from assetverse.models import Asset, AssetRequest, AssignedAsset, AssignmentStatus, RequestStatus


def dashboard(hr):
    asset_types = (db.session.query(Asset.product_type, func.count(Asset.id))
                   .filter(Asset.hr_email == hr.email)
                   .group_by(Asset.product_type)
                   .order_by(func.count(Asset.id).desc())
                   .all())

    top_requested = (db.session.query(AssetRequest.asset_name, func.count(AssetRequest.id))
                     .filter(AssetRequest.hr_email == hr.email,
                             AssetRequest.request_status == RequestStatus.APPROVED.value)
                     .group_by(AssetRequest.asset_name)
                     .order_by(func.count(AssetRequest.id).desc(), AssetRequest.asset_name)
                     .limit(5)
                     .all())

    status_counts = dict(db.session.query(AssetRequest.request_status, func.count(AssetRequest.id))
                         .filter(AssetRequest.hr_email == hr.email)
                         .group_by(AssetRequest.request_status)
                         .all())

    total_assets = db.session.query(func.count(Asset.id)).filter(Asset.hr_email == hr.email).scalar()

    return {
        'assetTypes': [{'_id': name, 'count': count} for name, count in asset_types],
        'topRequested': [{'_id': name, 'count': count} for name, count in top_requested],
        'stats': {
            'totalAssets': total_assets,
            'totalRequests': sum(status_counts.values()),
            'pendingRequests': status_counts.get(RequestStatus.PENDING.value, 0),
            'approvedRequests': status_counts.get(RequestStatus.APPROVED.value, 0),
        },
    }


def assets_report(hr):
    assigned = dict(db.session.query(AssignedAsset.asset_id, func.count(AssignedAsset.id))
                    .filter(AssignedAsset.hr_email == hr.email,
                            AssignedAsset.status == AssignmentStatus.ASSIGNED.value)
                    .group_by(AssignedAsset.asset_id)
                    .all())
    assets = Asset.query.filter_by(hr_email=hr.email).order_by(Asset.product_name).all()

    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(['Asset', 'Type', 'Total', 'Available', 'Assigned'])

    for asset in assets:
        writer.writerow([asset.product_name, asset.product_type, asset.product_quantity,
                         asset.available_quantity, assigned.get(asset.id, 0)])

    return output.getvalue()
