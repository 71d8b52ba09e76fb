from flask import Blueprint, jsonify

from skillswap import get_services
from skillswap.auth import current_user_id, login_required

dashboard_bp = Blueprint('dashboard', __name__)


# Counters shown on the client's landing page
@dashboard_bp.route('', methods=['GET'])
@login_required
def view_dashboard():
    services = get_services()
    user_id = current_user_id()

    summary = {'my_skills': services.catalog.count_owned_by(user_id)}
    summary.update(services.requests.count_by_status(user_id))
    return jsonify(summary), 200
