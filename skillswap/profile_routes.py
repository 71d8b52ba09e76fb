from flask import Blueprint, jsonify

from skillswap import get_services
from skillswap.auth import current_user_id, login_required
from skillswap.users import ProfileUpdate
from skillswap.utils import json_body

profile_bp = Blueprint('profile', __name__)


@profile_bp.route('', methods=['GET'])
@login_required
def view_profile():
    user = get_services().profiles.get(current_user_id())
    return jsonify(user.to_dict()), 200


@profile_bp.route('', methods=['PUT'])
@login_required
def update_profile():
    data = json_body()
    get_services().profiles.update(current_user_id(), ProfileUpdate.from_json(data))
    return jsonify({'message': 'Profile updated successfully'}), 200
