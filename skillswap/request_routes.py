from flask import Blueprint, jsonify

from skillswap import get_services
from skillswap.auth import current_user_id, login_required
from skillswap.utils import json_body

request_bp = Blueprint('requests', __name__)


# Ask a skill owner for an exchange
@request_bp.route('', methods=['POST'])
@login_required
def create_request():
    data = json_body()
    skill_request = get_services().requests.create(
        current_user_id(),
        skill_id=data.get('skill_id'),
        offered_skill=data.get('offered_skill'),
        message=data.get('message'),
    )
    return jsonify({
        'message': 'Skill request sent successfully',
        'request': skill_request.to_dict(),
    }), 201


# Requests other users sent for my skills
@request_bp.route('/received', methods=['GET'])
@login_required
def view_received_requests():
    return jsonify(get_services().requests.list_received_by(current_user_id())), 200


# Requests I sent to other users
@request_bp.route('/sent', methods=['GET'])
@login_required
def view_sent_requests():
    return jsonify(get_services().requests.list_sent_by(current_user_id())), 200


# accept, reject or complete a request for one of my skills
@request_bp.route('/<int:request_id>/status', methods=['PUT'])
@login_required
def update_request_status(request_id):
    data = json_body()
    get_services().requests.update_status(request_id, current_user_id(), data.get('status'))
    return jsonify({'message': 'Request status updated successfully'}), 200
