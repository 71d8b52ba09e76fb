from flask import Blueprint, jsonify, request

from skillswap import get_services
from skillswap.auth import current_user_id, login_required
from skillswap.skills import SkillUpdate
from skillswap.utils import json_body

skill_bp = Blueprint('skills', __name__)


# Public catalog, optionally filtered by category and free text
@skill_bp.route('', methods=['GET'])
def list_skills():
    skills = get_services().catalog.list_available(
        category=request.args.get('category'),
        search=request.args.get('search'),
    )
    return jsonify(skills), 200


# Every skill I own, available or not
@skill_bp.route('/my', methods=['GET'])
@login_required
def list_my_skills():
    skills = get_services().catalog.list_owned_by(current_user_id())
    return jsonify([skill.to_dict() for skill in skills]), 200


@skill_bp.route('', methods=['POST'])
@login_required
def create_skill():
    data = json_body()
    skill = get_services().catalog.create(
        current_user_id(),
        skill_name=data.get('skill_name'),
        proficiency_level=data.get('proficiency_level'),
        description=data.get('description'),
        category=data.get('category'),
    )
    return jsonify({'message': 'Skill added successfully', 'skill': skill.to_dict()}), 201


@skill_bp.route('/<int:skill_id>', methods=['PUT'])
@login_required
def update_skill(skill_id):
    data = json_body()
    get_services().catalog.update(skill_id, current_user_id(), SkillUpdate.from_json(data))
    return jsonify({'message': 'Skill updated successfully'}), 200


@skill_bp.route('/<int:skill_id>', methods=['DELETE'])
@login_required
def delete_skill(skill_id):
    get_services().catalog.remove(skill_id, current_user_id())
    return jsonify({'message': 'Skill deleted successfully'}), 200
