from flask import Blueprint, jsonify

from skillswap import get_services

category_bp = Blueprint('categories', __name__)


@category_bp.route('', methods=['GET'])
def list_categories():
    return jsonify(get_services().categories.list_distinct()), 200
