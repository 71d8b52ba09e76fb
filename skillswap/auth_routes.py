from flask import Blueprint, jsonify

from skillswap import get_services
from skillswap.utils import json_body

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    data = json_body()
    services = get_services()

    user = services.credentials.register(
        username=data.get('username'),
        email=data.get('email'),
        password=data.get('password'),
        full_name=data.get('full_name'),
        bio=data.get('bio'),
        location=data.get('location'),
    )
    token = services.sessions.issue(user)

    return jsonify({
        'message': 'User registered successfully',
        'token': token,
        'user': user.to_dict(),
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_body()
    services = get_services()

    # The username field also accepts an email address
    user = services.credentials.authenticate(data.get('username'), data.get('password'))
    token = services.sessions.issue(user)

    return jsonify({
        'message': 'Login successful',
        'token': token,
        'user': user.to_dict(),
    }), 200
