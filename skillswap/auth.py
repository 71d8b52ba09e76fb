import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import request

from skillswap import get_services
from skillswap.errors import UnauthenticatedError

logger = logging.getLogger(__name__)


class SessionIssuer:
    """Mints and checks the signed bearer tokens handed out at login."""

    algorithm = 'HS256'

    def __init__(self, secret_key, ttl_days=7):
        self.secret_key = secret_key
        self.ttl = timedelta(days=ttl_days)

    def issue(self, user):
        """
        Generate a JWT token for the given user.
        """
        now = datetime.now(timezone.utc)
        payload = {
            'user_id': user.id,
            'username': user.username,
            'email': user.email,
            'exp': now + self.ttl,
            'iat': now,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token):
        """
        Decode and verify the JWT token, returning its claims.
        """
        if not token:
            raise UnauthenticatedError()
        try:
            claims = jwt.decode(
                token, self.secret_key, algorithms=[self.algorithm],
                options={'require': ['exp', 'user_id']},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Rejected expired token")
            raise UnauthenticatedError('Invalid or expired token', status_code=403)
        except jwt.InvalidTokenError as e:
            logger.warning("Rejected invalid token: %s", e)
            raise UnauthenticatedError('Invalid or expired token', status_code=403)
        return claims


def bearer_token():
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer':
        return None
    return token.strip() or None


def login_required(f):
    """
    Decorator to protect endpoints with authentication.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        claims = get_services().sessions.verify(bearer_token())

        # Attach the claims to the request object for downstream use
        request.user = claims
        return f(*args, **kwargs)
    return decorated_function


def current_user_id():
    return request.user['user_id']
