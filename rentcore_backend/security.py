# rentcore_backend/security.py
from functools import wraps
from flask import jsonify
from flask_jwt_extended import verify_jwt_in_request, get_jwt

ROLES = ("admin", "collector", "owner")


def roles_required(*allowed):
    """Usage: @roles_required("admin", "owner")"""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt()
            if claims.get("role") not in allowed:
                return jsonify({"error": "forbidden", "message": "role not allowed"}), 403
            return fn(*args, **kwargs)
        return wrapper
    return deco


def current_user_id():
    """Profile id of the caller, stored as the JWT identity string."""
    verify_jwt_in_request()
    return get_jwt().get("sub")
