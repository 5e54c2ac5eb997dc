# rentcore_backend/routes/auth.py
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token, jwt_required, get_jwt_identity, get_jwt

from rentcore_backend.extensions import db
from rentcore_backend.models import Profile

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    user = db.session.query(Profile).filter_by(email=email).first()
    if not user or not user.check_password(password):
        return jsonify({"error": "unauthorized", "message": "Bad credentials"}), 401
    if not user.is_approved:
        return jsonify({"error": "forbidden", "message": "Account awaiting approval"}), 403

    # identity MUST be a string (PyJWT wants 'sub' as str)
    access_token = create_access_token(
        identity=user.id,
        additional_claims={"role": user.role, "email": user.email},
    )
    current_app.logger.info("Login %s (%s)", user.email, user.role)
    return jsonify(access_token=access_token, user=user.serialize()), 200


@auth_bp.get("/me")
@jwt_required()
def me():
    claims = get_jwt()
    return jsonify(id=get_jwt_identity(), email=claims.get("email"), role=claims.get("role")), 200
