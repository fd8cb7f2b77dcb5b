from flask import current_app, jsonify, request
from flask_login import login_user, logout_user, login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from quizshare import db
from quizshare.config import config
from quizshare.auth import auth_bp
from quizshare.auth.models import User
from quizshare.auth.utils import (
    hash_password,
    is_valid_email,
    normalize_email,
    validate_password,
    verify_password,
)
from quizshare.security import SecurityLogger, rate_limit


@auth_bp.route("/", methods=["GET"])
def auth_root():
    """Simple health/info endpoint for auth API."""
    base_path = config.AUTH_API_PREFIX
    return jsonify(
        {
            "status": "ok",
            "message": "Auth API is running",
            "endpoints": [
                f"{base_path}/register",
                f"{base_path}/login",
                f"{base_path}/logout",
                f"{base_path}/me",
            ],
        }
    ), 200


@auth_bp.route("/register", methods=["POST"])
def register():
    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get("email"))
    password = data.get("password") or ""
    full_name = (data.get("full_name") or "").strip()

    # Validate required fields
    if not email or not password or not full_name:
        return jsonify(
            {"message": "Email, password, and full_name are required"}
        ), 400

    if not is_valid_email(email):
        return jsonify({"message": "Please provide a valid email address"}), 400

    ok, error = validate_password(password)
    if not ok:
        return jsonify({"message": error}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({"message": "An account with this email already exists"}), 409

    user = User(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
    )
    try:
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception(f"Registration failed for {email}: {str(e)}")
        return jsonify({"message": current_app.config["MSG_STORE_FAILURE"]}), 500

    current_app.logger.info(f"New teacher registered: {email} (id={user.id})")
    login_user(user)

    return jsonify({
        "message": current_app.config["MSG_REGISTER_SUCCESS"],
        "user": user.to_dict(),
    }), 201


@auth_bp.route("/login", methods=["POST"])
@rate_limit(
    max_requests=config.LOGIN_RATE_LIMIT,
    window_seconds=config.LOGIN_RATE_WINDOW_SECONDS,
    error_message="Too many login attempts. Please try again later.",
)
def login():
    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get("email"))
    password = data.get("password") or ""
    remember = bool(data.get("remember", False))

    if not email or not password:
        return jsonify({"message": "Email and password are required"}), 400

    if not is_valid_email(email):
        return jsonify({"message": "Please provide a valid email address"}), 400

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        SecurityLogger.log_failed_login(email)
        return jsonify({"message": "Invalid email or password"}), 401

    login_user(user, remember=remember)
    SecurityLogger.log_successful_login(user.id, user.email)

    return jsonify({
        "message": current_app.config["MSG_LOGIN_SUCCESS"],
        "user": user.to_dict(),
    }), 200


@auth_bp.route("/logout", methods=["GET", "POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"message": current_app.config["MSG_LOGOUT_SUCCESS"]}), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify({"user": current_user.to_dict()}), 200
