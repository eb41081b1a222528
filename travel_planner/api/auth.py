from flask import current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf

from travel_planner.api import api_bp
from travel_planner.api.forms import LoginForm, RegistrationForm
from travel_planner.errors import AccountConflict
from travel_planner.repositories.profiles import set_online_status
from travel_planner.repositories.users import create_user, find_user_by_email
from travel_planner.sockets import broadcast_presence


def _mark_presence(user_id: str, online: bool) -> None:
    # presence is best effort; signing in or out must not fail because of it
    try:
        set_online_status(user_id, online)
    except Exception:
        current_app.logger.warning("Could not update presence for %s", user_id, exc_info=True)
        return
    broadcast_presence(user_id, online)


@api_bp.route("/auth/csrf", methods=["GET"])
def csrf_token():
    return jsonify({"csrfToken": generate_csrf()})


@api_bp.route("/auth/register", methods=["POST"])
def register():
    form = RegistrationForm()
    if not form.validate_on_submit():
        return jsonify({"success": False, "message": form.first_error()}), 400

    try:
        user = create_user(
            email=form.email.data,
            username=form.username.data,
            password=form.password.data,
            full_name=form.full_name.data or None,
        )
    except AccountConflict as exc:
        return jsonify({"success": False, "message": str(exc)}), exc.status_code

    login_user(user)
    _mark_presence(user.id, True)
    current_app.logger.info("Registered user %s", user.id)
    return jsonify({"success": True, "message": "Account created.", "user": user.to_account_dict()}), 201


@api_bp.route("/auth/login", methods=["POST"])
def login():
    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"success": False, "message": form.first_error()}), 400

    user = find_user_by_email(form.email.data)
    if not user or not user.check_password(form.password.data):
        return jsonify({"success": False, "message": "Invalid credentials."}), 401

    login_user(user)
    _mark_presence(user.id, True)
    return jsonify({"success": True, "message": "Authenticated."})


@api_bp.route("/auth/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        _mark_presence(current_user.id, False)
        logout_user()
    return jsonify({"ok": True})


@api_bp.route("/user/me", methods=["GET"])
@login_required
def me():
    return jsonify(current_user.to_account_dict())

