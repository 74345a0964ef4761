from flask import Blueprint, request, jsonify, current_app, g

from models.admin_user import AdminUser
from security.csrf import issue_csrf_token
from security.password import verify_password
from security.rbac import require_admin
from security.session import create_session, revoke_session, revoke_all_sessions
from utils.audit import log_event


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    password = data.get("password") or ""

    if not email or not password:
        return jsonify(error="Email e senha são obrigatórios"), 400

    admin = AdminUser.query.filter_by(email=email).first()
    if not admin or not verify_password(password, admin.password_hash):
        log_event("LOGIN_FAIL", user_id=admin.id if admin else None, metadata={"email": email})
        return jsonify(error="Credenciais inválidas"), 401

    # Rotate: revoke any existing sessions for this admin
    revoked_count = revoke_all_sessions(admin.id)

    raw_token = create_session(admin.id)
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "seget_admin_session")
    max_age = current_app.config.get("SESSION_LIFETIME_SECONDS", 8 * 60 * 60)

    resp = jsonify(message="Login realizado com sucesso", admin=admin.to_dict())
    resp.set_cookie(
        cookie_name,
        raw_token,
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        max_age=max_age,
        path="/",
    )

    resp = issue_csrf_token(resp)

    log_event("LOGIN_SUCCESS", user_id=admin.id, metadata={"revoked_sessions": revoked_count})
    return resp, 200


@auth_bp.get("/me")
@require_admin
def me():
    return jsonify(g.admin.to_dict()), 200


@auth_bp.post("/logout")
@require_admin
def logout():
    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "seget_admin_session")
    raw_token = request.cookies.get(cookie_name)

    revoke_session(raw_token)
    log_event("LOGOUT", user_id=g.admin.id)

    resp = jsonify(message="Sessão encerrada")
    resp.delete_cookie(cookie_name, path="/")
    return resp, 200
