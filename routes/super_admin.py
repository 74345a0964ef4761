from flask import Blueprint, current_app, g, jsonify, request
from sqlalchemy.exc import IntegrityError

from models import db
from models.admin_user import AdminUser
from models.audit_log import AuditLog
from models.employee import Employee
from security.password import hash_password
from security.rbac import require_super_admin
from services.booking_payload import is_email
from utils.audit import log_event

super_admin_bp = Blueprint("super_admin", __name__, url_prefix="/super-admin")


def _room_access(data):
    room = data.get("room_access")
    if room in (None, ""):
        return None
    rooms = current_app.config.get("ROOMS", {})
    if not isinstance(room, str) or (rooms and room not in rooms):
        raise ValueError("Sala inválida")
    return room


# ---- admin users ----

@super_admin_bp.get("/admins")
@require_super_admin
def list_admins():
    rows = AdminUser.query.order_by(AdminUser.created_at.desc()).all()
    return jsonify([a.to_dict() for a in rows]), 200


@super_admin_bp.post("/admins")
@require_super_admin
def create_admin():
    data = request.get_json(silent=True) or {}
    email = (data.get("email") or "").strip().lower()
    if not is_email(email):
        return jsonify(error="Email inválido"), 400
    try:
        room = _room_access(data)
        pw_hash = hash_password(data.get("password") or "")
    except ValueError as e:
        return jsonify(error=str(e)), 400

    is_super = bool(data.get("is_super_admin", False))
    if not is_super and room is None:
        return jsonify(error="Administradores de sala precisam de room_access"), 400

    if AdminUser.query.filter_by(email=email).first():
        return jsonify(error="Email já cadastrado"), 409

    admin = AdminUser(email=email, password_hash=pw_hash, room_access=room, is_super_admin=is_super)
    db.session.add(admin)
    db.session.commit()
    log_event("ADMIN_CREATE", user_id=g.admin.id, entity="admin_user", entity_id=admin.id,
              metadata={"email": email, "room_access": room, "is_super_admin": is_super})
    return jsonify(admin.to_dict()), 201


@super_admin_bp.get("/admins/<int:admin_id>")
@require_super_admin
def admin_detail(admin_id: int):
    admin = db.session.get(AdminUser, admin_id)
    if not admin:
        return jsonify(error="Administrador não encontrado"), 404
    return jsonify(admin.to_dict()), 200


@super_admin_bp.put("/admins/<int:admin_id>")
@require_super_admin
def update_admin(admin_id: int):
    admin = db.session.get(AdminUser, admin_id)
    if not admin:
        return jsonify(error="Administrador não encontrado"), 404

    data = request.get_json(silent=True) or {}
    try:
        if "room_access" in data:
            admin.room_access = _room_access(data)
        if data.get("password"):
            admin.password_hash = hash_password(data["password"])
    except ValueError as e:
        return jsonify(error=str(e)), 400
    if "is_super_admin" in data:
        if admin.id == g.admin.id and not data["is_super_admin"]:
            return jsonify(error="Não é possível remover o próprio acesso de super administrador"), 400
        admin.is_super_admin = bool(data["is_super_admin"])
    if not admin.is_super_admin and admin.room_access is None:
        return jsonify(error="Administradores de sala precisam de room_access"), 400

    db.session.commit()
    log_event("ADMIN_UPDATE", user_id=g.admin.id, entity="admin_user", entity_id=admin.id,
              metadata={"fields": sorted(k for k in data if k != "password")})
    return jsonify(admin.to_dict()), 200


@super_admin_bp.delete("/admins/<int:admin_id>")
@require_super_admin
def delete_admin(admin_id: int):
    admin = db.session.get(AdminUser, admin_id)
    if not admin:
        return jsonify(error="Administrador não encontrado"), 404
    if admin.id == g.admin.id:
        return jsonify(error="Não é possível excluir a própria conta"), 400

    db.session.delete(admin)
    db.session.commit()
    log_event("ADMIN_DELETE", user_id=g.admin.id, entity="admin_user", entity_id=admin_id)
    return jsonify(message="Administrador removido"), 200


# ---- employees ----

def _employee_fields(data, employee):
    full_name = data.get("full_name", employee.full_name)
    email = data.get("email", employee.email)
    telefone = data.get("telefone", employee.telefone)
    if not isinstance(full_name, str) or not full_name.strip():
        raise ValueError("Nome completo é obrigatório")
    if not isinstance(email, str) or not is_email(email.strip().lower()):
        raise ValueError("Email inválido")
    if telefone is not None and (not isinstance(telefone, str) or len(telefone.strip()) > 20):
        raise ValueError("Telefone inválido")
    employee.full_name = full_name.strip()
    employee.email = email.strip().lower()
    employee.telefone = telefone.strip() if telefone else None


@super_admin_bp.get("/employees")
@require_super_admin
def list_employees():
    q = Employee.query
    search = request.args.get("q")
    if search:
        like = f"%{search}%"
        q = q.filter(db.or_(Employee.full_name.ilike(like), Employee.email.ilike(like)))
    return jsonify([e.to_dict() for e in q.order_by(Employee.full_name).all()]), 200


@super_admin_bp.post("/employees")
@require_super_admin
def create_employee():
    employee = Employee(full_name=None, email=None, telefone=None)
    try:
        _employee_fields(request.get_json(silent=True) or {}, employee)
    except ValueError as e:
        return jsonify(error=str(e)), 400

    db.session.add(employee)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="Email já cadastrado"), 409
    log_event("EMPLOYEE_CREATE", user_id=g.admin.id, entity="employee", entity_id=employee.id)
    return jsonify(employee.to_dict()), 201


@super_admin_bp.put("/employees/<int:employee_id>")
@require_super_admin
def update_employee(employee_id: int):
    employee = db.session.get(Employee, employee_id)
    if not employee:
        return jsonify(error="Funcionário não encontrado"), 404
    try:
        _employee_fields(request.get_json(silent=True) or {}, employee)
    except ValueError as e:
        db.session.rollback()
        return jsonify(error=str(e)), 400
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="Email já cadastrado"), 409
    log_event("EMPLOYEE_UPDATE", user_id=g.admin.id, entity="employee", entity_id=employee.id)
    return jsonify(employee.to_dict()), 200


@super_admin_bp.delete("/employees/<int:employee_id>")
@require_super_admin
def delete_employee(employee_id: int):
    employee = db.session.get(Employee, employee_id)
    if not employee:
        return jsonify(error="Funcionário não encontrado"), 404
    db.session.delete(employee)
    db.session.commit()
    log_event("EMPLOYEE_DELETE", user_id=g.admin.id, entity="employee", entity_id=employee_id)
    return jsonify(message="Funcionário removido"), 200


# ---- audit trail ----

@super_admin_bp.get("/audit-logs")
@require_super_admin
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    action = request.args.get("action")
    user_id = request.args.get("user_id", type=int)
    entity = request.args.get("entity")

    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action == action)
    if user_id is not None:
        q = q.filter(AuditLog.user_id == user_id)
    if entity:
        q = q.filter(AuditLog.entity == entity)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([
        {
            "id": r.id,
            "created_at": r.timestamp.isoformat() if r.timestamp else None,
            "user_id": r.user_id,
            "action": r.action,
            "entity": r.entity,
            "entity_id": r.entity_id,
            "ip": r.ip,
            "user_agent": r.user_agent,
            "metadata": r.metadata_json,
        }
        for r in rows
    ]), 200
