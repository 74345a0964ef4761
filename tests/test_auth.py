from models import db
from models.admin_user import AdminUser
from models.audit_log import AuditLog
from models.employee import Employee

from conftest import login


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_login_logout(client, receitorio_admin):
    resp = client.post("/auth/login", json={"email": "receitorio@seget.test", "password": "errada-123"})
    assert resp.status_code == 401
    assert AuditLog.query.filter_by(action="LOGIN_FAIL").count() == 1

    headers = login(client, "RECEITORIO@seget.test")
    me = client.get("/auth/me").get_json()
    assert me["room_access"] == "receitorio"
    assert me["is_super_admin"] is False

    assert client.post("/auth/logout", headers=headers).status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_login_rotates_sessions(app, receitorio_admin):
    first = app.test_client()
    second = app.test_client()
    login(first, receitorio_admin.email)
    login(second, receitorio_admin.email)
    assert first.get("/auth/me").status_code == 401
    assert second.get("/auth/me").status_code == 200


def test_super_admin_only(client, receitorio_admin):
    login(client, receitorio_admin.email)
    assert client.get("/super-admin/admins").status_code == 403
    assert client.get("/super-admin/audit-logs").status_code == 403


def test_manage_admins(client, super_admin):
    headers = login(client, super_admin.email)

    resp = client.post("/super-admin/admins", json={
        "email": "delta@seget.test", "password": "senha-longa-1", "room_access": "sala_delta",
    }, headers=headers)
    assert resp.status_code == 201
    admin_id = resp.get_json()["id"]

    dup = {"email": "delta@seget.test", "password": "senha-longa-1", "room_access": "sala_delta"}
    assert client.post("/super-admin/admins", json=dup, headers=headers).status_code == 409
    bad_room = {"email": "x@seget.test", "password": "senha-longa-1", "room_access": "auditorio"}
    assert client.post("/super-admin/admins", json=bad_room, headers=headers).status_code == 400
    short = {"email": "y@seget.test", "password": "curta", "room_access": "sala_delta"}
    assert client.post("/super-admin/admins", json=short, headers=headers).status_code == 400

    assert client.get(f"/super-admin/admins/{admin_id}").get_json()["email"] == "delta@seget.test"

    resp = client.put(f"/super-admin/admins/{admin_id}", json={"room_access": "receitorio"}, headers=headers)
    assert resp.get_json()["room_access"] == "receitorio"

    resp = client.put(f"/super-admin/admins/{super_admin.id}", json={"is_super_admin": False}, headers=headers)
    assert resp.status_code == 400

    assert client.delete(f"/super-admin/admins/{super_admin.id}", headers=headers).status_code == 400
    assert client.delete(f"/super-admin/admins/{admin_id}", headers=headers).status_code == 200
    assert AdminUser.query.filter_by(email="delta@seget.test").first() is None


def test_manage_employees(client, super_admin):
    headers = login(client, super_admin.email)

    resp = client.post("/super-admin/employees", json={"full_name": "João Pereira", "email": "Joao@seget.test"},
                       headers=headers)
    assert resp.status_code == 201
    employee_id = resp.get_json()["id"]
    assert db.session.get(Employee, employee_id).email == "joao@seget.test"

    again = {"full_name": "Outro", "email": "joao@seget.test"}
    assert client.post("/super-admin/employees", json=again, headers=headers).status_code == 409
    assert client.post("/super-admin/employees", json={"email": "a@b.c"}, headers=headers).status_code == 400

    resp = client.put(f"/super-admin/employees/{employee_id}", json={"telefone": "27999990000"}, headers=headers)
    assert resp.get_json()["telefone"] == "27999990000"

    assert len(client.get("/super-admin/employees?q=pereira").get_json()) == 1
    assert client.delete(f"/super-admin/employees/{employee_id}", headers=headers).status_code == 200
    assert client.delete(f"/super-admin/employees/{employee_id}", headers=headers).status_code == 404


def test_audit_logs(client, outbox, super_admin):
    client.post("/bookings", json={"room": "receitorio"})
    headers = login(client, super_admin.email)
    client.post("/super-admin/employees", json={"full_name": "Ana", "email": "ana@seget.test"}, headers=headers)

    logs = client.get("/super-admin/audit-logs?action=EMPLOYEE_CREATE").get_json()
    assert len(logs) == 1
    assert logs[0]["user_id"] == super_admin.id
    assert logs[0]["entity"] == "employee"
