import pytest

from app import create_app
from config import TestConfig
from models import db
from models.admin_user import AdminUser
from security.password import hash_password
from utils import emailer

PASSWORD = "senha-segura-123"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def outbox(monkeypatch):
    """Every e-mail the app tries to send, as (to, subject, body)."""
    sent = []

    def fake_send(to_email, subject, body):
        sent.append((to_email, subject, body))
        return True, None

    monkeypatch.setattr(emailer, "send_email", fake_send)
    return sent


def _admin(email, room=None, super_admin=False):
    admin = AdminUser(
        email=email,
        password_hash=hash_password(PASSWORD),
        room_access=room,
        is_super_admin=super_admin,
    )
    db.session.add(admin)
    db.session.commit()
    return admin


@pytest.fixture
def super_admin(app):
    return _admin("chefe@seget.test", super_admin=True)


@pytest.fixture
def receitorio_admin(app):
    return _admin("receitorio@seget.test", room="receitorio")


@pytest.fixture
def escola_admin(app):
    return _admin("escola@seget.test", room="escola_fazendaria")


def login(client, email):
    """Log in and return the headers a state-changing admin request needs."""
    resp = client.post("/auth/login", json={"email": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.get_json()
    return {"X-CSRF-Token": client.get_cookie("seget_csrf").value}


def booking_payload(**overrides):
    data = {
        "room": "receitorio",
        "nomeCompleto": "Maria Souza",
        "setorSolicitante": "Tesouro",
        "responsavel": "Maria Souza",
        "telefone": "27999990000",
        "email": "maria@seget.test",
        "numeroParticipantes": 10,
        "participantes": ["joao@seget.test"],
        "finalidade": "Reunião de planejamento",
        "descricao": "Planejamento trimestral",
        "dates": ["2025-06-02"],
        "horaInicio": ["09:00"],
        "horaFim": ["10:00"],
    }
    data.update(overrides)
    return data


def escola_payload(**overrides):
    data = {
        "room": "escola_fazendaria",
        "tipoReserva": "sala",
        "dates": ["2025-06-02", "2025-06-03", "2025-06-04"],
        "horaInicio": ["08:00", "08:00", "08:00"],
        "horaFim": ["12:00", "12:00", "12:00"],
    }
    data.update(overrides)
    return booking_payload(**data)
