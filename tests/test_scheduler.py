from datetime import datetime, timedelta

import pytest

from models import db
from models.admin_user import AdminUser
from models.attendance_record import AttendanceRecord
from models.booking import Booking
from services import lifecycle
from services.errors import MailRateLimitError
from services.scheduler import AttendanceScheduler
from utils import emailer

from conftest import booking_payload

SESSION_DAY = datetime(2025, 6, 2)


def at(hour, minute=0):
    return SESSION_DAY.replace(hour=hour, minute=minute)


@pytest.fixture
def scheduler():
    sleeps = []
    s = AttendanceScheduler(sleep=sleeps.append)
    s.sleeps = sleeps
    return s


@pytest.fixture
def approved_booking(client, outbox, super_admin):
    resp = client.post("/bookings", json=booking_payload(
        horaInicio=["09:00"], horaFim=["12:00"],
        participantesExternos=[{"fullName": "Ana Lima", "email": "ana@prefeitura.test"}],
    ))
    booking_id = resp.get_json()["bookingId"]
    lifecycle.approve(super_admin, booking_id)
    outbox.clear()
    return booking_id


def test_dispatch_once_per_day(app, outbox, scheduler, approved_booking):
    assert scheduler.dispatch_confirmations(now=at(9, 15)) == 1
    assert sorted(to for to, _, _ in outbox) == ["ana@prefeitura.test", "joao@seget.test", "maria@seget.test"]
    assert "presenca/%d?date=2025-06-02" % approved_booking in outbox[0][2]

    booking = db.session.get(Booking, approved_booking)
    assert booking.confirmation_emails_sent == ["2025-06-02"]
    records = AttendanceRecord.query.filter_by(booking_id=approved_booking).all()
    assert {r.status for r in records} == {"Pendente"}
    assert len(records) == 3

    outbox.clear()
    assert scheduler.dispatch_confirmations(now=at(9, 45)) == 0
    assert outbox == []


def test_dispatch_waits_for_session_start(app, outbox, scheduler, approved_booking):
    assert scheduler.dispatch_confirmations(now=at(8, 59)) == 0
    assert scheduler.dispatch_confirmations(now=at(12, 1)) == 0
    assert outbox == []


def test_pending_bookings_are_not_dispatched(app, client, outbox, scheduler):
    client.post("/bookings", json=booking_payload())
    outbox.clear()
    assert scheduler.dispatch_confirmations(now=at(9, 15)) == 0
    assert outbox == []


def test_delay_between_recipients(app, outbox, scheduler, approved_booking):
    app.config["MAIL_SEND_DELAY_SECONDS"] = 2
    scheduler.dispatch_confirmations(now=at(9, 15))
    assert scheduler.sleeps == [2, 2]


def test_rate_limit_pauses_dispatch(app, monkeypatch, outbox, scheduler, approved_booking):
    def limited(*args):
        raise MailRateLimitError("452 daily sending quota exceeded")

    monkeypatch.setattr(emailer, "send_email", limited)
    now = at(9, 15)
    assert scheduler.dispatch_confirmations(now=now) == 0
    assert scheduler.paused_until == now + timedelta(minutes=60)
    assert db.session.get(Booking, approved_booking).confirmation_emails_sent == []

    monkeypatch.setattr(emailer, "send_email", lambda *args: (outbox.append(args) or (True, None)))
    assert scheduler.dispatch_confirmations(now=at(9, 45)) == 0
    assert outbox == []

    assert scheduler.dispatch_confirmations(now=at(10, 16)) == 1
    assert scheduler.paused_until is None
    assert len(outbox) == 3


def test_rate_limit_reply_detection():
    assert emailer.is_rate_limit_reply(452, b"4.5.3 Daily sending quota exceeded")
    assert emailer.is_rate_limit_reply(421, "Too many messages, try later")
    assert not emailer.is_rate_limit_reply(550, "Mailbox unavailable: message size limit exceeded")
    assert not emailer.is_rate_limit_reply(250, "limit")


def test_reconcile_unconfirmed(app, client, outbox, scheduler, approved_booking, monkeypatch):
    scheduler.dispatch_confirmations(now=at(9, 15))
    record = AttendanceRecord.query.filter_by(email="joao@seget.test").one()
    record.status = "Presente"
    db.session.commit()

    # session ends 12:00, one hour of grace
    assert scheduler.reconcile_unconfirmed(now=at(12, 59)) == 0
    assert scheduler.reconcile_unconfirmed(now=at(13, 1)) == 2

    statuses = {r.email: r.status for r in AttendanceRecord.query.all()}
    assert statuses == {
        "maria@seget.test": "Não Confirmado",
        "joao@seget.test": "Presente",
        "ana@prefeitura.test": "Não Confirmado",
    }


def test_cli_commands(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-admin", "novo@seget.test", "--password", "senha-longa-1",
                                 "--room", "receitorio"])
    assert result.exit_code == 0, result.output
    assert "novo@seget.test created" in result.output
    admin = AdminUser.query.filter_by(email="novo@seget.test").one()
    assert admin.room_access == "receitorio"
    assert admin.is_super_admin is False

    result = runner.invoke(args=["create-admin", "x@seget.test", "--password", "senha-longa-1"])
    assert result.exit_code != 0

    result = runner.invoke(args=["attendance-reconcile"])
    assert result.exit_code == 0
    assert "0 record(s) updated" in result.output


def test_rate_limit_mid_booking_resumes_with_remaining(app, monkeypatch, outbox, scheduler, approved_booking):
    def first_then_limited(to_email, subject, body):
        if outbox:
            raise MailRateLimitError("421 too many messages")
        outbox.append((to_email, subject, body))
        return True, None

    monkeypatch.setattr(emailer, "send_email", first_then_limited)
    assert scheduler.dispatch_confirmations(now=at(9, 15)) == 0
    first = outbox[0][0]
    assert [r.email for r in AttendanceRecord.query.all()] == [first]

    outbox.clear()
    monkeypatch.setattr(emailer, "send_email", lambda *args: (outbox.append(args) or (True, None)))
    assert scheduler.dispatch_confirmations(now=at(10, 16)) == 1
    assert first not in [to for to, _, _ in outbox]
    assert len(outbox) == 2
    assert AttendanceRecord.query.count() == 3
    assert db.session.get(Booking, approved_booking).confirmation_emails_sent == ["2025-06-02"]
