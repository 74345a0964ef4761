"""
Booking e-mails. Sending is best effort: failures are logged, never raised
to the caller whose state change already committed.
"""
from flask import after_this_request, current_app, has_request_context

from models import db
from models.admin_user import AdminUser
from models.booking import Booking
from services.errors import MailRateLimitError
from utils import emailer
from utils.clock import br_date, format_minutes

SIGNATURE = "\n\nAtenciosamente,\nSEGET - Agendamento de Salas"


def dispatch(fn, *args):
    """
    Run `fn(*args)` after the HTTP response has been sent when
    MAIL_DISPATCH is "deferred"; otherwise run it now. Pass ids, not ORM
    objects: deferred work runs in a fresh app context and session.
    """
    app = current_app._get_current_object()

    def guarded():
        try:
            fn(*args)
        except Exception:
            app.logger.exception("Notification %s%r failed", fn.__name__, args)

    if app.config.get("MAIL_DISPATCH") != "deferred" or not has_request_context():
        guarded()
        return

    def in_context():
        with app.app_context():
            guarded()

    @after_this_request
    def _defer(response):
        response.call_on_close(in_context)
        return response


def _deliver(to_email, subject, body):
    try:
        ok, error = emailer.send_email(to_email, subject, body)
    except MailRateLimitError as exc:
        current_app.logger.warning("Mail provider limit reached sending to %s: %s", to_email, exc)
        return False
    if not ok:
        current_app.logger.warning("Mail to %s not sent: %s", to_email, error)
    return ok


def schedule_lines(booking):
    return "\n".join(
        f"- {br_date(s.day)}, das {format_minutes(s.start_minute)} às {format_minutes(s.end_minute)}"
        for s in booking.sessions
    )


def _load(booking_id):
    return db.session.get(Booking, booking_id)


def _summary(booking):
    text = (
        f"Sala: {booking.room_name}\n"
        f"Finalidade: {booking.finalidade}\n"
        f"Datas:\n{schedule_lines(booking)}"
    )
    if booking.local:
        text += f"\nLocal: {booking.local}"
    return text


# ---------- lifecycle messages ----------

def notify_booking_received(booking_id):
    booking = _load(booking_id)
    if booking is None:
        return
    frontend = current_app.config.get("FRONTEND_URL", "")
    _deliver(
        booking.email,
        "Solicitação de agendamento recebida",
        f"Olá {booking.nome_completo},\n\n"
        f"Recebemos sua solicitação. Ela será analisada pela administração.\n\n"
        f"{_summary(booking)}\n\n"
        f"Acompanhe em: {frontend}/confirmar/{booking.id}"
        f"{SIGNATURE}",
    )

    admins = AdminUser.query.filter(
        db.or_(AdminUser.room_access == booking.room, AdminUser.is_super_admin.is_(True))
    ).all()
    for email in sorted({a.email for a in admins}):
        _deliver(
            email,
            f"Nova solicitação de agendamento - {booking.room_name}",
            f"{booking.nome_completo} ({booking.setor_solicitante}) solicitou um agendamento.\n\n"
            f"{_summary(booking)}{SIGNATURE}",
        )


def notify_approved(booking_id):
    booking = _load(booking_id)
    if booking is None:
        return
    _deliver(
        booking.email,
        "Agendamento aprovado",
        f"Olá {booking.nome_completo},\n\nSeu agendamento foi aprovado.\n\n{_summary(booking)}{SIGNATURE}",
    )
    for email in booking.participantes or []:
        if email == booking.email:
            continue
        _deliver(
            email,
            f"Você foi convidado: {booking.finalidade}",
            f"Você foi incluído como participante de um evento da SEGET.\n\n{_summary(booking)}{SIGNATURE}",
        )
    for participant in booking.external_participants:
        _deliver(
            participant.email,
            f"Convite: {booking.finalidade}",
            f"Olá {participant.full_name},\n\nVocê foi convidado para um evento na SEGET.\n\n"
            f"{_summary(booking)}{SIGNATURE}",
        )


def notify_rejected(booking_id):
    booking = _load(booking_id)
    if booking is None:
        return
    reason = booking.rejection_reason or "Não informado"
    _deliver(
        booking.email,
        "Agendamento não aprovado",
        f"Olá {booking.nome_completo},\n\nSua solicitação não pôde ser aprovada.\n"
        f"Motivo: {reason}\n\n{_summary(booking)}{SIGNATURE}",
    )


def notify_in_review(booking_id):
    booking = _load(booking_id)
    if booking is None:
        return
    body = f"Olá {booking.nome_completo},\n\nSua solicitação está em análise pela administração.\n"
    if booking.observacao_admin:
        body += f"Observação: {booking.observacao_admin}\n"
    _deliver(booking.email, "Agendamento em análise", f"{body}\n{_summary(booking)}{SIGNATURE}")


# ---------- attendance ----------

def attendance_invite(booking, to_email, name, day):
    """Sent by the scheduler; MailRateLimitError propagates so it can pause."""
    frontend = current_app.config.get("FRONTEND_URL", "")
    greeting = f"Olá {name}," if name else "Olá,"
    ok, error = emailer.send_email(
        to_email,
        f"Confirme sua presença: {booking.finalidade}",
        f"{greeting}\n\nO evento de {br_date(day)} já começou. Confirme sua presença em:\n"
        f"{frontend}/presenca/{booking.id}?date={day.isoformat()}\n\n"
        f"{_summary(booking)}{SIGNATURE}",
    )
    if not ok:
        current_app.logger.warning("Attendance mail to %s not sent: %s", to_email, error)
    return ok


def notify_attendance_recorded(booking_id, to_email, status, day_iso):
    booking = _load(booking_id)
    if booking is None:
        return
    _deliver(
        to_email,
        "Presença registrada",
        f"Registramos sua resposta ({status}) para {booking.finalidade} em {day_iso}.{SIGNATURE}",
    )
