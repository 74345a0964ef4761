"""
Administrative transitions of a booking.

pending -> approved | rejected | em_analise, and em_analise -> approved |
rejected. Nothing is terminal in the data: any booking can be re-approved
or re-rejected, which overwrites the audit fields.
"""
from datetime import datetime

from flask import current_app

from models import db
from models.booking import APPROVED, IN_REVIEW, REJECTED, Booking, BookingSession
from models.external_participant import ExternalParticipant
from services import notifications
from services.bookings import get_booking_or_404
from services.errors import PartialApprovalError, PermissionDenied, SchemaError
from utils.audit import log_event
from utils.clock import parse_day


def check_permission(booking, actor):
    if not actor.can_manage_room(booking.room):
        raise PermissionDenied("Você não tem permissão para acessar este agendamento.")


def load_for_actor(booking_id, actor):
    booking = get_booking_or_404(booking_id)
    check_permission(booking, actor)
    return booking


def _mark_approved(booking, actor, local, now):
    booking.status = APPROVED
    booking.approved_by = actor.email
    booking.approved_at = now
    booking.rejected_by = None
    booking.rejected_at = None
    booking.rejection_reason = None
    if local:
        booking.local = local


def _mark_rejected(booking, actor, reason, now):
    booking.status = REJECTED
    booking.rejected_by = actor.email
    booking.rejected_at = now
    booking.rejection_reason = reason or None
    booking.approved_by = None
    booking.approved_at = None


def approve(actor, booking_id, local=None):
    booking = load_for_actor(booking_id, actor)
    _mark_approved(booking, actor, local, datetime.utcnow())
    db.session.commit()

    log_event("BOOKING_APPROVE", user_id=actor.id, entity="booking", entity_id=booking.id,
              metadata={"local": local} if local else None)
    notifications.dispatch(notifications.notify_approved, booking.id)
    return booking


def reject(actor, booking_id, reason=None):
    booking = load_for_actor(booking_id, actor)
    _mark_rejected(booking, actor, reason, datetime.utcnow())
    db.session.commit()

    log_event("BOOKING_REJECT", user_id=actor.id, entity="booking", entity_id=booking.id,
              metadata={"reason": reason})
    notifications.dispatch(notifications.notify_rejected, booking.id)
    return booking


def analyze(actor, booking_id, note=None):
    booking = load_for_actor(booking_id, actor)
    booking.status = IN_REVIEW
    booking.observacao_admin = note or None
    booking.approved_by = None
    booking.approved_at = None
    booking.rejected_by = None
    booking.rejected_at = None
    booking.rejection_reason = None
    db.session.commit()

    log_event("BOOKING_ANALYZE", user_id=actor.id, entity="booking", entity_id=booking.id,
              metadata={"note": note})
    notifications.dispatch(notifications.notify_in_review, booking.id)
    return booking


def derive_rejected_clone(original, rejected_dates, actor, reason, now=None):
    """
    New unsaved Booking carrying the original's business data and only the
    sessions on `rejected_dates`, already marked rejected.
    """
    now = now or datetime.utcnow()
    clone = Booking(**{field: getattr(original, field) for field in Booking.BUSINESS_FIELDS})
    clone.participantes = list(original.participantes or [])
    clone.observacao_admin = original.observacao_admin
    clone.confirmation_emails_sent = []

    wanted = set(rejected_dates)
    clone.sessions = [
        BookingSession(position=i, day=s.day, start_minute=s.start_minute, end_minute=s.end_minute)
        for i, s in enumerate(s for s in original.sessions if s.day in wanted)
    ]
    clone.external_participants = [
        ExternalParticipant(full_name=p.full_name, email=p.email, orgao=p.orgao)
        for p in original.external_participants
    ]
    _mark_rejected(clone, actor, reason, now)
    return clone


def _parse_dates(values):
    if not isinstance(values, list):
        raise SchemaError("datesToApprove deve ser uma lista de datas YYYY-MM-DD.")
    try:
        return {parse_day(v) for v in values}
    except ValueError as exc:
        raise SchemaError(str(exc))


def approve_partial(actor, booking_id, dates_to_approve, rejection_reason=None, local=None):
    """
    Approve some dates of a booking and reject the rest.

    Returns (approved_booking, rejected_booking). With every date chosen this
    is approve() and rejected_booking is None; with none chosen it is
    reject() and approved_booking is None.
    """
    booking = load_for_actor(booking_id, actor)
    chosen = _parse_dates(dates_to_approve)
    original_days = set(booking.dates)

    unknown = chosen - original_days
    if unknown:
        listed = ", ".join(sorted(d.isoformat() for d in unknown))
        raise PartialApprovalError(f"Datas não pertencem ao agendamento: {listed}.")

    if chosen == original_days:
        return approve(actor, booking_id, local=local), None
    if not chosen:
        return None, reject(actor, booking_id, reason=rejection_reason)

    now = datetime.utcnow()
    rejected_days = original_days - chosen
    clone = derive_rejected_clone(booking, rejected_days, actor, rejection_reason, now)

    kept = [s for s in booking.sessions if s.day in chosen]
    for i, s in enumerate(kept):
        s.position = i
    booking.sessions = kept
    _mark_approved(booking, actor, local, now)

    db.session.add(clone)
    db.session.commit()

    current_app.logger.info(
        "Booking %s partially approved; %d date(s) moved to booking %s",
        booking.id, len(rejected_days), clone.id,
    )
    log_event(
        "BOOKING_APPROVE_PARTIAL",
        user_id=actor.id,
        entity="booking",
        entity_id=booking.id,
        metadata={
            "approved": sorted(d.isoformat() for d in chosen),
            "rejected": sorted(d.isoformat() for d in rejected_days),
            "rejected_booking_id": clone.id,
        },
    )
    notifications.dispatch(notifications.notify_approved, booking.id)
    notifications.dispatch(notifications.notify_rejected, clone.id)
    return booking, clone


def update_details(actor, booking_id, data):
    """Edit descriptive fields; schedule, room and status are not editable here."""
    booking = load_for_actor(booking_id, actor)
    editable = {
        "finalidade": "finalidade",
        "descricao": "descricao",
        "observacao": "observacao",
        "local": "local",
        "responsavel": "responsavel",
        "telefone": "telefone",
        "setorSolicitante": "setor_solicitante",
    }
    optional = {"observacao", "local"}
    changed = {}
    for key, column in editable.items():
        if key not in data:
            continue
        value = data[key]
        if value is not None and not isinstance(value, str):
            raise SchemaError(f"Campo {key} deve ser texto.")
        value = value.strip() if value else None
        if value is None and key not in optional:
            raise SchemaError(f"Campo obrigatório ausente: {key}.")
        changed[column] = value

    for column, value in changed.items():
        setattr(booking, column, value)
    db.session.commit()

    log_event("BOOKING_UPDATE", user_id=actor.id, entity="booking", entity_id=booking.id, metadata=changed)
    return booking
