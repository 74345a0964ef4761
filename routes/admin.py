from flask import Blueprint, g, jsonify, request

from models import db
from models.booking import STATUSES, Booking, BookingSession
from security.rbac import require_admin
from services import attendance, lifecycle
from services.errors import SchemaError
from utils.clock import format_minutes, parse_day

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _transition_view(booking):
    return {
        "id": booking.id,
        "status": booking.status,
        "dates": [d.isoformat() for d in booking.dates],
        "local": booking.local,
        "approvedBy": booking.approved_by,
        "approvedAt": booking.approved_at.isoformat() if booking.approved_at else None,
        "rejectedBy": booking.rejected_by,
        "rejectedAt": booking.rejected_at.isoformat() if booking.rejected_at else None,
        "rejectionReason": booking.rejection_reason,
        "observacaoAdmin": booking.observacao_admin,
    }


def _text_arg(data, key):
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise SchemaError(f"{key} deve ser texto.")
    return value.strip() if value else None


@admin_bp.get("/bookings")
@require_admin
def list_bookings():
    page = max(request.args.get("page", default=1, type=int) or 1, 1)
    limit = min(max(request.args.get("limit", default=8, type=int) or 8, 1), 100)

    q = Booking.query
    if not g.admin.is_super_admin:
        q = q.filter(Booking.room == g.admin.room_access)
    elif request.args.get("room"):
        q = q.filter(Booking.room == request.args["room"])

    status = request.args.get("status")
    if status:
        if status not in STATUSES:
            return jsonify(error="Status inválido"), 400
        q = q.filter(Booking.status == status)

    date_str = request.args.get("date")
    if date_str:
        try:
            day = parse_day(date_str)
        except ValueError as exc:
            return jsonify(error=str(exc)), 400
        q = q.filter(Booking.id.in_(
            db.session.query(BookingSession.booking_id).filter(BookingSession.day == day)
        ))

    name = request.args.get("name")
    if name:
        q = q.filter(Booking.nome_completo.ilike(f"%{name}%"))

    total = q.count()
    rows = (
        q.order_by(Booking.created_at.desc(), Booking.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        bookings=[
            {
                "id": b.id,
                "room": b.room,
                "roomName": b.room_name,
                "tipoReserva": b.tipo_reserva,
                "dates": [s.day.isoformat() for s in b.sessions],
                "horaInicio": [format_minutes(s.start_minute) for s in b.sessions],
                "horaFim": [format_minutes(s.end_minute) for s in b.sessions],
                "nomeCompleto": b.nome_completo,
                "setorSolicitante": b.setor_solicitante,
                "finalidade": b.finalidade,
                "status": b.status,
                "createdAt": b.created_at.isoformat(),
            }
            for b in rows
        ],
        pagination={
            "total": total,
            "page": page,
            "limit": limit,
            "totalPages": (total + limit - 1) // limit,
        },
    ), 200


@admin_bp.get("/bookings/<int:booking_id>")
@require_admin
def booking_details(booking_id: int):
    booking = lifecycle.load_for_actor(booking_id, g.admin)
    return jsonify(booking.to_dict()), 200


@admin_bp.put("/bookings/<int:booking_id>")
@require_admin
def update_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    booking = lifecycle.update_details(g.admin, booking_id, data)
    return jsonify(success=True, booking=booking.to_dict()), 200


@admin_bp.patch("/bookings/<int:booking_id>/approve")
@require_admin
def approve_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    booking = lifecycle.approve(g.admin, booking_id, local=_text_arg(data, "local"))
    return jsonify(success=True, message="Agendamento aprovado com sucesso",
                   booking=_transition_view(booking)), 200


@admin_bp.patch("/bookings/<int:booking_id>/reject")
@require_admin
def reject_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    booking = lifecycle.reject(g.admin, booking_id, reason=_text_arg(data, "reason"))
    return jsonify(success=True, message="Agendamento recusado",
                   booking=_transition_view(booking)), 200


@admin_bp.patch("/bookings/<int:booking_id>/analyze")
@require_admin
def analyze_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    booking = lifecycle.analyze(g.admin, booking_id, note=_text_arg(data, "observacao_admin"))
    return jsonify(success=True, message="Agendamento marcado como em análise",
                   booking=_transition_view(booking)), 200


@admin_bp.patch("/bookings/<int:booking_id>/approve-partial")
@require_admin
def approve_partial_booking(booking_id: int):
    data = request.get_json(silent=True) or {}
    approved, rejected = lifecycle.approve_partial(
        g.admin,
        booking_id,
        data.get("datesToApprove"),
        rejection_reason=_text_arg(data, "rejectionReason"),
        local=_text_arg(data, "local"),
    )
    return jsonify(
        success=True,
        message="Aprovação parcial registrada",
        approvedBooking=_transition_view(approved) if approved else None,
        rejectedBooking=_transition_view(rejected) if rejected else None,
    ), 200


@admin_bp.get("/bookings/<int:booking_id>/attendance")
@require_admin
def booking_attendance(booking_id: int):
    booking = lifecycle.load_for_actor(booking_id, g.admin)
    return jsonify(
        booking={
            "id": booking.id,
            "roomName": booking.room_name,
            "dates": [d.isoformat() for d in booking.dates],
            "responsavel": booking.responsavel,
            "sector": booking.setor_solicitante,
            "purpose": booking.finalidade,
        },
        attendance=attendance.attendance_report(booking),
    ), 200
