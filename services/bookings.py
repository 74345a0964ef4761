from flask import current_app

from models import db
from models.booking import PENDING, REJECTED, ROOM_TYPE, Booking, BookingSession
from models.external_participant import ExternalParticipant
from models.room_block import RoomBlock
from models.room_setting import RoomSetting
from services import availability, notifications
from services.availability import BookingRules, Candidate
from services.booking_payload import parse_booking_payload, parse_reservation_type
from services.errors import NotFound, SchemaError
from services.room_guard import room_guard
from utils.audit import log_event
from utils.clock import br_date, format_minutes, parse_day


def current_rules():
    return BookingRules.from_config(current_app.config)


def capacity_for(setting):
    if setting is not None and setting.available_computers is not None:
        return setting.available_computers
    return current_app.config.get("DEFAULT_COMPUTER_CAPACITY", 5)


def live_bookings_on(room, days):
    """Non-rejected bookings of `room` with a session on any of `days`."""
    on_days = db.session.query(BookingSession.booking_id).filter(BookingSession.day.in_(list(days)))
    return Booking.query.filter(
        Booking.room == room,
        Booking.status != REJECTED,
        Booking.id.in_(on_days),
    ).all()


def room_blocks(room):
    return RoomBlock.query.filter_by(room=room).all()


def create_booking(data):
    config = current_app.config
    rules = current_rules()
    fields, slots, externals = parse_booking_payload(data, config.get("ROOMS", {}), rules.multi_venue_room)
    candidate = Candidate(
        room=fields["room"],
        room_name=fields["room_name"],
        tipo_reserva=fields["tipo_reserva"],
        slots=slots,
        headcount=fields["numero_participantes"],
    )

    with room_guard(candidate.room) as setting:
        availability.validate_candidate(
            candidate,
            rules,
            blocks=room_blocks(candidate.room),
            existing=live_bookings_on(candidate.room, [s.day for s in slots]),
            capacity=capacity_for(setting),
        )

        booking = Booking(status=PENDING, **fields)
        booking.set_sessions(slots)
        booking.external_participants = [ExternalParticipant(**p) for p in externals]
        db.session.add(booking)
        db.session.commit()
        booking_id = booking.id

    current_app.logger.info("Booking %s created for room %s", booking_id, candidate.room)
    log_event(
        "BOOKING_CREATE",
        entity="booking",
        entity_id=booking_id,
        metadata={"room": candidate.room, "dates": [s.day.isoformat() for s in slots]},
    )
    notifications.dispatch(notifications.notify_booking_received, booking_id)
    return db.session.get(Booking, booking_id)


def get_booking_or_404(booking_id):
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Agendamento não encontrado.")
    return booking


def _time_label(booking):
    labels = []
    for s in booking.sessions:
        label = f"{format_minutes(s.start_minute)} às {format_minutes(s.end_minute)}"
        if label not in labels:
            labels.append(label)
    return ", ".join(labels)


def search(room=None, dates=None, name=None, status=None, sector=None):
    q = Booking.query
    if room:
        q = q.filter(Booking.room == room)
    if status:
        q = q.filter(Booking.status == status)
    if name:
        q = q.filter(Booking.nome_completo.ilike(f"%{name}%"))
    if sector:
        q = q.filter(Booking.setor_solicitante.ilike(f"%{sector}%"))
    if dates:
        try:
            days = [parse_day(d) for d in dates]
        except ValueError as exc:
            raise SchemaError(str(exc))
        on_days = db.session.query(BookingSession.booking_id).filter(BookingSession.day.in_(days))
        q = q.filter(Booking.id.in_(on_days))

    rows = q.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(200).all()
    return [
        {
            "id": b.id,
            "room": b.room_name,
            "dates": [d.isoformat() for d in b.dates],
            "dateStr": ", ".join(br_date(d) for d in b.dates),
            "name": b.nome_completo,
            "sector": b.setor_solicitante,
            "time": _time_label(b),
            "status": b.status,
            "local": b.local,
        }
        for b in rows
    ]


def find_public(booking_id):
    b = get_booking_or_404(booking_id)
    return {
        "id": b.id,
        "roomName": b.room_name,
        "dates": [s.day.isoformat() for s in b.sessions],
        "startTimes": [format_minutes(s.start_minute) for s in b.sessions],
        "endTimes": [format_minutes(s.end_minute) for s in b.sessions],
        "name": b.nome_completo,
        "sector": b.setor_solicitante,
        "status": b.status,
        "observacao": b.observacao,
        "local": b.local,
    }


def room_availability(room, date_str, tipo_reserva=None):
    if not room:
        raise SchemaError("room é obrigatório.")
    rooms = current_app.config.get("ROOMS", {})
    if rooms and room not in rooms:
        raise SchemaError(f"Sala desconhecida: {room}.")
    try:
        day = parse_day(date_str)
    except ValueError as exc:
        raise SchemaError(str(exc))

    rules = current_rules()
    tipo = parse_reservation_type({"tipoReserva": tipo_reserva or ROOM_TYPE}, room, rules.multi_venue_room)
    existing = live_bookings_on(room, [day])
    setting = RoomSetting.query.filter_by(room=room).first()
    occupied = availability.occupied_hours(room, day, tipo, rules, existing, capacity_for(setting))
    blocked = availability.blocked_hours(room, day, tipo, room_blocks(room))
    return {
        "room": room,
        "date": day.isoformat(),
        "tipoReserva": tipo,
        "occupiedHours": [format_minutes(h * 60) for h in occupied],
        "blockedHours": [format_minutes(h * 60) for h in blocked],
    }
