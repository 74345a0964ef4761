from flask import current_app

from models import db
from models.booking import RESERVATION_TYPES
from models.room_block import RoomBlock
from models.room_setting import RoomSetting
from services.errors import NotFound, PermissionDenied, SchemaError
from services.room_guard import room_guard
from utils.audit import log_event
from utils.clock import is_weekend, parse_day, parse_hhmm


def _require_room_access(actor, room):
    if not actor.can_manage_room(room):
        raise PermissionDenied("Você não tem permissão para gerenciar esta sala.")


def _list_of_str(data, key, required=True):
    value = data.get(key)
    if value is None and not required:
        return []
    if not isinstance(value, list) or (required and not value) or not all(isinstance(v, str) for v in value):
        raise SchemaError(f"{key} deve ser uma lista não vazia de textos.")
    return value


def create_block(actor, data):
    rooms = current_app.config.get("ROOMS", {})
    room = (data.get("room") or "").strip()
    if not room or (rooms and room not in rooms):
        raise SchemaError("Sala inválida para bloqueio.")
    _require_room_access(actor, room)

    reason = (data.get("reason") or "").strip()
    if not reason:
        raise SchemaError("Informe o motivo do bloqueio.")

    try:
        days = sorted({parse_day(d) for d in _list_of_str(data, "dates")})
    except ValueError as exc:
        raise SchemaError(str(exc))
    for day in days:
        if is_weekend(day):
            raise SchemaError(f"Não é permitido bloquear finais de semana ({day.isoformat()}).")

    open_minute = parse_hhmm(current_app.config.get("BLOCK_OPEN", "08:00"))
    close_minute = parse_hhmm(current_app.config.get("BLOCK_CLOSE", "17:00"))
    times = set()
    for raw in _list_of_str(data, "times"):
        try:
            minute = parse_hhmm(raw)
        except ValueError as exc:
            raise SchemaError(str(exc))
        if minute < open_minute or minute > close_minute:
            raise SchemaError(
                f"Horário inválido ({raw}). Só é permitido bloquear entre "
                f"{current_app.config.get('BLOCK_OPEN')} e {current_app.config.get('BLOCK_CLOSE')}."
            )
        times.add(minute)

    booking_types = _list_of_str(data, "bookingTypes", required=False)
    for tipo in booking_types:
        if tipo not in RESERVATION_TYPES:
            raise SchemaError(f"Tipo de reserva inválido: {tipo}.")

    block = RoomBlock(
        room=room,
        room_name=rooms.get(room, room),
        dates=[d.isoformat() for d in days],
        times=sorted(times),
        booking_types=sorted(set(booking_types)),
        reason=reason,
        created_by=actor.email,
    )
    # blocks race with booking creation on the same room
    with room_guard(room):
        db.session.add(block)
        db.session.commit()
        block_id = block.id

    log_event("BLOCK_CREATE", user_id=actor.id, entity="room_block", entity_id=block_id,
              metadata={"room": room, "dates": block.dates})
    return db.session.get(RoomBlock, block_id)


def list_blocks(room=None):
    q = RoomBlock.query
    if room:
        q = q.filter_by(room=room)
    return q.order_by(RoomBlock.created_at.desc()).all()


def delete_block(actor, block_id):
    block = db.session.get(RoomBlock, block_id)
    if block is None:
        raise NotFound("Bloqueio não encontrado.")
    _require_room_access(actor, block.room)

    db.session.delete(block)
    db.session.commit()
    log_event("BLOCK_DELETE", user_id=actor.id, entity="room_block", entity_id=block_id)


def get_computers(room=None):
    room = room or current_app.config.get("MULTI_VENUE_ROOM")
    setting = RoomSetting.query.filter_by(room=room).first()
    configured = setting.available_computers if setting else None
    return {
        "room": room,
        "availableComputers": configured if configured is not None else current_app.config.get("DEFAULT_COMPUTER_CAPACITY", 5),
        "configured": configured is not None,
    }


def set_computers(actor, value, room=None):
    room = room or current_app.config.get("MULTI_VENUE_ROOM")
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SchemaError("availableComputers deve ser um inteiro maior ou igual a zero.")
    if actor is not None:
        _require_room_access(actor, room)

    with room_guard(room) as setting:
        setting.available_computers = value
        db.session.commit()

    log_event("SETTINGS_COMPUTERS_UPDATE", user_id=actor.id if actor else None,
              entity="room_setting", entity_id=room, metadata={"available_computers": value})
    return get_computers(room)
