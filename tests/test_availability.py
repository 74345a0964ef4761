from datetime import date

import pytest

from models.booking import APPROVED, COMPUTER_TYPE, PENDING, REJECTED, ROOM_TYPE, Booking
from models.room_block import RoomBlock
from services import availability
from services.availability import BookingRules, Candidate, Slot
from services.errors import BusinessRuleError, ConflictError, SchemaError

MONDAY = date(2025, 6, 2)
TUESDAY = date(2025, 6, 3)
WEDNESDAY = date(2025, 6, 4)
SATURDAY = date(2025, 6, 7)

RULES = BookingRules("escola_fazendaria")


def hm(text):
    hours, minutes = text.split(":")
    return int(hours) * 60 + int(minutes)


def existing(room="receitorio", status=APPROVED, tipo=ROOM_TYPE, headcount=1, slots=()):
    booking = Booking(room=room, status=status, tipo_reserva=tipo, numero_participantes=headcount)
    booking.set_sessions([(day, hm(start), hm(end)) for day, start, end in slots])
    return booking


def candidate(room="receitorio", tipo=ROOM_TYPE, headcount=1, slots=()):
    return Candidate(
        room=room,
        room_name=room,
        tipo_reserva=tipo,
        slots=[Slot(day, hm(start), hm(end)) for day, start, end in slots],
        headcount=headcount,
    )


def validate(cand, existing_bookings=(), blocks=(), capacity=5):
    availability.validate_candidate(cand, RULES, blocks=list(blocks), existing=list(existing_bookings),
                                    capacity=capacity)


def block(room="receitorio", days=(MONDAY,), times=("10:00",), types=(), reason="Manutenção"):
    return RoomBlock(
        room=room,
        room_name=room,
        dates=[d.isoformat() for d in days],
        times=[hm(t) for t in times],
        booking_types=list(types),
        reason=reason,
        created_by="chefe@seget.test",
    )


# ---- exclusive rooms ----

def test_overlap_with_approved_booking_is_rejected():
    a = existing(slots=[(MONDAY, "09:00", "10:00")])
    with pytest.raises(ConflictError) as exc:
        validate(candidate(slots=[(MONDAY, "09:30", "10:30")]), [a])
    assert "02/06/2025" in exc.value.message


def test_adjacent_booking_is_accepted():
    a = existing(slots=[(MONDAY, "09:00", "10:00")])
    validate(candidate(slots=[(MONDAY, "10:00", "11:00")]), [a])


def test_pending_bookings_also_hold_the_slot():
    a = existing(status=PENDING, slots=[(MONDAY, "09:00", "11:00")])
    with pytest.raises(ConflictError):
        validate(candidate(slots=[(MONDAY, "10:00", "12:00")]), [a])


def test_rejected_bookings_do_not_conflict():
    a = existing(status=REJECTED, slots=[(MONDAY, "09:00", "10:00")])
    validate(candidate(slots=[(MONDAY, "09:00", "10:00")]), [a])


def test_other_rooms_do_not_conflict():
    a = existing(room="sala_delta", slots=[(MONDAY, "09:00", "10:00")])
    validate(candidate(slots=[(MONDAY, "09:00", "10:00")]), [a])


def test_overlap_checked_per_date():
    a = existing(slots=[(MONDAY, "09:00", "10:00"), (TUESDAY, "14:00", "15:00")])
    validate(candidate(slots=[(TUESDAY, "09:00", "10:00")]), [a])
    with pytest.raises(ConflictError):
        validate(candidate(slots=[(TUESDAY, "14:30", "16:00")]), [a])


# ---- generic session rules ----

def test_weekend_is_rejected():
    with pytest.raises(BusinessRuleError) as exc:
        validate(candidate(slots=[(SATURDAY, "09:00", "10:00")]))
    assert "final de semana" in exc.value.message


def test_minimum_duration():
    with pytest.raises(BusinessRuleError) as exc:
        validate(candidate(slots=[(MONDAY, "09:00", "09:59")]))
    assert "60 minutos" in exc.value.message


def test_end_must_follow_start():
    with pytest.raises(BusinessRuleError):
        validate(candidate(slots=[(MONDAY, "10:00", "10:00")]))


def test_empty_schedule_is_a_schema_error():
    with pytest.raises(SchemaError):
        validate(candidate(slots=[]))


# ---- multi-venue room ----

ESCOLA_SLOTS = [(MONDAY, "08:00", "12:00"), (TUESDAY, "08:00", "12:00"), (WEDNESDAY, "08:00", "12:00")]


def test_multi_venue_requires_exact_date_count():
    with pytest.raises(BusinessRuleError) as exc:
        validate(candidate(room="escola_fazendaria", slots=ESCOLA_SLOTS[:2]))
    assert "exatamente 3 datas" in exc.value.message


@pytest.mark.parametrize("start,end", [("07:00", "09:00"), ("16:30", "17:30"), ("16:00", "17:01")])
def test_multi_venue_room_window(start, end):
    slots = ESCOLA_SLOTS[:2] + [(WEDNESDAY, start, end)]
    with pytest.raises(BusinessRuleError):
        validate(candidate(room="escola_fazendaria", slots=slots))


def test_multi_venue_window_edges_are_allowed():
    slots = [(MONDAY, "08:00", "09:00"), (TUESDAY, "16:00", "17:00"), (WEDNESDAY, "08:00", "17:00")]
    validate(candidate(room="escola_fazendaria", slots=slots))


def test_multi_venue_room_type_is_shared():
    a = existing(room="escola_fazendaria", slots=ESCOLA_SLOTS)
    validate(candidate(room="escola_fazendaria", slots=ESCOLA_SLOTS), [a])


def test_computer_type_has_no_time_window():
    slots = [(MONDAY, "18:00", "20:00"), (TUESDAY, "18:00", "20:00"), (WEDNESDAY, "18:00", "20:00")]
    validate(candidate(room="escola_fazendaria", tipo=COMPUTER_TYPE, slots=slots))


def test_computer_capacity_is_summed_per_hour():
    a = existing(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=3, slots=ESCOLA_SLOTS)
    with pytest.raises(ConflictError) as exc:
        validate(candidate(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=3, slots=ESCOLA_SLOTS), [a])
    assert "Restam: 2" in exc.value.message
    validate(candidate(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=2, slots=ESCOLA_SLOTS), [a])


def test_computer_capacity_ignores_room_type_bookings():
    a = existing(room="escola_fazendaria", tipo=ROOM_TYPE, headcount=30, slots=ESCOLA_SLOTS)
    validate(candidate(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=5, slots=ESCOLA_SLOTS), [a])


def test_computer_capacity_after_existing_session_ends():
    a = existing(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=5, slots=ESCOLA_SLOTS)
    later = [(MONDAY, "12:00", "13:00"), (TUESDAY, "12:00", "13:00"), (WEDNESDAY, "12:00", "13:00")]
    validate(candidate(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=5, slots=later), [a])


def test_zero_capacity_refuses_everything():
    with pytest.raises(ConflictError):
        validate(candidate(room="escola_fazendaria", tipo=COMPUTER_TYPE, slots=ESCOLA_SLOTS), capacity=0)


# ---- administrative blocks ----

def test_block_time_inside_session_rejects():
    with pytest.raises(ConflictError) as exc:
        validate(candidate(slots=[(MONDAY, "09:00", "11:00")]), blocks=[block(reason="Dedetização")])
    assert "Dedetização" in exc.value.message


def test_block_time_at_session_end_does_not_reject():
    validate(candidate(slots=[(MONDAY, "09:00", "10:00")]), blocks=[block()])


def test_block_on_another_day_does_not_reject():
    validate(candidate(slots=[(TUESDAY, "09:00", "11:00")]), blocks=[block()])


def test_every_block_on_the_date_is_checked():
    blocks = [block(times=["16:00"]), block(times=["10:00"], reason="Segundo")]
    with pytest.raises(ConflictError) as exc:
        validate(candidate(slots=[(MONDAY, "09:00", "11:00")]), blocks=blocks)
    assert "Segundo" in exc.value.message


def test_typed_block_only_applies_to_its_type():
    computers_only = block(room="escola_fazendaria", days=[MONDAY], times=["09:00"], types=[COMPUTER_TYPE])
    validate(candidate(room="escola_fazendaria", slots=ESCOLA_SLOTS), blocks=[computers_only])
    with pytest.raises(ConflictError):
        validate(candidate(room="escola_fazendaria", tipo=COMPUTER_TYPE, slots=ESCOLA_SLOTS),
                 blocks=[computers_only])


# ---- calendar view ----

def test_occupied_hours_for_exclusive_room():
    a = existing(slots=[(MONDAY, "09:30", "11:00")])
    assert availability.occupied_hours("receitorio", MONDAY, ROOM_TYPE, RULES, [a], 5) == [9, 10]


def test_occupied_hours_for_shared_room_type_is_empty():
    a = existing(room="escola_fazendaria", slots=ESCOLA_SLOTS)
    assert availability.occupied_hours("escola_fazendaria", MONDAY, ROOM_TYPE, RULES, [a], 5) == []


def test_occupied_hours_agree_with_exclusive_check():
    bookings = [
        existing(slots=[(MONDAY, "08:00", "09:00")]),
        existing(slots=[(MONDAY, "10:30", "12:15")]),
        existing(status=REJECTED, slots=[(MONDAY, "14:00", "15:00")]),
    ]
    occupied = availability.occupied_hours("receitorio", MONDAY, ROOM_TYPE, RULES, bookings, 5)
    for hour in range(24):
        cand = candidate()._replace(slots=[Slot(MONDAY, hour * 60, (hour + 1) * 60)])
        try:
            availability.check_exclusive(cand, bookings)
            refused = False
        except ConflictError:
            refused = True
        assert refused == (hour in occupied), hour
    assert occupied == [8, 10, 11, 12]


def test_occupied_hours_agree_with_capacity_check():
    bookings = [
        existing(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=3, slots=[(MONDAY, "09:00", "11:00")]),
        existing(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=2, slots=[(MONDAY, "10:00", "12:00")]),
    ]
    occupied = availability.occupied_hours("escola_fazendaria", MONDAY, COMPUTER_TYPE, RULES, bookings, 5)
    assert occupied == [10]
    for hour in range(24):
        cand = candidate(room="escola_fazendaria", tipo=COMPUTER_TYPE, headcount=1)
        cand = cand._replace(slots=[Slot(MONDAY, hour * 60, (hour + 1) * 60)])
        try:
            availability.check_capacity(cand, bookings, 5)
            refused = False
        except ConflictError:
            refused = True
        assert refused == (hour in occupied), hour


def test_blocked_hours_respect_booking_type():
    blocks = [
        block(room="escola_fazendaria", times=["09:00", "09:30"]),
        block(room="escola_fazendaria", times=["14:00"], types=[COMPUTER_TYPE]),
    ]
    assert availability.blocked_hours("escola_fazendaria", MONDAY, ROOM_TYPE, blocks) == [9]
    assert availability.blocked_hours("escola_fazendaria", MONDAY, COMPUTER_TYPE, blocks) == [9, 14]
