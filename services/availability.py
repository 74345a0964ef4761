"""
Booking acceptance rules and the calendar view derived from them.

Everything here is pure: callers load the room's blocks, its capacity and
its non-rejected bookings, then ask whether a candidate fits. Times are
minutes since midnight; a session occupies the half-open range
[start, end).
"""
from collections import namedtuple

from models.booking import COMPUTER_TYPE, REJECTED, ROOM_TYPE
from services.errors import BusinessRuleError, ConflictError, SchemaError
from utils.clock import br_date, format_minutes, is_weekend, parse_hhmm

Slot = namedtuple("Slot", "day start end")
Candidate = namedtuple("Candidate", "room room_name tipo_reserva slots headcount")

EXCLUSIVE = "exclusive"
CAPACITY = "capacity"
SHARED = "shared"

HOURS_OF_DAY = range(24)


class BookingRules:
    def __init__(self, multi_venue_room, required_dates=3, open_minute=8 * 60,
                 close_minute=17 * 60, min_minutes=60):
        self.multi_venue_room = multi_venue_room
        self.required_dates = required_dates
        self.open_minute = open_minute
        self.close_minute = close_minute
        self.min_minutes = min_minutes

    @classmethod
    def from_config(cls, config):
        return cls(
            multi_venue_room=config.get("MULTI_VENUE_ROOM", "escola_fazendaria"),
            required_dates=config.get("MULTI_VENUE_REQUIRED_DATES", 3),
            open_minute=parse_hhmm(config.get("MULTI_VENUE_OPEN", "08:00")),
            close_minute=parse_hhmm(config.get("MULTI_VENUE_CLOSE", "17:00")),
            min_minutes=config.get("MIN_BOOKING_MINUTES", 60),
        )

    def is_multi_venue(self, room: str) -> bool:
        return room == self.multi_venue_room

    def policy(self, room: str, tipo_reserva: str) -> str:
        if not self.is_multi_venue(room):
            return EXCLUSIVE
        if tipo_reserva == COMPUTER_TYPE:
            return CAPACITY
        # independent sub-venues; the admin picks one when approving
        return SHARED


def _overlaps(start_a, end_a, start_b, end_b) -> bool:
    return start_a < end_b and end_a > start_b


def _hour_window(hour):
    return hour * 60, (hour + 1) * 60


def hours_spanned(start: int, end: int):
    return range(start // 60, (end - 1) // 60 + 1)


def _live(existing, room, tipo_reserva=None):
    for booking in existing:
        if booking.room != room or booking.status == REJECTED:
            continue
        if tipo_reserva is not None and booking.tipo_reserva != tipo_reserva:
            continue
        yield booking


def hour_usage(existing, day, hour) -> int:
    """Summed headcount of bookings whose session on `day` touches the given hour."""
    lo, hi = _hour_window(hour)
    used = 0
    for booking in existing:
        s = booking.session_on(day)
        if s is not None and _overlaps(s.start_minute, s.end_minute, lo, hi):
            used += booking.numero_participantes or 0
    return used


# ---------- individual checks ----------

def check_sessions(slots, rules: BookingRules):
    if not slots:
        raise SchemaError("Informe ao menos uma data.")
    for slot in slots:
        label = br_date(slot.day)
        if slot.end <= slot.start:
            raise BusinessRuleError(f"No dia {label}, a hora final deve ser maior que a hora inicial.")
        if slot.end - slot.start < rules.min_minutes:
            raise BusinessRuleError(
                f"No dia {label}, o agendamento deve ter duração mínima de {rules.min_minutes} minutos."
            )
    for slot in slots:
        if is_weekend(slot.day):
            raise BusinessRuleError(f"A data {br_date(slot.day)} cai em um final de semana. Não permitido.")


def check_room_rules(candidate: Candidate, rules: BookingRules):
    if not rules.is_multi_venue(candidate.room):
        return

    if len(candidate.slots) != rules.required_dates:
        raise BusinessRuleError(
            f"Para {candidate.room_name}, é obrigatório selecionar exatamente {rules.required_dates} datas."
        )

    if candidate.tipo_reserva != ROOM_TYPE:
        return

    latest_start = rules.close_minute - rules.min_minutes
    earliest_end = rules.open_minute + rules.min_minutes
    for slot in candidate.slots:
        if slot.start < rules.open_minute or slot.start > latest_start:
            raise BusinessRuleError(
                f"Horário de início inválido no dia {br_date(slot.day)} "
                f"(permitido entre {format_minutes(rules.open_minute)} e {format_minutes(latest_start)})."
            )
        if slot.end < earliest_end or slot.end > rules.close_minute:
            raise BusinessRuleError(
                f"Horário de fim inválido no dia {br_date(slot.day)} "
                f"(permitido entre {format_minutes(earliest_end)} e {format_minutes(rules.close_minute)})."
            )


def check_blocks(candidate: Candidate, blocks):
    for slot in candidate.slots:
        for block in blocks:
            if block.room != candidate.room or not block.covers_day(slot.day):
                continue
            if not block.applies_to(candidate.tipo_reserva):
                continue
            if any(slot.start <= t < slot.end for t in (block.times or [])):
                raise ConflictError(
                    f"O horário no dia {br_date(slot.day)} está bloqueado pela administração "
                    f"(Motivo: {block.reason})."
                )


def check_capacity(candidate: Candidate, existing, capacity: int):
    same_kind = list(_live(existing, candidate.room, candidate.tipo_reserva))
    for slot in candidate.slots:
        for hour in hours_spanned(slot.start, slot.end):
            used = hour_usage(same_kind, slot.day, hour)
            if used + candidate.headcount > capacity:
                raise ConflictError(
                    f"Não há computadores suficientes no dia {br_date(slot.day)} às "
                    f"{format_minutes(hour * 60)}. Restam: {max(capacity - used, 0)}."
                )


def check_exclusive(candidate: Candidate, existing):
    rivals = list(_live(existing, candidate.room))
    for slot in candidate.slots:
        for booking in rivals:
            s = booking.session_on(slot.day)
            if s is not None and _overlaps(s.start_minute, s.end_minute, slot.start, slot.end):
                raise ConflictError(
                    f"Horário indisponível para {candidate.room_name} no dia {br_date(slot.day)}."
                )


def validate_candidate(candidate: Candidate, rules: BookingRules, blocks, existing, capacity: int):
    """Raise the first rule the candidate breaks; return None when it can be stored."""
    check_sessions(candidate.slots, rules)
    check_room_rules(candidate, rules)
    check_blocks(candidate, blocks)

    policy = rules.policy(candidate.room, candidate.tipo_reserva)
    if policy == CAPACITY:
        check_capacity(candidate, existing, capacity)
    elif policy == EXCLUSIVE:
        check_exclusive(candidate, existing)


# ---------- calendar view ----------

def occupied_hours(room, day, tipo_reserva, rules: BookingRules, existing, capacity: int):
    """Hours (0-23) a same-type one-hour request on `day` would be refused for."""
    policy = rules.policy(room, tipo_reserva)
    if policy == SHARED:
        return []

    if policy == CAPACITY:
        same_kind = list(_live(existing, room, tipo_reserva))
        return [h for h in HOURS_OF_DAY if hour_usage(same_kind, day, h) >= capacity]

    busy = set()
    for booking in _live(existing, room):
        s = booking.session_on(day)
        if s is None:
            continue
        for h in HOURS_OF_DAY:
            lo, hi = _hour_window(h)
            if _overlaps(s.start_minute, s.end_minute, lo, hi):
                busy.add(h)
    return sorted(busy)


def blocked_hours(room, day, tipo_reserva, blocks):
    hours = set()
    for block in blocks:
        if block.room == room and block.covers_day(day) and block.applies_to(tipo_reserva):
            hours.update(t // 60 for t in (block.times or []))
    return sorted(hours)
