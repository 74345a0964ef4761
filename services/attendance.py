from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.attendance_record import ABSENT, PENDING, PRESENT, UNCONFIRMED, AttendanceRecord
from models.booking import APPROVED, Booking
from models.employee import Employee
from services import notifications
from services.errors import BusinessRuleError, ConflictError, NotFound, SchemaError
from utils.audit import log_event
from utils.clock import at_minute, br_date, local_now, parse_day


def _now():
    return local_now(current_app.config.get("TIMEZONE"))


def _norm(email):
    return (email or "").strip().lower()


def _approved_booking(booking_id):
    booking = db.session.get(Booking, booking_id)
    if booking is None or booking.status != APPROVED:
        raise NotFound("Agendamento não encontrado ou não aprovado.")
    return booking


def allowed_emails(booking):
    emails = [_norm(booking.email)]
    emails += [_norm(e) for e in booking.participantes or []]
    emails += [_norm(p.email) for p in booking.external_participants]
    return [e for e in dict.fromkeys(emails) if e]


def verify_email(booking_id, email):
    booking = _approved_booking(booking_id)
    email = _norm(email)
    if email not in allowed_emails(booking):
        raise BusinessRuleError(
            "E-mail não cadastrado na base de participantes deste agendamento. "
            "Por favor, dirija-se ao RH para atualizar seu e-mail."
        )

    if email == _norm(booking.email):
        return {"exists": True, "userData": {"name": booking.nome_completo, "isEmployee": True}}

    employee = Employee.query.filter_by(email=email).first()
    if employee:
        return {"exists": True, "userData": {"name": employee.full_name, "isEmployee": True}}

    for p in booking.external_participants:
        if _norm(p.email) == email:
            return {"exists": True, "userData": {"name": p.full_name, "isEmployee": False}}

    return {"exists": True, "userData": {"name": "", "isEmployee": False}}


def resolve_attendance_day(booking, date_str, today):
    days = booking.dates
    if date_str:
        try:
            day = parse_day(date_str)
        except ValueError as exc:
            raise SchemaError(str(exc))
        if day not in days:
            raise BusinessRuleError("A data especificada não faz parte deste agendamento.")
        return day
    if len(days) == 1:
        return days[0]
    if today in days:
        return today
    return min(days)


def confirmation_window(booking, day):
    s = booking.session_on(day)
    grace = timedelta(minutes=current_app.config.get("ATTENDANCE_GRACE_MINUTES", 60))
    return at_minute(day, s.start_minute), at_minute(day, s.end_minute) + grace


def confirm_attendance(booking_id, email, full_name, status, date_str=None, now=None):
    if status not in (PRESENT, ABSENT):
        raise SchemaError(f"status deve ser '{PRESENT}' ou '{ABSENT}'.")
    full_name = (full_name or "").strip()
    if not full_name:
        raise SchemaError("Informe o nome completo.")

    booking = _approved_booking(booking_id)
    email = _norm(email)
    if email not in allowed_emails(booking):
        raise BusinessRuleError("E-mail não cadastrado na base de participantes deste agendamento.")

    now = now or _now()
    day = resolve_attendance_day(booking, date_str, now.date())
    opens, closes = confirmation_window(booking, day)
    if now < opens:
        raise BusinessRuleError(
            f"A confirmação de presença só pode ser realizada a partir do início do agendamento "
            f"({opens.strftime('%d/%m/%Y %H:%M')})."
        )
    if now > closes:
        raise BusinessRuleError(
            f"O período para confirmação de presença já encerrou ({closes.strftime('%d/%m/%Y %H:%M')}). "
            "Entre em contato com a administração."
        )

    is_visitor = Employee.query.filter_by(email=email).first() is None and email != _norm(booking.email)
    record = AttendanceRecord.query.filter_by(booking_id=booking.id, email=email, attendance_date=day).first()
    if record is not None and record.status != PENDING:
        what = "presença" if record.status == PRESENT else "ausência"
        raise ConflictError(
            f"Você já confirmou sua {what} para o dia {br_date(day)}. Não é possível alterar a confirmação."
        )
    if record is None:
        record = AttendanceRecord(booking_id=booking.id, email=email, attendance_date=day)
        db.session.add(record)

    record.status = status
    record.full_name = full_name
    record.is_visitor = is_visitor
    record.confirmed_at = now
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Confirmação já registrada para este dia.")

    log_event("ATTENDANCE_CONFIRM", entity="booking", entity_id=booking.id,
              metadata={"email": email, "date": day.isoformat(), "status": status})
    notifications.dispatch(notifications.notify_attendance_recorded, booking.id, email, status, br_date(day))
    return record, day


def ensure_pending_records(booking, day, recipients):
    """Create a Pendente row per recipient that has none for `day`."""
    existing = {
        r.email
        for r in AttendanceRecord.query.filter_by(booking_id=booking.id, attendance_date=day).all()
    }
    for email, name in recipients:
        if email in existing:
            continue
        db.session.add(AttendanceRecord(
            booking_id=booking.id,
            attendance_date=day,
            email=email,
            full_name=name or email,
            status=PENDING,
            is_visitor=Employee.query.filter_by(email=email).first() is None and email != _norm(booking.email),
        ))
        existing.add(email)


def attendance_report(booking, now=None):
    """Recorded answers plus a row for every invitee who never answered."""
    now = now or _now()
    rows = []
    answered = set()
    for r in sorted(booking.attendance_records, key=lambda r: (r.attendance_date, r.email)):
        answered.add((r.attendance_date, r.email))
        rows.append({
            "id": r.id,
            "date": r.attendance_date.isoformat(),
            "fullName": r.full_name,
            "email": r.email,
            "status": r.status,
            "isVisitor": r.is_visitor,
            "confirmedAt": r.confirmed_at.strftime("%d/%m/%Y") if r.confirmed_at else None,
            "confirmedTime": r.confirmed_at.strftime("%H:%M") if r.confirmed_at else None,
        })

    for s in booking.sessions:
        started = now > at_minute(s.day, s.start_minute)
        for email in allowed_emails(booking):
            if (s.day, email) in answered:
                continue
            rows.append({
                "id": None,
                "date": s.day.isoformat(),
                "fullName": "N/A (Convidado)",
                "email": email,
                "status": UNCONFIRMED if started else PENDING,
                "isVisitor": None,
                "confirmedAt": None,
                "confirmedTime": None,
            })
    return rows
