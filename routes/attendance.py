from flask import Blueprint, jsonify, request

from services import attendance
from services.errors import SchemaError
from utils.clock import br_date

attendance_bp = Blueprint("attendance", __name__, url_prefix="/attendance")


def _booking_id(data):
    value = data.get("bookingId")
    if isinstance(value, str) and value.isdigit():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError("bookingId é obrigatório.")
    return value


def _email(data):
    email = data.get("email")
    if not isinstance(email, str) or not email.strip():
        raise SchemaError("email é obrigatório.")
    return email


@attendance_bp.post("/verify-email")
def verify_email():
    data = request.get_json(silent=True) or {}
    result = attendance.verify_email(_booking_id(data), _email(data))
    return jsonify(result), 200


@attendance_bp.post("/confirm")
def confirm():
    data = request.get_json(silent=True) or {}
    record, day = attendance.confirm_attendance(
        _booking_id(data),
        _email(data),
        data.get("fullName"),
        data.get("status"),
        date_str=data.get("date"),
    )
    return jsonify(
        success=True,
        message=f"{record.status} registrada com sucesso para o dia {br_date(day)}!",
        attendance={
            "id": record.id,
            "date": day.isoformat(),
            "email": record.email,
            "status": record.status,
            "isVisitor": record.is_visitor,
        },
    ), 201
