from datetime import datetime
from models.db import db

PENDING = "Pendente"
PRESENT = "Presente"
ABSENT = "Ausente"
UNCONFIRMED = "Não Confirmado"


class AttendanceRecord(db.Model):
    __tablename__ = "attendance_records"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    attendance_date = db.Column(db.Date, nullable=False)

    email = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(50), nullable=False, default=PENDING)
    is_visitor = db.Column(db.Boolean, default=False, nullable=False)

    confirmed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("booking_id", "attendance_date", "email", name="uq_attendance_once_per_day"),
    )
