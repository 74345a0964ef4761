from datetime import datetime, date
from models.db import db
from utils.clock import format_minutes

class RoomBlock(db.Model):
    __tablename__ = "room_blocks"

    id = db.Column(db.Integer, primary_key=True)
    room = db.Column(db.String(50), nullable=False, index=True)
    room_name = db.Column(db.String(100), nullable=False)

    # ISO dates ("2025-06-02") and minutes since midnight
    dates = db.Column(db.JSON, nullable=False, default=list)
    times = db.Column(db.JSON, nullable=False, default=list)
    # empty list: applies to every reservation type
    booking_types = db.Column(db.JSON, nullable=False, default=list)

    reason = db.Column(db.String(255), nullable=False)
    created_by = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def covers_day(self, day: date) -> bool:
        return day.isoformat() in (self.dates or [])

    def applies_to(self, tipo_reserva: str) -> bool:
        return not self.booking_types or tipo_reserva in self.booking_types

    def to_dict(self):
        return {
            "id": self.id,
            "room": self.room,
            "room_name": self.room_name,
            "dates": list(self.dates or []),
            "times": [format_minutes(t) for t in (self.times or [])],
            "booking_types": list(self.booking_types or []),
            "reason": self.reason,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
