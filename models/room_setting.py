from datetime import datetime
from models.db import db

class RoomSetting(db.Model):
    __tablename__ = "room_settings"

    id = db.Column(db.Integer, primary_key=True)
    room = db.Column(db.String(50), unique=True, nullable=False)

    # NULL means "not configured"; the default ceiling applies
    available_computers = db.Column(db.Integer, nullable=True)

    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
