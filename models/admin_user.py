from datetime import datetime
from models.db import db

class AdminUser(db.Model):
    __tablename__ = "admin_users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # room id this admin manages; ignored for super admins
    room_access = db.Column(db.String(50), nullable=True)
    is_super_admin = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def can_manage_room(self, room: str) -> bool:
        return self.is_super_admin or (self.room_access is not None and self.room_access == room)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "room_access": self.room_access,
            "is_super_admin": self.is_super_admin,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
