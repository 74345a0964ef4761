from models.db import db

class ExternalParticipant(db.Model):
    __tablename__ = "external_participants"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)

    full_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    orgao = db.Column(db.String(100), nullable=True)

    def to_dict(self):
        return {"full_name": self.full_name, "email": self.email, "orgao": self.orgao}
