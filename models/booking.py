from datetime import datetime
from models.db import db
from utils.clock import format_minutes

PENDING = "pending"
IN_REVIEW = "em_analise"
APPROVED = "approved"
REJECTED = "rejected"
STATUSES = (PENDING, IN_REVIEW, APPROVED, REJECTED)

ROOM_TYPE = "sala"
COMPUTER_TYPE = "computador"
RESERVATION_TYPES = (ROOM_TYPE, COMPUTER_TYPE)


class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    room = db.Column(db.String(50), nullable=False, index=True)
    room_name = db.Column(db.String(100), nullable=False)
    tipo_reserva = db.Column(db.String(20), nullable=False, default=ROOM_TYPE)
    status = db.Column(db.String(20), nullable=False, default=PENDING, index=True)

    # Requester
    nome_completo = db.Column(db.String(255), nullable=False)
    setor_solicitante = db.Column(db.String(255), nullable=False)
    responsavel = db.Column(db.String(255), nullable=False)
    telefone = db.Column(db.String(20), nullable=False)
    email = db.Column(db.String(255), nullable=False)

    # Event
    numero_participantes = db.Column(db.Integer, nullable=False)
    participantes = db.Column(db.JSON, nullable=False, default=list)  # internal e-mails
    finalidade = db.Column(db.String(255), nullable=False)
    descricao = db.Column(db.Text, nullable=False)
    observacao = db.Column(db.Text, nullable=True)
    observacao_admin = db.Column(db.Text, nullable=True)
    local = db.Column(db.String(255), nullable=True)  # venue chosen at approval

    # Equipment
    projetor = db.Column(db.String(10), nullable=True)
    som_projetor = db.Column(db.String(10), nullable=True)
    internet = db.Column(db.String(10), nullable=True)
    wifi_todos = db.Column(db.String(10), nullable=True)
    conexao_cabo = db.Column(db.String(10), nullable=True)
    software_especifico = db.Column(db.String(10), nullable=True)
    qual_software = db.Column(db.Text, nullable=True)
    papelaria = db.Column(db.Text, nullable=True)
    material_externo = db.Column(db.Text, nullable=True)
    apoio_equipe = db.Column(db.String(10), nullable=True)

    # Audit
    approved_by = db.Column(db.String(255), nullable=True)
    approved_at = db.Column(db.DateTime, nullable=True)
    rejected_by = db.Column(db.String(255), nullable=True)
    rejected_at = db.Column(db.DateTime, nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)

    # ISO dates whose attendance e-mails already went out
    confirmation_emails_sent = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    sessions = db.relationship(
        "BookingSession",
        back_populates="booking",
        order_by="BookingSession.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    external_participants = db.relationship(
        "ExternalParticipant",
        backref="booking",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    attendance_records = db.relationship(
        "AttendanceRecord",
        backref="booking",
        cascade="all, delete-orphan",
        lazy=True,
    )

    # Copied verbatim when a booking is split by partial approval
    BUSINESS_FIELDS = (
        "room", "room_name", "tipo_reserva",
        "nome_completo", "setor_solicitante", "responsavel", "telefone", "email",
        "numero_participantes", "participantes", "finalidade", "descricao", "observacao", "local",
        "projetor", "som_projetor", "internet", "wifi_todos", "conexao_cabo",
        "software_especifico", "qual_software", "papelaria", "material_externo", "apoio_equipe",
    )

    @property
    def dates(self):
        return [s.day for s in self.sessions]

    def session_on(self, day):
        for s in self.sessions:
            if s.day == day:
                return s
        return None

    def set_sessions(self, slots):
        """Replace the schedule with (day, start_minute, end_minute) tuples, ordered by day."""
        self.sessions = [
            BookingSession(position=i, day=day, start_minute=start, end_minute=end)
            for i, (day, start, end) in enumerate(sorted(slots))
        ]

    def __repr__(self):
        return f"<Booking {self.id} {self.room} {self.status}>"

    def to_dict(self):
        return {
            "id": self.id,
            "room": self.room,
            "roomName": self.room_name,
            "tipoReserva": self.tipo_reserva,
            "status": self.status,
            "dates": [s.day.isoformat() for s in self.sessions],
            "horaInicio": [format_minutes(s.start_minute) for s in self.sessions],
            "horaFim": [format_minutes(s.end_minute) for s in self.sessions],
            "local": self.local,
            "solicitante": {
                "nomeCompleto": self.nome_completo,
                "setorSolicitante": self.setor_solicitante,
                "responsavel": self.responsavel,
                "telefone": self.telefone,
                "email": self.email,
            },
            "evento": {
                "numeroParticipantes": self.numero_participantes,
                "participantes": list(self.participantes or []),
                "participantesExternos": [p.to_dict() for p in self.external_participants],
                "finalidade": self.finalidade,
                "descricao": self.descricao,
                "observacao": self.observacao,
            },
            "equipamentos": {
                "projetor": self.projetor,
                "somProjetor": self.som_projetor,
                "internet": self.internet,
                "wifiTodos": self.wifi_todos,
                "conexaoCabo": self.conexao_cabo,
                "softwareEspecifico": self.software_especifico,
                "qualSoftware": self.qual_software,
                "papelaria": self.papelaria,
                "materialExterno": self.material_externo,
                "apoioEquipe": self.apoio_equipe,
            },
            "metadata": {
                "createdAt": self.created_at.isoformat() if self.created_at else None,
                "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
                "approvedBy": self.approved_by,
                "approvedAt": self.approved_at.isoformat() if self.approved_at else None,
                "rejectedBy": self.rejected_by,
                "rejectedAt": self.rejected_at.isoformat() if self.rejected_at else None,
                "rejectionReason": self.rejection_reason,
                "observacaoAdmin": self.observacao_admin,
            },
        }


class BookingSession(db.Model):
    """One (date, start, end) occurrence of a booking; times are minutes since midnight."""

    __tablename__ = "booking_sessions"

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    day = db.Column(db.Date, nullable=False, index=True)
    start_minute = db.Column(db.Integer, nullable=False)
    end_minute = db.Column(db.Integer, nullable=False)

    booking = db.relationship("Booking", back_populates="sessions")

    __table_args__ = (
        db.UniqueConstraint("booking_id", "day", name="uq_booking_session_day"),
        db.CheckConstraint("end_minute > start_minute", name="ck_booking_session_order"),
    )
