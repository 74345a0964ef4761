import re

from models.booking import COMPUTER_TYPE, RESERVATION_TYPES, ROOM_TYPE
from services.availability import Slot
from services.errors import SchemaError
from utils.clock import parse_day, parse_hhmm

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# JSON key -> Booking column
REQUIRED_TEXT = {
    "nomeCompleto": "nome_completo",
    "setorSolicitante": "setor_solicitante",
    "responsavel": "responsavel",
    "telefone": "telefone",
    "finalidade": "finalidade",
    "descricao": "descricao",
}
OPTIONAL_TEXT = {
    "observacao": "observacao",
    "projetor": "projetor",
    "somProjetor": "som_projetor",
    "internet": "internet",
    "wifiTodos": "wifi_todos",
    "conexaoCabo": "conexao_cabo",
    "softwareEspecifico": "software_especifico",
    "qualSoftware": "qual_software",
    "papelaria": "papelaria",
    "materialExterno": "material_externo",
    "apoioEquipe": "apoio_equipe",
}


def is_email(value) -> bool:
    return isinstance(value, str) and len(value) <= 255 and bool(_EMAIL.match(value.strip()))


def _text(data, key, required):
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise SchemaError(f"Campo obrigatório ausente: {key}.")
        return None
    if not isinstance(value, str):
        raise SchemaError(f"Campo {key} deve ser texto.")
    return value.strip()


def _times(value, count, key):
    # a single "HH:MM" applies to every date
    if isinstance(value, str):
        value = [value] * count
    if not isinstance(value, list):
        raise SchemaError(f"{key} deve ser uma lista de horários HH:MM.")
    if len(value) != count:
        raise SchemaError(f"{key} deve ter um horário para cada data ({count}).")
    try:
        return [parse_hhmm(v) for v in value]
    except ValueError as exc:
        raise SchemaError(str(exc))


def parse_slots(data):
    """dates[] + horaInicio[] + horaFim[] -> date-ordered list of Slot."""
    raw_dates = data.get("dates")
    if not isinstance(raw_dates, list) or not raw_dates:
        raise SchemaError("dates deve ser uma lista não vazia de datas YYYY-MM-DD.")
    try:
        days = [parse_day(d) for d in raw_dates]
    except ValueError as exc:
        raise SchemaError(str(exc))
    if len(set(days)) != len(days):
        raise SchemaError("dates não pode conter datas repetidas.")

    starts = _times(data.get("horaInicio"), len(days), "horaInicio")
    ends = _times(data.get("horaFim"), len(days), "horaFim")
    return sorted(Slot(day, start, end) for day, start, end in zip(days, starts, ends))


def parse_reservation_type(data, room, multi_venue_room):
    tipo = data.get("tipoReserva") or ROOM_TYPE
    if room != multi_venue_room:
        return ROOM_TYPE
    if tipo not in RESERVATION_TYPES:
        raise SchemaError(f"tipoReserva deve ser '{ROOM_TYPE}' ou '{COMPUTER_TYPE}'.")
    return tipo


def parse_external_participants(data):
    rows = data.get("participantesExternos") or []
    if not isinstance(rows, list):
        raise SchemaError("participantesExternos deve ser uma lista.")
    out = []
    for row in rows:
        if not isinstance(row, dict):
            raise SchemaError("Participante externo inválido.")
        name = (row.get("fullName") or row.get("full_name") or "").strip()
        email = (row.get("email") or "").strip().lower()
        if not name or not is_email(email):
            raise SchemaError("Participante externo precisa de nome e e-mail válidos.")
        out.append({"full_name": name, "email": email, "orgao": (row.get("orgao") or "").strip() or None})
    return out


def parse_booking_payload(data, rooms, multi_venue_room):
    """
    Validate the shape of a booking request.

    Returns (fields, slots, external_participants) where `fields` holds
    Booking column values. Raises SchemaError on the first problem.
    """
    if not isinstance(data, dict):
        raise SchemaError("Corpo da requisição deve ser um objeto JSON.")

    room = _text(data, "room", required=True)
    if rooms and room not in rooms:
        raise SchemaError(f"Sala desconhecida: {room}.")
    room_name = _text(data, "roomName", required=False) or rooms.get(room) or room

    fields = {
        "room": room,
        "room_name": room_name,
        "tipo_reserva": parse_reservation_type(data, room, multi_venue_room),
    }
    for key, column in REQUIRED_TEXT.items():
        fields[column] = _text(data, key, required=True)
    for key, column in OPTIONAL_TEXT.items():
        fields[column] = _text(data, key, required=False)

    email = (data.get("email") or "").strip().lower()
    if not is_email(email):
        raise SchemaError("E-mail do solicitante inválido.")
    fields["email"] = email

    headcount = data.get("numeroParticipantes")
    if isinstance(headcount, bool) or not isinstance(headcount, int) or headcount < 1:
        raise SchemaError("numeroParticipantes deve ser um inteiro positivo.")
    fields["numero_participantes"] = headcount

    participants = data.get("participantes") or []
    if not isinstance(participants, list) or not all(is_email(p) for p in participants):
        raise SchemaError("participantes deve ser uma lista de e-mails.")
    fields["participantes"] = [p.strip().lower() for p in participants]

    return fields, parse_slots(data), parse_external_participants(data)
