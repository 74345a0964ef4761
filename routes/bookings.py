from flask import Blueprint, current_app, jsonify, request

from services import bookings as booking_service

bookings_bp = Blueprint("bookings", __name__)


@bookings_bp.get("/rooms")
def list_rooms():
    rooms = current_app.config.get("ROOMS", {})
    multi_venue = current_app.config.get("MULTI_VENUE_ROOM")
    return jsonify([
        {"id": room_id, "name": name, "multiVenue": room_id == multi_venue}
        for room_id, name in rooms.items()
    ]), 200


@bookings_bp.post("/bookings")
def create_booking():
    data = request.get_json(silent=True) or {}
    booking = booking_service.create_booking(data)
    return jsonify(
        success=True,
        bookingId=booking.id,
        message="Agendamento solicitado com sucesso",
        confirmationUrl=f"/confirmar/{booking.id}",
        participants=list(booking.participantes or []),
    ), 201


@bookings_bp.get("/bookings/search")
def search_bookings():
    dates = request.args.get("dates")
    results = booking_service.search(
        room=request.args.get("room"),
        dates=[d for d in dates.split(",") if d] if dates else None,
        name=request.args.get("name"),
        status=request.args.get("status"),
        sector=request.args.get("sector"),
    )
    return jsonify(results=results), 200


@bookings_bp.get("/bookings/<int:booking_id>/public")
def public_booking(booking_id: int):
    return jsonify(booking_service.find_public(booking_id)), 200


@bookings_bp.get("/bookings/occupied-hours")
def occupied_hours():
    return jsonify(booking_service.room_availability(
        request.args.get("room"),
        request.args.get("date"),
        request.args.get("tipoReserva"),
    )), 200
