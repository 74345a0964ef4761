from flask import Blueprint, g, jsonify, request

from security.rbac import require_admin
from services import room_settings

settings_bp = Blueprint("settings", __name__, url_prefix="/admin")


@settings_bp.post("/blocks")
@require_admin
def create_block():
    data = request.get_json(silent=True) or {}
    block = room_settings.create_block(g.admin, data)
    return jsonify(success=True, message="Bloqueio criado com sucesso", block=block.to_dict()), 201


@settings_bp.get("/blocks")
@require_admin
def list_blocks():
    room = request.args.get("room")
    if not g.admin.is_super_admin:
        room = g.admin.room_access
    return jsonify(blocks=[b.to_dict() for b in room_settings.list_blocks(room)]), 200


@settings_bp.delete("/blocks/<int:block_id>")
@require_admin
def delete_block(block_id: int):
    room_settings.delete_block(g.admin, block_id)
    return jsonify(success=True, message="Bloqueio removido com sucesso"), 200


@settings_bp.get("/settings/computers")
@require_admin
def get_computers():
    return jsonify(room_settings.get_computers(request.args.get("room"))), 200


@settings_bp.put("/settings/computers")
@require_admin
def set_computers():
    data = request.get_json(silent=True) or {}
    result = room_settings.set_computers(g.admin, data.get("availableComputers"), data.get("room"))
    return jsonify(success=True, **result), 200
