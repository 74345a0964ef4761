from flask import Blueprint, jsonify, request

from models import db
from models.employee import Employee

employees_bp = Blueprint("employees", __name__)


# Read-only staff directory for the booking form's participant picker
@employees_bp.get("/employees")
def list_employees():
    q = Employee.query
    search = request.args.get("q")
    if search:
        like = f"%{search}%"
        q = q.filter(db.or_(Employee.full_name.ilike(like), Employee.email.ilike(like)))
    return jsonify([e.to_dict() for e in q.order_by(Employee.full_name).all()]), 200
