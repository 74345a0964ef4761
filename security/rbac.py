from functools import wraps
from flask import g, jsonify

def require_admin(fn):
    """Any logged-in admin; room-level checks happen in the services."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "admin", None) is None:
            return jsonify(error="Autenticação necessária"), 401
        return fn(*args, **kwargs)
    return wrapper

def require_super_admin(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        admin = getattr(g, "admin", None)
        if admin is None:
            return jsonify(error="Autenticação necessária"), 401
        if not admin.is_super_admin:
            return jsonify(error="Acesso restrito a super administradores"), 403
        return fn(*args, **kwargs)
    return wrapper
