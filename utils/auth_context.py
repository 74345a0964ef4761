from flask import g
from models import db
from models.admin_user import AdminUser
from security.session import get_session_from_request

def load_current_admin():
    sess = get_session_from_request()
    if not sess:
        g.admin = None
        g.session = None
        return
    g.session = sess
    g.admin = db.session.get(AdminUser, sess.admin_id)
