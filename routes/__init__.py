from .health import health_bp
from .auth import auth_bp
from .bookings import bookings_bp
from .admin import admin_bp
from .settings import settings_bp
from .attendance import attendance_bp
from .super_admin import super_admin_bp
from .employees import employees_bp
