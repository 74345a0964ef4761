import logging
import time

from flask import Flask, request, g, jsonify
from config import Config
from routes import (
    health_bp, auth_bp, bookings_bp, employees_bp, admin_bp, settings_bp, attendance_bp, super_admin_bp,
)

from models import db
from flask_migrate import Migrate
from services.errors import BookingServiceError
from services.scheduler import AttendanceScheduler
from utils.auth_context import load_current_admin
from security.csrf import require_csrf


# Public endpoints and the login bootstrap never need the CSRF header
CSRF_EXEMPT_PATHS = {
    "/auth/login",
    "/health",
    "/bookings",
    "/attendance/verify-email",
    "/attendance/confirm",
}


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.debug and not app.testing:
        app.logger.setLevel(logging.INFO)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(bookings_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(attendance_bp)
    app.register_blueprint(super_admin_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    # One scheduler per app so its pause survives between runs
    app.extensions["attendance_scheduler"] = AttendanceScheduler()

    @app.before_request
    def _load_admin():
        load_current_admin()

    @app.before_request
    def _csrf_protect():
        # Only protect state-changing requests
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if request.path in CSRF_EXEMPT_PATHS:
                return None

            # Only enforce CSRF if an admin is already authenticated (cookie session)
            if getattr(g, "admin", None) is not None:
                failure = require_csrf()
                if failure:
                    return failure

    @app.errorhandler(BookingServiceError)
    def _service_error(exc):
        return jsonify(error=exc.message), exc.status_code

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app

#-------------------------
import click
from models.admin_user import AdminUser
from security.password import hash_password
from services import room_settings


def register_cli(app):
    @app.cli.command("create-admin")
    @click.argument("email")
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    @click.option("--room", default=None, help="Room id this admin manages.")
    @click.option("--super-admin", is_flag=True, help="Grant access to every room.")
    def create_admin(email, password, room, super_admin):
        """Create an administrator account (bootstrap)."""
        email = email.strip().lower()
        if AdminUser.query.filter_by(email=email).first():
            click.echo("Admin already exists")
            return
        if not super_admin and room not in app.config.get("ROOMS", {}):
            raise click.BadParameter("room admins need a known --room", param_hint="--room")

        admin = AdminUser(
            email=email,
            password_hash=hash_password(password),
            room_access=None if super_admin else room,
            is_super_admin=super_admin,
        )
        db.session.add(admin)
        db.session.commit()
        click.echo(f"{admin.email} created")

    @app.cli.command("set-computers")
    @click.argument("count", type=int)
    @click.option("--room", default=None, help="Defaults to the multi-venue room.")
    def set_computers(count, room):
        """Store how many computers a room offers."""
        result = room_settings.set_computers(None, count, room)
        click.echo(f"{result['room']}: {result['availableComputers']} computers")

    @app.cli.command("attendance-dispatch")
    def attendance_dispatch():
        """Send attendance e-mails for sessions in progress."""
        sent = app.extensions["attendance_scheduler"].dispatch_confirmations()
        click.echo(f"{sent} booking(s) notified")

    @app.cli.command("attendance-reconcile")
    def attendance_reconcile():
        """Mark unanswered invitations as unconfirmed."""
        changed = app.extensions["attendance_scheduler"].reconcile_unconfirmed()
        click.echo(f"{changed} record(s) updated")

    @app.cli.command("attendance-worker")
    @click.option("--interval", default=60, show_default=True, help="Seconds between runs.")
    def attendance_worker(interval):
        """Run dispatch and reconcile forever."""
        scheduler = app.extensions["attendance_scheduler"]
        app.logger.info("Attendance worker started (every %ss)", interval)
        while True:
            try:
                scheduler.dispatch_confirmations()
                scheduler.reconcile_unconfirmed()
            except Exception:
                db.session.rollback()
                app.logger.exception("Attendance worker run failed")
            db.session.remove()
            time.sleep(interval)

#-------------------------


if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
