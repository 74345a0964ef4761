"""
Periodic attendance work: invite participants once a session starts, then
mark unanswered invitations as unconfirmed after the grace period.

The scheduler object owns its pause state. When the mail provider reports
a sending quota the current run stops and no run sends anything until
`paused_until` has passed.
"""
import time
from datetime import timedelta

from flask import current_app

from models import db
from models.attendance_record import PENDING, UNCONFIRMED, AttendanceRecord
from models.booking import APPROVED, Booking, BookingSession
from models.employee import Employee
from services.attendance import ensure_pending_records
from services.errors import MailRateLimitError
from services.notifications import attendance_invite
from utils.clock import at_minute, local_now


class AttendanceScheduler:
    def __init__(self, sleep=time.sleep):
        self.paused_until = None
        self._sleep = sleep

    def _now(self):
        return local_now(current_app.config.get("TIMEZONE"))

    def is_paused(self, now) -> bool:
        return self.paused_until is not None and now < self.paused_until

    def pause(self, now):
        minutes = current_app.config.get("MAIL_RATE_LIMIT_COOLDOWN_MINUTES", 60)
        self.paused_until = now + timedelta(minutes=minutes)
        current_app.logger.warning("Mail quota reached; attendance e-mails paused until %s", self.paused_until)

    @staticmethod
    def recipients(booking):
        """(email, name) pairs: requester, internal participants, external participants."""
        out = {}
        out[booking.email.lower()] = booking.nome_completo
        for email in booking.participantes or []:
            email = email.lower()
            if email not in out:
                employee = Employee.query.filter_by(email=email).first()
                out[email] = employee.full_name if employee else None
        for p in booking.external_participants:
            out.setdefault(p.email.lower(), p.full_name)
        return list(out.items())

    def dispatch_confirmations(self, now=None) -> int:
        """Returns the number of bookings whose invitations went out."""
        now = now or self._now()
        if self.is_paused(now):
            current_app.logger.info("Attendance dispatch skipped; paused until %s", self.paused_until)
            return 0
        self.paused_until = None

        today = now.date()
        delay = current_app.config.get("MAIL_SEND_DELAY_SECONDS", 0)
        today_ids = db.session.query(BookingSession.booking_id).filter(BookingSession.day == today)
        bookings = Booking.query.filter(Booking.status == APPROVED, Booking.id.in_(today_ids)).all()

        done = 0
        for booking in bookings:
            if today.isoformat() in (booking.confirmation_emails_sent or []):
                continue
            s = booking.session_on(today)
            if not (at_minute(today, s.start_minute) <= now <= at_minute(today, s.end_minute)):
                continue

            # a recipient with a record for today was already invited (or answered)
            invited = {
                r.email
                for r in AttendanceRecord.query.filter_by(booking_id=booking.id, attendance_date=today).all()
            }
            recipients = [(email, name) for email, name in self.recipients(booking) if email not in invited]
            current_app.logger.info(
                "Sending attendance e-mails for booking %s (%d recipients)", booking.id, len(recipients)
            )
            try:
                for i, (email, name) in enumerate(recipients):
                    if i and delay:
                        self._sleep(delay)
                    attendance_invite(booking, email, name, today)
                    ensure_pending_records(booking, today, [(email, name)])
                    db.session.commit()
            except MailRateLimitError:
                self.pause(now)
                return done

            booking.confirmation_emails_sent = list(booking.confirmation_emails_sent or []) + [today.isoformat()]
            db.session.commit()
            done += 1
        return done

    def reconcile_unconfirmed(self, now=None) -> int:
        """Pendente -> Não Confirmado once the session end plus grace has passed."""
        now = now or self._now()
        grace = timedelta(minutes=current_app.config.get("ATTENDANCE_GRACE_MINUTES", 60))

        pending = (
            AttendanceRecord.query
            .join(Booking, AttendanceRecord.booking_id == Booking.id)
            .filter(AttendanceRecord.status == PENDING, Booking.status == APPROVED)
            .all()
        )
        changed = 0
        for record in pending:
            s = record.booking.session_on(record.attendance_date)
            if s is None:
                continue
            if now > at_minute(record.attendance_date, s.end_minute) + grace:
                record.status = UNCONFIRMED
                changed += 1
        if changed:
            db.session.commit()
            current_app.logger.info("Marked %d attendance record(s) as unconfirmed", changed)
        return changed
