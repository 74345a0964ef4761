from .db import db
from .admin_user import AdminUser
from .audit_log import AuditLog
from .session import AdminSession
from .booking import Booking, BookingSession
from .external_participant import ExternalParticipant
from .attendance_record import AttendanceRecord
from .employee import Employee
from .room_block import RoomBlock
from .room_setting import RoomSetting
