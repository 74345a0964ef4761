"""
Serialises booking writes per room.

The availability check and the insert that follows must not interleave with
another request for the same room. Inside one process a lock keyed by room
id does that; across processes the room's `room_settings` row is selected
FOR UPDATE (a no-op on SQLite, a row lock on PostgreSQL) and held until the
caller commits or rolls back.
"""
import threading
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError

from models import db
from models.room_setting import RoomSetting

_locks = {}
_locks_guard = threading.Lock()


def _local_lock(room):
    with _locks_guard:
        return _locks.setdefault(room, threading.Lock())


def ensure_room_setting(room):
    if RoomSetting.query.filter_by(room=room).first() is None:
        db.session.add(RoomSetting(room=room))
        try:
            db.session.commit()
        except IntegrityError:
            # created concurrently
            db.session.rollback()


@contextmanager
def room_guard(room):
    """Yield the locked RoomSetting row; the body must commit before leaving."""
    with _local_lock(room):
        ensure_room_setting(room)
        try:
            setting = (
                RoomSetting.query
                .filter_by(room=room)
                .with_for_update()
                .one()
            )
            yield setting
        except Exception:
            db.session.rollback()
            raise
        finally:
            # releases the row lock if the body returned without committing
            if db.session().in_transaction():
                db.session.rollback()
