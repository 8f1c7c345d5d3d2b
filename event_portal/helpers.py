# -*- coding: utf-8 -*-
import uuid
from datetime import datetime, timezone

from werkzeug.security import check_password_hash, generate_password_hash

from event_portal.config import DATETIME_SHEET_FORMAT

UTC = timezone.utc


def get_current_utc_time(): return datetime.now(UTC)


def sheet_timestamp(): return get_current_utc_time().strftime(DATETIME_SHEET_FORMAT)


def generate_unique_id(): return str(uuid.uuid4().hex)[:10]


def hash_password(password): return generate_password_hash(password)


def verify_password(hashed, provided):
    if not hashed:
        return False
    try:
        return check_password_hash(hashed, provided)
    except ValueError:
        # bcrypt hashes left by the previous admin panel are not readable by werkzeug
        return False
