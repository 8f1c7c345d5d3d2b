# -*- coding: utf-8 -*-
import base64
import logging
import re
from io import BytesIO

import qrcode

from event_portal.errors import Conflict, Forbidden, NotValid
from event_portal.events import event_from_region
from event_portal.helpers import sheet_timestamp
from event_portal.models import Gender, Registration, StudyStatus
from event_portal.row_codec import decode_registration, encode_registration
from event_portal.table_scanner import has_content

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
# Egyptian mobile numbers: 010, 011, 012 or 015 followed by 8 digits
PHONE_RE = re.compile(r'^01[0125][0-9]{8}$')

REQUIRED_FIELDS = ['name', 'phone', 'email', 'gender', 'college', 'status', 'nationalId']


def validate_registration(data):
    """Build a ``Registration`` from submitted form data or raise ``NotValid``."""
    values = {field: str(data.get(field) or '').strip() for field in REQUIRED_FIELDS}
    missing = [field for field, value in values.items() if not value]
    if missing:
        raise NotValid(f"All fields are required. Missing: {', '.join(missing)}")
    email = values['email'].lower()
    if not EMAIL_RE.match(email):
        raise NotValid("Invalid email format.")
    if not PHONE_RE.match(values['phone']):
        raise NotValid("Invalid phone number format.")
    gender, status = values['gender'].lower(), values['status'].lower()
    if gender not in [g.value for g in Gender]:
        raise NotValid("Gender must be male or female.")
    if status not in [s.value for s in StudyStatus]:
        raise NotValid("Status must be student or graduate.")
    return Registration(name=values['name'], phone=values['phone'], email=email, gender=gender,
                        college=values['college'], status=status, national_id=values['nationalId'])


def find_duplicate(registration, existing):
    """Which identifying field of ``registration`` is already taken, else None."""
    for other in existing:
        if other.email and other.email.lower() == registration.email.lower():
            return 'email'
        if other.phone and other.phone == registration.phone:
            return 'phone'
        if other.national_id and other.national_id == registration.national_id:
            return 'national ID'
    return None


def make_qr_data_url(company_name, event_name, registration):
    qr_data = (f"Event:{event_name.replace(',', ';')},Company:{company_name.replace(',', ';')},"
               f"Name:{registration.name[:20].replace(',', ';')},Phone:{registration.phone}")
    img_qr_obj = qrcode.make(qr_data)
    qr_image_io = BytesIO()
    img_qr_obj.save(qr_image_io, format="PNG")
    qr_image_base64 = base64.b64encode(qr_image_io.getvalue()).decode('utf-8')
    return f"data:image/png;base64,{qr_image_base64}"


class RegistrationService:

    def __init__(self, store, companies, events):
        self.store = store
        self.companies = companies
        self.events = events

    def register(self, company_name, event_name, data):
        if not all(isinstance(v, str) for v in (company_name or '', event_name or '')):
            raise NotValid("companyName and eventName must be strings.")
        company_name, event_name = (company_name or '').strip(), (event_name or '').strip()
        company = self.companies.get_by_name(company_name)
        if not company.enabled:
            raise Forbidden("This company is currently not accepting registrations.")
        rows, region = self.events.locate(company_name, event_name)
        if not event_from_region(company_name, rows, region).enabled:
            raise Forbidden("This event is currently not accepting registrations.")

        registration = validate_registration(data)
        if region.header_row is None:
            raise NotValid(f"Event '{event_name}' has no header row.")
        header = rows[region.header_row]
        existing = [decode_registration(rows[i], header) for i in region.registration_rows if has_content(rows[i])]
        duplicate = find_duplicate(registration, existing)
        if duplicate:
            logger.warning(f"Duplicate {duplicate} for event '{event_name}' of '{company_name}'.")
            raise Conflict(f"You are already registered for this event (same {duplicate}).")

        registration.registered_at = sheet_timestamp()
        self.store.append_rows(company_name, [encode_registration(registration, header)], table=event_name)
        logger.info(f"Registration appended to event '{event_name}' of '{company_name}'.")
        return registration
