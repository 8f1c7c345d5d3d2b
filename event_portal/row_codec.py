# -*- coding: utf-8 -*-
"""Conversion between domain records and raw sheet rows.

Rows are plain lists of strings as returned by ``Worksheet.get_all_values()``.
Columns are located through the header row, so sheets written by older
versions of the portal (Arabic headers, reordered columns, no ``Enabled``
column) decode the same way as new ones. Decoding never raises: a short row
reads its missing trailing cells as ``''``.
"""

from event_portal.models import Company, Registration

TRUE_TOKEN = 'true'
FALSE_TOKEN = 'false'

# Legacy spellings still present in sheets written by the Arabic admin panel
TRUE_SPELLINGS = {'true', 'مفعل', 'enabled', 'yes'}
FALSE_SPELLINGS = {'false', 'معطل', 'disabled', 'no'}

NAME_ALIASES = ('Name', 'name', 'الاسم')
ID_ALIASES = ('ID', 'Id', 'id')
USERNAME_ALIASES = ('Username', 'username')
PASSWORD_ALIASES = ('Password', 'password', 'PasswordHash')
IMAGE_ALIASES = ('Image', 'image', 'الصورة')
ENABLED_ALIASES = ('Enabled', 'enabled', 'الحالة', 'Status')
# Event tables use "Status" for student/graduate, never for the flag
EVENT_ENABLED_ALIASES = ENABLED_ALIASES[:3]
STATUS_ALIASES = ('Status', 'status')
PHONE_ALIASES = ('Phone', 'phone', 'Mobile')
EMAIL_ALIASES = ('Email', 'email')
GENDER_ALIASES = ('Gender', 'gender')
COLLEGE_ALIASES = ('College', 'college')
NATIONAL_ID_ALIASES = ('National ID', 'NationalID', 'nationalId')
TIMESTAMP_ALIASES = ('Registration Date', 'Timestamp', 'timestamp')

COMPANY_HEADERS = ['ID', 'Name', 'Username', 'Password', 'Image', 'Enabled']
EVENT_HEADERS = ['Name', 'Phone', 'Email', 'Gender', 'College', 'Status',
                 'National ID', 'Registration Date', 'Image', 'Enabled']


def parse_flag(value, default=True):
    """Read a stored enabled flag; blank cells fall back to ``default``."""
    text = str(value if value is not None else '').strip()
    if not text:
        return default
    return text.lower() in TRUE_SPELLINGS


def format_flag(enabled):
    return TRUE_TOKEN if enabled else FALSE_TOKEN


def column_index(header, aliases):
    """Position of the first header cell matching one of ``aliases``, else -1."""
    cleaned = [str(cell).strip() for cell in header or []]
    for alias in aliases:
        if alias in cleaned:
            return cleaned.index(alias)
    return -1


def cell(row, index):
    if index < 0 or row is None or index >= len(row):
        return ''
    value = row[index]
    return '' if value is None else str(value)


def pad(row, length):
    padded = list(row or [])
    while len(padded) < length:
        padded.append('')
    return padded


def _place(header, values):
    """Lay ``values`` (alias tuple -> text) out along ``header``."""
    row = [''] * len(header)
    for aliases, value in values:
        idx = column_index(header, aliases)
        if idx != -1:
            row[idx] = value
    return row


# --- Company ---

def encode_company(company, header=None):
    header = header or COMPANY_HEADERS
    return _place(header, [
        (ID_ALIASES, company.id),
        (NAME_ALIASES, company.name),
        (USERNAME_ALIASES, company.username),
        (PASSWORD_ALIASES, company.password_hash),
        (IMAGE_ALIASES, company.image or ''),
        (ENABLED_ALIASES, format_flag(company.enabled)),
    ])


def decode_company(row, header=None):
    header = header or COMPANY_HEADERS
    get = lambda aliases: cell(row, column_index(header, aliases)).strip()
    return Company(
        id=get(ID_ALIASES),
        name=get(NAME_ALIASES),
        username=get(USERNAME_ALIASES),
        password_hash=get(PASSWORD_ALIASES),
        image=get(IMAGE_ALIASES) or None,
        enabled=parse_flag(get(ENABLED_ALIASES)),
    )


# --- Registration ---

def encode_registration(registration, header=None):
    header = header or EVENT_HEADERS
    return _place(header, [
        (NAME_ALIASES, registration.name),
        (PHONE_ALIASES, registration.phone),
        (EMAIL_ALIASES, registration.email),
        (GENDER_ALIASES, registration.gender),
        (COLLEGE_ALIASES, registration.college),
        (STATUS_ALIASES, registration.status),
        (NATIONAL_ID_ALIASES, registration.national_id),
        (TIMESTAMP_ALIASES, registration.registered_at),
    ])


def decode_registration(row, header=None):
    header = header or EVENT_HEADERS
    get = lambda aliases: cell(row, column_index(header, aliases)).strip()
    return Registration(
        name=get(NAME_ALIASES),
        phone=get(PHONE_ALIASES),
        email=get(EMAIL_ALIASES),
        gender=get(GENDER_ALIASES),
        college=get(COLLEGE_ALIASES),
        status=get(STATUS_ALIASES),
        national_id=get(NATIONAL_ID_ALIASES),
        registered_at=get(TIMESTAMP_ALIASES),
    )


def registration_record(row, header):
    """Header-keyed dict of a registration row (``National ID`` -> ``nationalid``)."""
    record = {}
    for i, title in enumerate(header or []):
        title = str(title).strip()
        if not title or title in IMAGE_ALIASES or title in EVENT_ENABLED_ALIASES:
            continue
        record[''.join(title.lower().split())] = cell(row, i)
    return record


# --- Event metadata row (image + enabled flag under the header row) ---

def is_metadata_row(row, header):
    """The metadata row is the data row that carries no registrant name."""
    name_idx = column_index(header, NAME_ALIASES)
    if name_idx == -1:
        name_idx = 0
    return any(str(c).strip() for c in row or []) and not cell(row, name_idx).strip()


def encode_event_metadata(image, enabled, header=None):
    header = header or EVENT_HEADERS
    return _place(header, [
        (IMAGE_ALIASES, image or ''),
        (EVENT_ENABLED_ALIASES, format_flag(enabled)),
    ])


def decode_event_metadata(row, header):
    """Return ``(image, enabled)``; no header or no row means defaults."""
    if not header or row is None:
        return None, True
    image = cell(row, column_index(header, IMAGE_ALIASES)).strip() or None
    enabled = parse_flag(cell(row, column_index(header, EVENT_ENABLED_ALIASES)))
    return image, enabled


def normalize_flags(rows, header, start=0, aliases=ENABLED_ALIASES):
    """Rewrite legacy flag spellings in place; returns indexes of changed rows."""
    idx = column_index(header, aliases)
    changed = []
    if idx == -1:
        return changed
    for i in range(start, len(rows)):
        value = cell(rows[i], idx).strip()
        if not value or value in (TRUE_TOKEN, FALSE_TOKEN):
            continue
        rows[i] = pad(rows[i], idx + 1)
        rows[i][idx] = format_flag(parse_flag(value))
        changed.append(i)
    return changed
