import pytest

from event_portal.models import Company, Registration
from event_portal.row_codec import (COMPANY_HEADERS, EVENT_HEADERS, decode_company, decode_event_metadata,
                                    decode_registration, encode_company, encode_event_metadata,
                                    encode_registration, format_flag, is_metadata_row, normalize_flags,
                                    parse_flag, registration_record)


@pytest.mark.parametrize('value, expected', [
    ('true', True), ('TRUE', True), ('مفعل', True), ('enabled', True), ('yes', True),
    ('false', False), ('FALSE', False), ('معطل', False), ('disabled', False), ('no', False),
    ('garbage', False),
])
def test_parse_flag_spellings(value, expected):
    assert parse_flag(value) is expected


def test_parse_flag_blank_uses_default():
    assert parse_flag('') is True
    assert parse_flag(None) is True
    assert parse_flag('  ', default=False) is False


def test_format_flag_is_canonical():
    assert format_flag(True) == 'true'
    assert format_flag(False) == 'false'


@pytest.mark.parametrize('spelling, enabled', [('true', True), ('مفعل', True), ('false', False), ('معطل', False)])
def test_company_round_trip_for_every_spelling(spelling, enabled):
    company = Company(id='company_1', name='Acme', username='acme', password_hash='hash',
                      image='https://img/acme.png', enabled=enabled)
    row = encode_company(company)
    assert row[COMPANY_HEADERS.index('Enabled')] == format_flag(enabled)
    row[COMPANY_HEADERS.index('Enabled')] = spelling
    assert decode_company(row) == company


def test_decode_company_short_row():
    company = decode_company(['company_1', 'Acme'])
    assert company.username == ''
    assert company.password_hash == ''
    assert company.image is None
    assert company.enabled is True


def test_decode_company_legacy_arabic_header():
    header = ['ID', 'الاسم', 'Username', 'Password', 'الصورة', 'الحالة']
    company = decode_company(['c1', 'شركة', 'user', 'hash', 'https://img', 'معطل'], header)
    assert company.name == 'شركة'
    assert company.image == 'https://img'
    assert company.enabled is False


def test_encode_company_follows_sheet_header_order():
    header = ['Name', 'ID', 'Password', 'Username']
    row = encode_company(Company('c1', 'Acme', 'acme', 'hash'), header)
    assert row == ['Acme', 'c1', 'hash', 'acme']


def test_registration_round_trip():
    registration = Registration(name='Ali', phone='01012345678', email='ali@example.com', gender='male',
                                college='Engineering', status='student', national_id='2980101',
                                registered_at='2024-01-01T10:00:00+0000')
    row = encode_registration(registration)
    assert len(row) == len(EVENT_HEADERS)
    assert row[EVENT_HEADERS.index('Image')] == ''
    assert row[EVENT_HEADERS.index('Enabled')] == ''
    assert decode_registration(row) == registration


def test_event_metadata_does_not_touch_status_column():
    row = encode_event_metadata('https://img', False)
    assert row[EVENT_HEADERS.index('Status')] == ''
    assert row[EVENT_HEADERS.index('Enabled')] == 'false'
    assert row[EVENT_HEADERS.index('Image')] == 'https://img'
    assert decode_event_metadata(row, EVENT_HEADERS) == ('https://img', False)


def test_event_metadata_defaults_without_header_or_row():
    assert decode_event_metadata(None, EVENT_HEADERS) == (None, True)
    assert decode_event_metadata(['', 'x'], None) == (None, True)


def test_is_metadata_row():
    assert is_metadata_row(encode_event_metadata(None, True), EVENT_HEADERS)
    assert not is_metadata_row(['Ali', '010'], EVENT_HEADERS)
    assert not is_metadata_row(['', ''], EVENT_HEADERS)


def test_registration_record_keys():
    row = ['Ali', '010', 'a@b.c', 'male', 'Eng', 'graduate', '298', '2024', '', '']
    record = registration_record(row, EVENT_HEADERS)
    assert record == {'name': 'Ali', 'phone': '010', 'email': 'a@b.c', 'gender': 'male', 'college': 'Eng',
                      'status': 'graduate', 'nationalid': '298', 'registrationdate': '2024'}


def test_normalize_flags_rewrites_legacy_spellings():
    rows = [list(COMPANY_HEADERS),
            ['c1', 'A', 'a', 'h', '', 'مفعل'],
            ['c2', 'B', 'b', 'h', '', 'false'],
            ['c3', 'C', 'c', 'h', '', 'معطل'],
            ['c4', 'D', 'd', 'h']]
    changed = normalize_flags(rows, rows[0], start=1)
    assert changed == [1, 3]
    assert rows[1][5] == 'true'
    assert rows[3][5] == 'false'
    assert rows[4] == ['c4', 'D', 'd', 'h']


def test_normalize_flags_without_flag_column():
    rows = [['ID', 'Name'], ['c1', 'A']]
    assert normalize_flags(rows, rows[0], start=1) == []
