from io import BytesIO

import pandas as pd
import pytest

from event_portal.errors import NotValid
from event_portal.exports import DEFAULT_COLUMNS, registrations_frame, render

RECORDS = [
    {'name': 'Ali', 'phone': '01012345678', 'email': 'ali@example.com', 'nationalid': '298', 'id': 1},
    {'name': 'منى', 'phone': '01112345678', 'email': 'mona@example.com', 'nationalid': '299', 'id': 2},
]


def test_frame_puts_id_first():
    df = registrations_frame(RECORDS)
    assert list(df.columns)[0] == 'id'
    assert len(df) == 2


def test_empty_frame_has_default_columns():
    assert list(registrations_frame([]).columns) == DEFAULT_COLUMNS


def test_csv_export():
    content, mimetype = render(RECORDS, 'csv')
    assert mimetype == 'text/csv'
    text = content.decode('utf-8-sig')
    assert text.splitlines()[0] == 'id,name,phone,email,nationalid'
    assert 'منى' in text


def test_xlsx_export_reads_back():
    content, mimetype = render(RECORDS, 'xlsx')
    assert mimetype.endswith('spreadsheetml.sheet')
    df = pd.read_excel(BytesIO(content), dtype=str)
    assert list(df['email']) == ['ali@example.com', 'mona@example.com']


def test_pdf_export_with_non_latin_text():
    content, mimetype = render(RECORDS, 'PDF', title='Spring Fair registrations')
    assert mimetype == 'application/pdf'
    assert content.startswith(b'%PDF')


def test_pdf_export_without_rows():
    content, _ = render([], 'pdf')
    assert content.startswith(b'%PDF')


def test_unknown_format():
    with pytest.raises(NotValid):
        render(RECORDS, 'docx')
