# -*- coding: utf-8 -*-
"""Registrations as CSV, Excel or PDF downloads."""

import logging
from io import BytesIO

import pandas as pd
from fpdf import FPDF

from event_portal.errors import NotValid

logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = ['id', 'name', 'phone', 'email', 'gender', 'college', 'status', 'nationalid', 'registrationdate']

EXPORT_FORMATS = {
    'csv': 'text/csv',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'pdf': 'application/pdf',
}


def registrations_frame(records):
    if not records:
        return pd.DataFrame(columns=DEFAULT_COLUMNS)
    df = pd.DataFrame(records)
    if 'id' in df.columns:
        df = df[['id'] + [c for c in df.columns if c != 'id']]
    return df


def to_csv(df):
    # BOM so Excel opens Arabic names correctly
    return df.to_csv(index=False).encode('utf-8-sig')


def to_excel(df, sheet_name='Registrations'):
    output = BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return output.getvalue()


def _latin1(text):
    # core PDF fonts only cover latin-1
    return str(text).encode('latin-1', 'replace').decode('latin-1')


def to_pdf(df, title='Registrations'):
    pdf = FPDF(orientation='L', unit='mm', format='A4')
    pdf.set_auto_page_break(auto=True, margin=10)
    pdf.add_page()
    pdf.set_font('Helvetica', 'B', 12)
    pdf.cell(0, 10, _latin1(title), border=0, align='C')
    pdf.ln(12)
    columns = list(df.columns)
    if not columns:
        return bytes(pdf.output())
    width = (pdf.w - pdf.l_margin - pdf.r_margin) / len(columns)
    pdf.set_font('Helvetica', 'B', 8)
    for column in columns:
        pdf.cell(width, 7, _latin1(column), border=1)
    pdf.ln(7)
    pdf.set_font('Helvetica', '', 7)
    for row in df.itertuples(index=False):
        for value in row:
            pdf.cell(width, 6, _latin1('' if pd.isna(value) else value)[:40], border=1)
        pdf.ln(6)
    return bytes(pdf.output())


def render(records, fmt, title='Registrations'):
    """Return ``(content, mimetype)`` for ``fmt`` in ``EXPORT_FORMATS``."""
    fmt = (fmt or 'csv').lower()
    if fmt not in EXPORT_FORMATS:
        raise NotValid(f"Unsupported export format '{fmt}'. Use csv, xlsx or pdf.")
    df = registrations_frame(records)
    if fmt == 'csv':
        content = to_csv(df)
    elif fmt == 'xlsx':
        content = to_excel(df)
    else:
        content = to_pdf(df, title)
    logger.info(f"Exported {len(df)} registrations as {fmt}.")
    return content, EXPORT_FORMATS[fmt]
