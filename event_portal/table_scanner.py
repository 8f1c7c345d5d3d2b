# -*- coding: utf-8 -*-
"""Recover the event tables stored one after another in a company sheet.

A company sheet looks like this (blank separator rows are optional)::

    Spring Fair                                   <- name row
    Name | Phone | Email | ... | Image | Enabled  <- header row
         |       |       | ... | https://..| true <- metadata row
    Ali  | 010.. | a@b.c | ... |       |          <- registrations
                                                  <- separator
    Career Day                                    <- next name row
    ...

Regions are recomputed from the rows on every call and never cached.
"""

import logging

from event_portal.models import TableRegion
from event_portal.row_codec import is_metadata_row

logger = logging.getLogger(__name__)

# Rows like "Registrations" were section labels in an older sheet layout
RESERVED_PREFIX = 'Registration'


def has_content(row):
    return any(str(c).strip() for c in row or [])


def is_name_row(row):
    """A lone non-empty first cell starts a new table."""
    if not row:
        return False
    first = str(row[0]).strip()
    if not first or first.startswith(RESERVED_PREFIX):
        return False
    return not has_content(row[1:])


def _close(region, rows):
    if region.header_row is not None and region.data_row_start is not None:
        if is_metadata_row(rows[region.data_row_start], rows[region.header_row]):
            region.metadata_row = region.data_row_start
    return region


def scan_tables(rows):
    """Ordered list of ``TableRegion`` for every name row in ``rows``."""
    tables = []
    current = None
    for i, row in enumerate(rows):
        if is_name_row(row):
            if current is not None:
                tables.append(_close(current, rows))
            current = TableRegion(name=str(row[0]).strip(), name_row=i)
        elif current is not None and has_content(row):
            if current.header_row is None:
                current.header_row = i
                continue
            if current.data_row_start is None:
                current.data_row_start = i
            current.data_row_end = i
    if current is not None:
        tables.append(_close(current, rows))
    return tables


def find_table(rows, name):
    name = str(name).strip()
    matches = [t for t in scan_tables(rows) if t.name == name]
    if len(matches) > 1:
        logger.warning(f"Sheet holds {len(matches)} tables named '{name}'; using the first one.")
    return matches[0] if matches else None
