# -*- coding: utf-8 -*-
"""Spreadsheet-as-database adapter.

``SheetStore`` implements the row and table operations the services use on
top of five primitives (read all values, write a row, insert rows, delete a
row range, manage worksheets). ``GSpreadSheetStore`` maps the primitives to a
Google spreadsheet through gspread; ``MemorySheetStore`` keeps the same
layout in process for local development and tests.

Row indexes are 0-based. When a table name is given, index 0 is that table's
header row. Nothing here is transactional: every call reads the sheet, then
writes, and another request may have changed the sheet in between.
"""

import copy
import functools
import json
import logging
import os

import gspread
from google.oauth2.service_account import Credentials

from event_portal.errors import Conflict, NotFound, NotValid, UpstreamFailure
from event_portal.row_codec import pad
from event_portal.table_scanner import find_table, has_content

logger = logging.getLogger(__name__)


class SheetStore:
    """Common row/table logic; subclasses provide the primitives."""

    # --- primitives ---
    def has_sheet(self, sheet):
        raise NotImplementedError

    def list_sheets(self):
        raise NotImplementedError

    def create_sheet(self, sheet, headers=None):
        raise NotImplementedError

    def rename_sheet(self, sheet, new_title):
        raise NotImplementedError

    def _values(self, sheet):
        raise NotImplementedError

    def _write(self, sheet, index, row):
        raise NotImplementedError

    def _insert(self, sheet, index, rows, existing_count):
        raise NotImplementedError

    def _delete(self, sheet, start, end):
        raise NotImplementedError

    # --- row / table operations ---
    def _region(self, rows, sheet, table):
        region = find_table(rows, table)
        if region is None:
            raise NotFound(f"Event '{table}' not found in '{sheet}'.")
        return region

    def get_rows(self, sheet, table=None):
        """All rows of a sheet, or the header and data rows of one table."""
        rows = self._values(sheet)
        if table is None:
            return rows
        region = self._region(rows, sheet, table)
        if region.header_row is None:
            return []
        return rows[region.header_row:region.last_row + 1]

    def append_rows(self, sheet, rows, table=None):
        existing = self._values(sheet)
        if table is None:
            self._insert(sheet, len(existing), rows, len(existing))
            return
        region = self._region(existing, sheet, table)
        self._insert(sheet, region.last_row + 1, rows, len(existing))

    def update_row(self, sheet, row_index, new_row, table=None):
        rows = self._values(sheet)
        index = row_index
        if table is not None:
            region = self._region(rows, sheet, table)
            if region.header_row is None:
                raise NotFound(f"Event '{table}' in '{sheet}' has no header row.")
            index = region.header_row + row_index
            if index == region.last_row + 1:
                # writing just past the table grows it instead of clobbering the next one
                self._insert(sheet, index, [list(new_row)], len(rows))
                return
            if index > region.last_row:
                raise NotValid(f"Row {row_index} is outside event '{table}'.")
        if not 0 <= index < len(rows):
            raise NotValid(f"Row {row_index} is outside sheet '{sheet}'.")
        self._write(sheet, index, pad(new_row, len(rows[index])))

    def insert_row(self, sheet, row_index, new_row, table=None):
        """Insert ``new_row`` so that it ends up at ``row_index``."""
        rows = self._values(sheet)
        index = row_index
        if table is not None:
            region = self._region(rows, sheet, table)
            if region.header_row is None:
                raise NotFound(f"Event '{table}' in '{sheet}' has no header row.")
            index = region.header_row + row_index
            if not region.header_row < index <= region.last_row + 1:
                raise NotValid(f"Row {row_index} is outside event '{table}'.")
        if not 0 <= index <= len(rows):
            raise NotValid(f"Row {row_index} is outside sheet '{sheet}'.")
        self._insert(sheet, index, [list(new_row)], len(rows))

    def delete_row(self, sheet, row_index):
        rows = self._values(sheet)
        if not 0 <= row_index < len(rows):
            raise NotFound(f"Row {row_index} not found in '{sheet}'.")
        self._delete(sheet, row_index, row_index)

    def create_table(self, sheet, table, headers):
        rows = self._values(sheet)
        if find_table(rows, table) is not None:
            raise Conflict(f"Event '{table}' already exists.")
        new_rows = [[''] * len(headers)] if any(has_content(r) for r in rows) else []
        new_rows += [[table] + [''] * (len(headers) - 1), list(headers)]
        self._insert(sheet, len(rows), new_rows, len(rows))

    def delete_table(self, sheet, table):
        rows = self._values(sheet)
        region = self._region(rows, sheet, table)
        start = region.name_row
        if start > 0 and not has_content(rows[start - 1]):
            start -= 1
        self._delete(sheet, start, region.last_row)


class MemorySheetStore(SheetStore):
    """In-process store: sheet title -> list of rows."""

    def __init__(self, sheets=None):
        self.sheets = {title: [list(r) for r in rows] for title, rows in (sheets or {}).items()}

    def has_sheet(self, sheet):
        return sheet in self.sheets

    def list_sheets(self):
        return list(self.sheets)

    def create_sheet(self, sheet, headers=None):
        if sheet not in self.sheets:
            self.sheets[sheet] = [list(headers)] if headers else []
        return sheet

    def rename_sheet(self, sheet, new_title):
        if sheet not in self.sheets:
            raise NotFound(f"Sheet '{sheet}' not found.")
        if new_title in self.sheets:
            raise Conflict(f"Sheet '{new_title}' already exists.")
        self.sheets[new_title] = self.sheets.pop(sheet)

    def _values(self, sheet):
        if sheet not in self.sheets:
            raise NotFound(f"Sheet '{sheet}' not found.")
        return copy.deepcopy(self.sheets[sheet])

    def _write(self, sheet, index, row):
        self.sheets[sheet][index] = list(row)

    def _insert(self, sheet, index, rows, existing_count):
        self.sheets[sheet][index:index] = [list(r) for r in rows]

    def _delete(self, sheet, start, end):
        del self.sheets[sheet][start:end + 1]


def get_google_creds_dict_from_env():
    expected_keys_map = {"type": "GOOGLE_TYPE", "project_id": "GOOGLE_PROJECT_ID", "private_key_id": "GOOGLE_PRIVATE_KEY_ID",
                         "private_key": "GOOGLE_PRIVATE_KEY", "client_email": "GOOGLE_CLIENT_EMAIL", "client_id": "GOOGLE_CLIENT_ID",
                         "auth_uri": "GOOGLE_AUTH_URI", "token_uri": "GOOGLE_TOKEN_URI",
                         "auth_provider_x509_cert_url": "GOOGLE_AUTH_PROVIDER_X509_CERT_URL", "client_x509_cert_url": "GOOGLE_CLIENT_X509_CERT_URL"}
    missing_vars = [env_var for env_var in expected_keys_map.values() if not os.environ.get(env_var)]
    if missing_vars:
        raise ValueError(f"Missing Google credentials environment variables: {', '.join(missing_vars)}")
    creds_dict = {key: os.environ.get(env_var_name) for key, env_var_name in expected_keys_map.items()}
    creds_dict['private_key'] = creds_dict['private_key'].replace('\\n', '\n')
    return creds_dict


def share_spreadsheet_with_editor(spreadsheet, email_address):
    if not email_address or "@" not in email_address:
        return False
    try:
        for p in spreadsheet.list_permissions():
            if p.get('type') == 'user' and p.get('emailAddress') == email_address and p.get('role') in ['owner', 'writer']:
                return True
        spreadsheet.share(email_address, perm_type='user', role='writer', notify=False)
        logger.info(f"Sharing ensured for '{spreadsheet.title}' with {email_address}.")
        return True
    except gspread.exceptions.APIError as share_e:
        logger.warning(f"Share error for '{spreadsheet.title}' with {email_address}: {share_e}")
        return False


def wrap_api_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except gspread.exceptions.WorksheetNotFound as e:
            raise NotFound(f"Sheet '{e}' not found.") from e
        except gspread.exceptions.APIError as e:
            logger.exception(f"Google Sheets API error in {func.__name__}: {e}")
            raise UpstreamFailure() from e
    return wrapper


class GSpreadSheetStore(SheetStore):
    """Every sheet is a worksheet (tab) of one master spreadsheet."""

    def __init__(self, scopes, sheet_id=None, sheet_name=None, share_email=None, credentials_json=None):
        self.scopes = scopes
        self.sheet_id = sheet_id
        self.sheet_name = sheet_name
        self.share_email = share_email
        self.credentials_json = credentials_json
        self._client = None
        self._spreadsheet = None

    @property
    def client(self):
        if self._client is None:
            logger.info("Initializing gspread client (one-time per worker)...")
            if self.credentials_json:
                creds_dict = json.loads(self.credentials_json)
            else:
                creds_dict = get_google_creds_dict_from_env()
            creds = Credentials.from_service_account_info(creds_dict, scopes=self.scopes)
            self._client = gspread.authorize(creds)
        return self._client

    @property
    def spreadsheet(self):
        if self._spreadsheet is not None:
            return self._spreadsheet
        client = self.client
        spreadsheet = None
        if self.sheet_id:
            try:
                spreadsheet = client.open_by_key(self.sheet_id)
            except (gspread.exceptions.SpreadsheetNotFound, gspread.exceptions.APIError) as e_id:
                logger.warning(f"Could not open master SS by ID '{self.sheet_id}': {e_id}. Will try by name.")
        if spreadsheet is None:
            try:
                spreadsheet = client.open(self.sheet_name)
            except gspread.exceptions.SpreadsheetNotFound:
                logger.info(f"Master SS '{self.sheet_name}' not found by name. Creating...")
                try:
                    spreadsheet = client.create(self.sheet_name)
                except gspread.exceptions.APIError as e_create:
                    logger.exception(f"Creating master SS failed: {e_create}")
                    raise UpstreamFailure() from e_create
                if self.share_email:
                    share_spreadsheet_with_editor(spreadsheet, self.share_email)
            except gspread.exceptions.APIError as e_name:
                logger.exception(f"Opening master SS by name '{self.sheet_name}' failed: {e_name}")
                raise UpstreamFailure() from e_name
        self._spreadsheet = spreadsheet
        return spreadsheet

    def _ws(self, sheet):
        return self.spreadsheet.worksheet(sheet)

    @wrap_api_errors
    def has_sheet(self, sheet):
        return sheet in self.list_sheets()

    @wrap_api_errors
    def list_sheets(self):
        return [ws.title for ws in self.spreadsheet.worksheets()]

    @wrap_api_errors
    def create_sheet(self, sheet, headers=None):
        headers = headers or []
        try:
            worksheet = self._ws(sheet)
        except gspread.exceptions.WorksheetNotFound:
            worksheet = self.spreadsheet.add_worksheet(title=sheet, rows=100, cols=max(len(headers), 10))
            if headers:
                worksheet.update(range_name='A1', values=[headers])
            logger.info(f"Created worksheet '{sheet}'.")
            return sheet
        first_row = worksheet.row_values(1)
        if headers and not first_row:
            worksheet.update(range_name='A1', values=[headers])
        elif headers and first_row != headers:
            logger.warning(f"Headers mismatch for '{sheet}'. Sheet: {first_row}, Expected: {headers}")
        return sheet

    @wrap_api_errors
    def rename_sheet(self, sheet, new_title):
        if new_title in self.list_sheets():
            raise Conflict(f"Sheet '{new_title}' already exists.")
        self._ws(sheet).update_title(new_title)

    @wrap_api_errors
    def _values(self, sheet):
        return self._ws(sheet).get_all_values()

    @wrap_api_errors
    def _write(self, sheet, index, row):
        self._ws(sheet).update(range_name=gspread.utils.rowcol_to_a1(index + 1, 1), values=[row])

    @wrap_api_errors
    def _insert(self, sheet, index, rows, existing_count):
        worksheet = self._ws(sheet)
        if index < existing_count:
            worksheet.insert_rows(rows, row=index + 1)
            return
        # past the last value: write into the grid, growing it first when needed
        needed = index + len(rows) - worksheet.row_count
        if needed > 0:
            worksheet.add_rows(needed)
        worksheet.update(range_name=gspread.utils.rowcol_to_a1(index + 1, 1), values=rows)

    @wrap_api_errors
    def _delete(self, sheet, start, end):
        self._ws(sheet).delete_rows(start + 1, end + 1)


def build_store(config):
    backend = config.get('SHEET_BACKEND', 'gspread')
    if backend == 'memory':
        logger.warning("Using the in-memory sheet store; data is lost on restart.")
        return MemorySheetStore()
    return GSpreadSheetStore(
        scopes=config['SCOPE_GSPREAD_CLIENT_DEFAULT'],
        sheet_id=config.get('MASTER_SHEET_ID'),
        sheet_name=config.get('MASTER_SHEET_NAME'),
        share_email=config.get('YOUR_PERSONAL_EMAIL'),
        credentials_json=config.get('GOOGLE_CREDENTIALS_JSON'),
    )
