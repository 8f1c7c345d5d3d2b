# -*- coding: utf-8 -*-
"""Companies live one per row in the ``companies`` worksheet.

Each company also owns a worksheet named after it, which holds its events
(see ``event_portal.events``). Deleting a company only removes its row; the
company worksheet and every registration in it are kept.
"""

import logging

from event_portal.errors import Conflict, Forbidden, NotFound, NotValid, Unauthorized
from event_portal.helpers import generate_unique_id, hash_password, verify_password
from event_portal.models import Company
from event_portal.row_codec import (COMPANY_HEADERS, ENABLED_ALIASES, IMAGE_ALIASES, column_index,
                                    decode_company, encode_company, normalize_flags)
from event_portal.table_scanner import has_content

logger = logging.getLogger(__name__)


class CompanyService:

    def __init__(self, store, image_host, sheet_name='companies'):
        self.store = store
        self.image_host = image_host
        self.sheet_name = sheet_name

    def _load(self):
        try:
            rows = self.store.get_rows(self.sheet_name)
        except NotFound:
            return list(COMPANY_HEADERS), []
        if not rows:
            return list(COMPANY_HEADERS), []
        return rows[0], rows[1:]

    def _records(self):
        """Header plus ``(sheet_row_index, Company)`` for every non-blank row."""
        header, rows = self._load()
        return header, [(i + 1, decode_company(row, header)) for i, row in enumerate(rows) if has_content(row)]

    def _find(self, predicate, label):
        header, records = self._records()
        for index, company in records:
            if predicate(company):
                return header, index, company
        raise NotFound(f"Company {label} not found.")

    def _ensure_columns(self, header):
        header = list(header)
        missing = [title for aliases, title in ((IMAGE_ALIASES, 'Image'), (ENABLED_ALIASES, 'Enabled'))
                   if column_index(header, aliases) == -1]
        if missing:
            header += missing
            self.store.update_row(self.sheet_name, 0, header)
            logger.info(f"Added columns {missing} to '{self.sheet_name}'.")
        return header

    def list(self):
        return [company for _, company in self._records()[1]]

    def get_by_id(self, company_id):
        return self._find(lambda c: c.id == company_id, f"'{company_id}'")[2]

    def get_by_name(self, name):
        name = (name or '').strip()
        return self._find(lambda c: c.name == name, f"'{name}'")[2]

    def create(self, name, username, password, image=None):
        name, username = (name or '').strip(), (username or '').strip()
        if not all([name, username, password]):
            raise NotValid("Name, username, and password are required.")
        if name == self.sheet_name:
            raise NotValid(f"'{name}' is a reserved name.")

        self.store.create_sheet(self.sheet_name, COMPANY_HEADERS)
        header, records = self._records()
        if any(c.username == username for _, c in records):
            raise Conflict("Username already exists.")
        # worksheets of deleted companies still hold their events
        if any(c.name == name for _, c in records) or self.store.has_sheet(name):
            raise Conflict("Company name already exists.")

        company_id = f"company_{generate_unique_id()}"
        image_url = self.image_host.resolve(image, company_id, 'companies')
        company = Company(id=company_id, name=name, username=username,
                          password_hash=hash_password(password), image=image_url, enabled=True)
        header = self._ensure_columns(header)
        self.store.append_rows(self.sheet_name, [encode_company(company, header)])
        self.store.create_sheet(name)
        logger.info(f"Company '{name}' created (ID: {company_id}).")
        return company

    def update(self, company_id, name=None, username=None, password=None, image=None, enabled=None):
        """Partial update; only the supplied fields change."""
        header, index, company = self._find(lambda c: c.id == company_id, f"'{company_id}'")
        others = [c for _, c in self._records()[1] if c.id != company_id]
        old_name = company.name

        name = (name or '').strip()
        if name and name != company.name:
            if name == self.sheet_name or any(c.name == name for c in others) or self.store.has_sheet(name):
                raise Conflict("Company name already exists.")
            company.name = name
        username = (username or '').strip()
        if username and username != company.username:
            if any(c.username == username for c in others):
                raise Conflict("Username already exists.")
            company.username = username
        if password:
            company.password_hash = hash_password(password)
        if image:
            company.image = self.image_host.resolve(image, company.id, 'companies')
        if enabled is not None:
            company.enabled = bool(enabled)

        header = self._ensure_columns(header)
        self.store.update_row(self.sheet_name, index, encode_company(company, header))
        if company.name != old_name and self.store.has_sheet(old_name):
            self.store.rename_sheet(old_name, company.name)
        logger.info(f"Company '{company.name}' (ID: {company_id}) updated.")
        return company

    def set_enabled(self, company_id, enabled):
        return self.update(company_id, enabled=enabled)

    def delete(self, company_id):
        _, index, company = self._find(lambda c: c.id == company_id, f"'{company_id}'")
        self.store.delete_row(self.sheet_name, index)
        logger.info(f"Company '{company.name}' deleted; its sheet and event data are kept.")
        return company

    def authenticate(self, username, password):
        username = (username or '').strip()
        records = self._records()[1]
        company = next((c for _, c in records if c.username == username), None)
        if company is None or not verify_password(company.password_hash, password or ''):
            raise Unauthorized("Invalid username or password.")
        if not company.enabled:
            raise Forbidden("This account has been disabled.")
        return company

    def normalize_flags(self):
        """Rewrite legacy enabled spellings in the companies sheet; returns the count."""
        header, rows = self._load()
        rows = [header] + rows
        changed = normalize_flags(rows, header, start=1)
        for i in changed:
            self.store.update_row(self.sheet_name, i, rows[i])
        return len(changed)
