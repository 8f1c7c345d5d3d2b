# -*- coding: utf-8 -*-
"""Events are tables inside their company's worksheet.

Image and enabled flag sit in the metadata row right under the header row;
registrations follow it. See ``event_portal.table_scanner`` for the layout.
"""

import logging

from event_portal.errors import Conflict, Forbidden, NotFound, NotValid, PortalError, Unauthorized
from event_portal.models import Event
from event_portal.row_codec import (EVENT_ENABLED_ALIASES, EVENT_HEADERS, IMAGE_ALIASES, column_index,
                                    decode_event_metadata, encode_event_metadata, format_flag,
                                    normalize_flags, pad, registration_record)
from event_portal.table_scanner import RESERVED_PREFIX, find_table, has_content, scan_tables

logger = logging.getLogger(__name__)


def authorize(actor, company_name):
    """Admins manage every company; a company only manages itself."""
    if actor is None:
        raise Unauthorized()
    if not actor.is_admin and actor.name != company_name:
        logger.warning(f"'{actor.name}' tried to manage events of '{company_name}'.")
        raise Forbidden("You can only manage your own company's events.")


def event_from_region(company_name, rows, region):
    header = rows[region.header_row] if region.header_row is not None else None
    meta = rows[region.metadata_row] if region.metadata_row is not None else None
    image, enabled = decode_event_metadata(meta, header)
    return Event(name=region.name, company=company_name, image=image, enabled=enabled,
                 registrations=region.registrations)


class EventService:

    def __init__(self, store, companies, image_host):
        self.store = store
        self.companies = companies
        self.image_host = image_host

    def _rows(self, company_name):
        try:
            return self.store.get_rows(company_name)
        except NotFound:
            raise NotFound(f"Company '{company_name}' not found.")

    def locate(self, company_name, event_name):
        """Company sheet rows plus the region of ``event_name``."""
        rows = self._rows(company_name)
        region = find_table(rows, event_name)
        if region is None:
            raise NotFound(f"Event '{event_name}' not found.")
        return rows, region

    def _list_company(self, company_name):
        rows = self._rows(company_name)
        return [event_from_region(company_name, rows, region) for region in scan_tables(rows)]

    def list(self, company_name=None):
        if company_name:
            return self._list_company(company_name)
        events = []
        for company in self.companies.list():
            try:
                events += self._list_company(company.name)
            except PortalError as e:
                logger.warning(f"Skipping events of '{company.name}': {e.message}")
        return events

    def get(self, company_name, event_name):
        rows, region = self.locate(company_name, event_name)
        return event_from_region(company_name, rows, region)

    def create(self, actor, company_name, event_name, image=None):
        authorize(actor, company_name)
        event_name = (event_name or '').strip()
        if not event_name:
            raise NotValid("Event name is required.")
        if event_name.startswith(RESERVED_PREFIX):
            raise NotValid(f"Event names cannot start with '{RESERVED_PREFIX}'.")
        rows = self._rows(company_name)
        if find_table(rows, event_name) is not None:
            raise Conflict(f"Event '{event_name}' already exists.")
        image_url = self.image_host.resolve(image, f"{company_name}_{event_name}", 'events')
        self.store.create_table(company_name, event_name, EVENT_HEADERS)
        self.store.append_rows(company_name, [encode_event_metadata(image_url, True)], table=event_name)
        logger.info(f"Event '{event_name}' created for '{company_name}' by {actor.type.value} '{actor.name}'.")
        return Event(name=event_name, company=company_name, image=image_url, enabled=True, registrations=0)

    def update(self, actor, company_name, event_name, image=None, enabled=None):
        """Patch the metadata row; legacy tables get the missing columns and row first."""
        authorize(actor, company_name)
        rows, region = self.locate(company_name, event_name)
        if region.header_row is None:
            raise NotValid(f"Event '{event_name}' has no header row.")

        header = list(rows[region.header_row])
        missing = [title for aliases, title in ((IMAGE_ALIASES, 'Image'), (EVENT_ENABLED_ALIASES, 'Enabled'))
                   if column_index(header, aliases) == -1]
        if missing:
            header += missing
            self.store.update_row(company_name, 0, header, table=event_name)
            logger.info(f"Added columns {missing} to event '{event_name}' of '{company_name}'.")

        meta = rows[region.metadata_row] if region.metadata_row is not None else None
        current_image, current_enabled = decode_event_metadata(meta, header)
        new_image = self.image_host.resolve(image, f"{company_name}_{event_name}", 'events') if image else current_image
        new_enabled = current_enabled if enabled is None else bool(enabled)

        row = pad(meta, len(header))
        row[column_index(header, IMAGE_ALIASES)] = new_image or ''
        row[column_index(header, EVENT_ENABLED_ALIASES)] = format_flag(new_enabled)
        if region.metadata_row is None:
            self.store.insert_row(company_name, 1, row, table=event_name)
        else:
            self.store.update_row(company_name, region.metadata_row - region.header_row, row, table=event_name)
        logger.info(f"Event '{event_name}' of '{company_name}' updated (enabled={new_enabled}).")
        return Event(name=region.name, company=company_name, image=new_image, enabled=new_enabled,
                     registrations=region.registrations)

    def set_enabled(self, actor, company_name, event_name, enabled):
        return self.update(actor, company_name, event_name, enabled=enabled)

    def set_image(self, actor, company_name, event_name, image):
        if not image:
            raise NotValid("Image is required.")
        return self.update(actor, company_name, event_name, image=image)

    def delete(self, actor, company_name, event_name):
        authorize(actor, company_name)
        self._rows(company_name)
        self.store.delete_table(company_name, event_name)
        logger.info(f"Event '{event_name}' of '{company_name}' deleted by {actor.type.value} '{actor.name}'.")

    def find_company_of(self, event_name):
        """Name of the first listed company that has an event called ``event_name``."""
        for company in self.companies.list():
            try:
                rows = self.store.get_rows(company.name)
            except NotFound:
                continue
            if find_table(rows, event_name) is not None:
                return company.name
        raise NotFound(f"Event '{event_name}' not found.")

    def registrations(self, actor, company_name, event_name):
        """Registration records of one event, numbered from 1 in sheet order."""
        if actor is None:
            raise Unauthorized()
        if not company_name:
            company_name = self.find_company_of(event_name) if actor.is_admin else actor.name
        authorize(actor, company_name)
        rows, region = self.locate(company_name, event_name)
        header = rows[region.header_row] if region.header_row is not None else []
        records = []
        for i in region.registration_rows:
            if not has_content(rows[i]):
                continue
            record = registration_record(rows[i], header)
            record['id'] = len(records) + 1
            records.append(record)
        return records

    def normalize_flags(self, company_name):
        """Rewrite legacy enabled spellings in every metadata row of one company."""
        rows = self._rows(company_name)
        count = 0
        for region in scan_tables(rows):
            if region.metadata_row is None:
                continue
            meta = [rows[region.metadata_row]]
            if normalize_flags(meta, rows[region.header_row], aliases=EVENT_ENABLED_ALIASES):
                self.store.update_row(company_name, region.metadata_row, meta[0])
                count += 1
        return count
