# -*- coding: utf-8 -*-
"""Event registration portal backed by a Google Sheets spreadsheet."""

from event_portal.factory import create_app

__all__ = ['create_app']
