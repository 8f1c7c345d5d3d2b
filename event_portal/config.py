# -*- coding: utf-8 -*-
"""Settings, all read from environment variables."""

import os

from dotenv import load_dotenv

load_dotenv()

FLASK_SECRET_KEY = os.environ.get('FLASK_SECRET_KEY')

# --- Google Setup ---
SCOPE_GSPREAD_CLIENT_DEFAULT = ['https://www.googleapis.com/auth/spreadsheets', 'https://www.googleapis.com/auth/drive.file']
MASTER_SHEET_NAME = os.environ.get("MASTER_SHEET_NAME", 'event management')
MASTER_SHEET_ID = os.environ.get("MASTER_SHEET_ID")
YOUR_PERSONAL_EMAIL = os.environ.get("YOUR_PERSONAL_SHARE_EMAIL")
GOOGLE_CREDENTIALS_JSON = os.environ.get("GOOGLE_CREDENTIALS_JSON", "")
COMPANIES_SHEET_NAME = os.environ.get("COMPANIES_SHEET_NAME", 'companies')

# "gspread" talks to Google Sheets, "memory" keeps everything in process (local dev)
SHEET_BACKEND = os.environ.get("SHEET_BACKEND", 'gspread')

# --- Admin login (the only admin account lives in the environment) ---
ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD")

# --- Image host (GitHub repository used as a CDN) ---
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN")
GITHUB_REPO = os.environ.get("GITHUB_REPO")
GITHUB_BRANCH = os.environ.get("GITHUB_BRANCH", 'main')
GITHUB_IMAGE_DIR = os.environ.get("GITHUB_IMAGE_DIR", 'images')

LOG_LEVEL = os.environ.get("LOG_LEVEL", 'INFO')
PORT = int(os.environ.get("PORT", 5000))

# --- Constants ---
DATETIME_SHEET_FORMAT = '%Y-%m-%dT%H:%M:%S%z'


def as_flask_config():
    """Upper-case module settings, ready for ``app.config.update``."""
    return {key: value for key, value in globals().items() if key.isupper()}
