# -*- coding: utf-8 -*-
import logging

from flask import Flask

from event_portal import config
from event_portal.companies import CompanyService
from event_portal.errors import PortalError
from event_portal.events import EventService
from event_portal.images import GitHubImageHost
from event_portal.registrations import RegistrationService
from event_portal.routes import api
from event_portal.sheets import build_store

logger = logging.getLogger(__name__)

DEV_SECRET_KEY = "temp_dev_secret_key_for_flask_reloader_only_SET_IN_ENV"


def create_app(overrides=None, store=None, image_host=None):
    """Build the app; ``store``/``image_host`` replace the configured backends."""
    app = Flask(__name__)
    app.config.update(config.as_flask_config())
    app.config.update(overrides or {})

    secret_key = app.config.get('FLASK_SECRET_KEY')
    if not secret_key:
        if not (app.config.get('DEBUG') or app.config.get('TESTING')):
            raise RuntimeError("FLASK_SECRET_KEY is not set; refusing to sign sessions with a default key.")
        logger.warning("FLASK_SECRET_KEY is not set. Using a development key.")
        secret_key = DEV_SECRET_KEY
    app.secret_key = secret_key

    if not app.config.get('MASTER_SHEET_ID') and app.config.get('SHEET_BACKEND') != 'memory':
        logger.warning("MASTER_SHEET_ID not set. Opening master sheet will rely on name search.")

    store = store or build_store(app.config)
    image_host = image_host or GitHubImageHost(token=app.config.get('GITHUB_TOKEN'), repo=app.config.get('GITHUB_REPO'),
                                               branch=app.config.get('GITHUB_BRANCH', 'main'),
                                               base_dir=app.config.get('GITHUB_IMAGE_DIR', 'images'))
    companies = CompanyService(store, image_host, app.config.get('COMPANIES_SHEET_NAME', 'companies'))
    events = EventService(store, companies, image_host)
    app.extensions['event_portal'] = {
        'store': store,
        'companies': companies,
        'events': events,
        'registrations': RegistrationService(store, companies, events),
    }

    app.register_blueprint(api)
    register_commands(app)
    return app


def register_commands(app):

    @app.cli.command('normalize-flags')
    def normalize_flags_command():
        """Rewrite legacy enabled spellings (مفعل, yes, ...) as true/false."""
        services = app.extensions['event_portal']
        total = services['companies'].normalize_flags()
        logger.info(f"Companies sheet: {total} flag(s) rewritten.")
        for company in services['companies'].list():
            try:
                count = services['events'].normalize_flags(company.name)
            except PortalError as e:
                logger.warning(f"Skipping '{company.name}': {e.message}")
                continue
            logger.info(f"'{company.name}': {count} event flag(s) rewritten.")
            total += count
        logger.info(f"Done. {total} flag(s) rewritten.")
