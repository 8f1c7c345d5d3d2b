# -*- coding: utf-8 -*-
"""Session identity: ``{id, type, name}`` kept in the signed Flask session."""

import hmac
import logging
from functools import wraps

from flask import current_app, g, session

from event_portal.errors import Forbidden, Unauthorized
from event_portal.models import Actor, ActorType

logger = logging.getLogger(__name__)

ADMIN_ID = 'admin'


def current_actor():
    user_id, user_type = session.get('user_id'), session.get('user_type')
    if not user_id or user_type not in [t.value for t in ActorType]:
        return None
    return Actor(id=user_id, type=ActorType(user_type), name=session.get('user_name', ''))


def login_required(f):
    """Decorator to require any logged-in actor; it is left in ``g.actor``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.actor = current_actor()
        if g.actor is None:
            raise Unauthorized()
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require admin login"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.actor = current_actor()
        if g.actor is None:
            raise Unauthorized()
        if not g.actor.is_admin:
            logger.warning(f"Company '{g.actor.name}' denied admin-only {f.__name__}.")
            raise Forbidden()
        return f(*args, **kwargs)
    return decorated_function


def _is_admin_login(username, password):
    admin_username = current_app.config.get('ADMIN_USERNAME')
    admin_password = current_app.config.get('ADMIN_PASSWORD')
    if not admin_username or not admin_password:
        return False
    return (hmac.compare_digest(username.encode('utf-8'), admin_username.encode('utf-8'))
            and hmac.compare_digest(password.encode('utf-8'), admin_password.encode('utf-8')))


def login(companies, username, password):
    username, password = (username or '').strip(), password or ''
    if not username or not password:
        raise Unauthorized("Username and password are required.")
    if _is_admin_login(username, password):
        actor = Actor(id=ADMIN_ID, type=ActorType.ADMIN, name=username)
    else:
        company = companies.authenticate(username, password)
        actor = Actor(id=company.id, type=ActorType.COMPANY, name=company.name)
    session.clear()
    session.update(actor.to_session())
    logger.info(f"{actor.type.value.capitalize()} '{actor.name}' logged in.")
    return actor


def logout():
    actor = current_actor()
    session.clear()
    if actor is not None:
        logger.info(f"{actor.type.value.capitalize()} '{actor.name}' logged out.")
