# -*- coding: utf-8 -*-
"""JSON API. Views stay thin: parse the request, call a service, jsonify."""

import logging
from io import BytesIO

from flask import Blueprint, current_app, g, jsonify, request, send_file, session
from werkzeug.exceptions import HTTPException

from event_portal import auth, exports
from event_portal.auth import admin_required, login_required
from event_portal.errors import Forbidden, NotValid, PortalError
from event_portal.images import safe_file_part
from event_portal.registrations import make_qr_data_url
from event_portal.row_codec import parse_flag

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')


def services(): return current_app.extensions['event_portal']


def payload():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def text(data, key):
    """String field of a JSON body; None when absent."""
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise NotValid(f"{key} must be a string.")


def actor_dict(actor): return {'id': actor.id, 'type': actor.type.value, 'name': actor.name}


def optional_flag(data, key='enabled'):
    """Flag from a JSON body; absent, null or blank means unchanged."""
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_flag(value)


def company_for(actor, value):
    """Company named in the request; a company actor defaults to itself."""
    company_name = (value or '').strip() or (None if actor.is_admin else actor.name)
    if not company_name:
        raise NotValid("companyName is required.")
    return company_name


@api.errorhandler(PortalError)
def handle_portal_error(e):
    return jsonify({'status': 'error', 'message': e.message}), e.status_code


@api.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return jsonify({'status': 'error', 'message': e.description}), e.code
    logger.exception(f"Unhandled error on {request.method} {request.path}: {e}")
    return jsonify({'status': 'error', 'message': 'Internal server error.'}), 500


# === Auth ===
@api.route('/auth/login', methods=['POST'])
def login():
    data = payload()
    actor = auth.login(services()['companies'], text(data, 'username'), text(data, 'password'))
    return jsonify({'status': 'success', 'user': actor_dict(actor)})


@api.route('/auth/logout', methods=['POST'])
def logout():
    auth.logout()
    return jsonify({'status': 'success', 'message': 'Logged out.'})


@api.route('/auth/session')
def current_session():
    actor = auth.current_actor()
    return jsonify({'status': 'success', 'user': actor_dict(actor) if actor else None})


# === Companies ===
@api.route('/companies', methods=['GET'])
@login_required
def get_companies():
    companies = services()['companies']
    company_id, name = request.args.get('id'), request.args.get('name')
    if company_id or name:
        company = companies.get_by_id(company_id) if company_id else companies.get_by_name(name)
        if not g.actor.is_admin and company.id != g.actor.id:
            raise Forbidden("You can only view your own company.")
        return jsonify({'status': 'success', 'company': company.public_dict()})
    if not g.actor.is_admin:
        raise Forbidden()
    return jsonify({'status': 'success', 'companies': [c.public_dict() for c in companies.list()]})


@api.route('/companies', methods=['POST'])
@admin_required
def create_company():
    data = payload()
    company = services()['companies'].create(text(data, 'name'), text(data, 'username'), text(data, 'password'),
                                             image=text(data, 'image'))
    return jsonify({'status': 'success', 'company': company.public_dict()}), 201


@api.route('/companies', methods=['PUT', 'PATCH'])
@login_required
def update_company():
    data = payload()
    company_id = request.args.get('id') or text(data, 'id')
    if not company_id:
        raise NotValid("Company id is required.")
    enabled = optional_flag(data)
    if not g.actor.is_admin:
        if company_id != g.actor.id:
            raise Forbidden("You can only edit your own company.")
        if enabled is not None:
            raise Forbidden("Only an admin can enable or disable companies.")
    company = services()['companies'].update(company_id, name=text(data, 'name'), username=text(data, 'username'),
                                             password=text(data, 'password'), image=text(data, 'image'),
                                             enabled=enabled)
    if company.id == g.actor.id:
        session['user_name'] = company.name
    return jsonify({'status': 'success', 'company': company.public_dict()})


@api.route('/companies', methods=['DELETE'])
@admin_required
def delete_company():
    company_id = request.args.get('id') or text(payload(), 'id')
    if not company_id:
        raise NotValid("Company id is required.")
    services()['companies'].delete(company_id)
    return jsonify({'status': 'success', 'message': 'Company deleted; its event data is kept.'})


# === Events ===
@api.route('/events', methods=['GET'])
def get_events():
    events = services()['events']
    company_name = request.args.get('company') or request.args.get('companyName')
    event_id = request.args.get('id')
    if event_id:
        if not company_name:
            raise NotValid("company is required.")
        return jsonify({'status': 'success', 'event': events.get(company_name, event_id).to_dict()})
    return jsonify({'status': 'success', 'events': [e.to_dict() for e in events.list(company_name)]})


@api.route('/events', methods=['POST'])
@login_required
def create_event():
    data = payload()
    event = services()['events'].create(g.actor, company_for(g.actor, text(data, 'companyName')),
                                        text(data, 'eventName'), image=text(data, 'image'))
    return jsonify({'status': 'success', 'event': event.to_dict()}), 201


@api.route('/events', methods=['PATCH'])
@login_required
def update_event():
    data = payload()
    if not text(data, 'eventName'):
        raise NotValid("eventName is required.")
    event = services()['events'].update(g.actor, company_for(g.actor, text(data, 'companyName')),
                                        text(data, 'eventName'), image=text(data, 'image'), enabled=optional_flag(data))
    return jsonify({'status': 'success', 'event': event.to_dict()})


@api.route('/events', methods=['DELETE'])
@login_required
def delete_event():
    event_name = request.args.get('event') or text(payload(), 'eventName')
    if not event_name:
        raise NotValid("event is required.")
    company_name = company_for(g.actor, request.args.get('company') or text(payload(), 'companyName'))
    services()['events'].delete(g.actor, company_name, event_name)
    return jsonify({'status': 'success', 'message': f"Event '{event_name}' deleted."})


def _registrations_from_args():
    event_id = request.args.get('eventId')
    if not event_id:
        raise NotValid("eventId is required.")
    return event_id, services()['events'].registrations(g.actor, request.args.get('companyName'), event_id)


@api.route('/events/registrations')
@login_required
def get_registrations():
    _, records = _registrations_from_args()
    return jsonify({'status': 'success', 'registrations': records})


@api.route('/events/registrations/export')
@login_required
def export_registrations():
    event_id, records = _registrations_from_args()
    fmt = (request.args.get('format') or 'csv').lower()
    content, mimetype = exports.render(records, fmt, title=f"{event_id} registrations")
    return send_file(BytesIO(content), mimetype=mimetype, as_attachment=True,
                     download_name=f"{safe_file_part(event_id)}_registrations.{fmt}")


@api.route('/events/register', methods=['POST'])
def register():
    data = payload()
    company_name, event_name = text(data, 'companyName'), text(data, 'eventName')
    if not company_name or not event_name:
        raise NotValid("companyName and eventName are required.")
    registration = services()['registrations'].register(company_name, event_name, data)
    return jsonify({'status': 'success', 'message': 'Registration successful',
                    'registration': registration.to_dict(),
                    'qrCode': make_qr_data_url(company_name.strip(), event_name.strip(), registration)}), 201


@api.route('/health')
def health():
    return jsonify({'status': 'ok'})
