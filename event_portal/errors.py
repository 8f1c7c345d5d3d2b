# -*- coding: utf-8 -*-
"""Error taxonomy shared by the store, the services and the HTTP layer."""


class PortalError(Exception):
    status_code = 500
    default_message = "Unexpected server error."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class Unauthorized(PortalError):
    status_code = 401
    default_message = "Login required."


class Forbidden(PortalError):
    status_code = 403
    default_message = "Permission denied."


class NotFound(PortalError):
    status_code = 404
    default_message = "Not found."


class NotValid(PortalError):
    status_code = 400
    default_message = "Invalid input."


class Conflict(PortalError):
    status_code = 409
    default_message = "Already exists."


class UpstreamFailure(PortalError):
    status_code = 502
    default_message = "Storage service error. Please try again."
