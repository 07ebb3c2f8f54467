"""Exceptions raised by the cart, catalog and identity layers.

Views translate these into flash messages; the application error handler
turns anything that escapes into an error page with ``status_code``.
"""


class StorefrontError(Exception):
    status_code = 500
    default_message = "Something went wrong. Please try again later."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(StorefrontError):
    status_code = 404
    default_message = "Not found"


class Forbidden(StorefrontError):
    status_code = 403
    default_message = "Access denied"


class InvalidArgument(StorefrontError):
    status_code = 400
    default_message = "Invalid input"


class UpstreamUnavailable(StorefrontError):
    status_code = 503
    default_message = "Service temporarily unavailable. Please try again later."
