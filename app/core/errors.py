"""
errors.py

Domain error taxonomy.

Services raise these exceptions; `app.main` registers one exception handler
that turns every DojoError into a JSON `{"detail": ...}` response with the
matching status code. Services therefore stay free of HTTP / FastAPI imports.

- ValidationError       : missing / malformed input                 (400)
- AuthenticationError   : bad credentials or token                  (401)
- AuthorizationError    : authenticated but not permitted           (403)
- NotFoundError         : entity missing by id                      (404)
- ConflictError         : capacity reached, invalid state, existing (400)
- ExternalServiceError  : notification delivery failure             (500)

ExternalServiceError is raised by the notifier only; callers that treat
notification as best-effort catch it (see app.services.notifications).

"""


class DojoError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(DojoError):
    status_code = 400


class AuthenticationError(DojoError):
    status_code = 401


class AuthorizationError(DojoError):
    status_code = 403


class NotFoundError(DojoError):
    status_code = 404


# capacity / state conflicts keep the 400 the web front end already handles
class ConflictError(DojoError):
    status_code = 400


class ExternalServiceError(DojoError):
    status_code = 500
