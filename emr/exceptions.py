"""
Application error raised by the service layer.

Every failure is a single ``ApplicationError`` carrying a human-readable
message; callers tell failures apart by the message text.  The
``status_code`` attribute is only a hint for the HTTP exception handler
registered in ``emr.main``.
"""


PAGE_SIZE_INVALID = "Page size invalid!"
PAGE_NUMBER_INVALID = "Page number invalid!"
SORT_ORDER_INVALID = "Invalid sort order. Use 'asc' or 'desc'"
NO_DATA_FOUND = "No data found!"
PATCH_MISSING = "Patch document is missing!"
PATCH_INVALID = "Invalid patch document!"
FILTERS_INVALID = "Invalid filters format!"
MISMATCHED_ID = "Mismatched Id"


class ApplicationError(Exception):
    """Generic application-level failure with a human-readable message."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


def not_found() -> ApplicationError:
    return ApplicationError(NO_DATA_FOUND, status_code=404)
