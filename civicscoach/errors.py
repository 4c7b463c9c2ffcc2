"""Error base shared by the pipeline stages that can fail."""


class CoachError(Exception):
    """Base for every error the request boundary turns into a failure response.

    ``status`` is the HTTP status of the failure response and ``message`` the
    text shown to the caller.
    """

    status = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def details(self) -> str | None:
        return None


class InputError(CoachError):
    """Missing or empty query."""

    status = 400
