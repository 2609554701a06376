"""HTTP navigation service for server-rendered pages.

A `RequireRole` guard calls `replace(target)` when it denies access; on the
server that becomes a 303 redirect once the handler finishes.
"""

from fastapi import status
from fastapi.responses import RedirectResponse


class RedirectNavigator:
    """Records the first replace() and turns it into a redirect response."""

    def __init__(self):
        self.location: str | None = None
        self.calls = 0

    def replace(self, target: str) -> None:
        self.calls += 1
        if self.location is None:
            self.location = target

    @property
    def redirected(self) -> bool:
        return self.location is not None

    def response(self) -> RedirectResponse:
        if self.location is None:
            raise RuntimeError("No redirect has been requested")
        return RedirectResponse(self.location, status_code=status.HTTP_303_SEE_OTHER)
