"""Status HTTP endpoint."""

from pets_tracker.api.status_api import StatusAPI, StatusServer, create_status_app

__all__ = ["StatusAPI", "StatusServer", "create_status_app"]
