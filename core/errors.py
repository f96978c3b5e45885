from __future__ import annotations


class DashboardError(Exception):
    """Base class for recoverable dashboard failures.

    ``user_message`` is the text stored in the dashboard state and shown to the user.
    """

    user_message = "Something went wrong"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.user_message)
        self.detail = detail


class LoadFailure(DashboardError):
    user_message = "Failed to load data"


class FilterApplyFailure(DashboardError):
    user_message = "Failed to apply filters"


class RefreshFailure(DashboardError):
    user_message = "Failed to refresh data"
