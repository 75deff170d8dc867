"""
Exception types for the WinBuilds tracker.

Everything raised here is fatal to the product run that raised it.
Row-level problems are logged and skipped instead.
"""


class WinBuildsError(Exception):
    """Base class for all tracker errors"""


class FetchError(WinBuildsError):
    """A release-information or update-history page could not be fetched."""

    def __init__(self, url, reason):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class ClassificationError(WinBuildsError):
    """The update-history lookup for a row failed."""


class OverrideDataError(WinBuildsError):
    """A static override dataset is unreadable or has the wrong shape."""


class OverrideConflictError(WinBuildsError):
    """More than one static override entry shares the same build."""

    def __init__(self, build, count):
        self.build = build
        self.count = count
        super().__init__(f"Ambiguous override data: {count} entries for build {build}")
