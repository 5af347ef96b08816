class TrackerError(Exception):
    """Base class for errors raised while reading upstream data."""


class SessionSourceError(TrackerError):
    """The session source could not be reached or returned an unusable payload."""


class ProjectStoreError(TrackerError):
    """The projects document could not be read or parsed."""
