"""Exceptions raised inside the loader and caught at operation boundaries."""


class ProjcfgError(Exception):
    """Base class for errors that are reported to the user and then recovered from."""

    pass


class ProjectConfigError(ProjcfgError):
    """Raised when a project or defaults file can't be evaluated into a mapping."""

    pass


class EnumerationError(ProjcfgError):
    """Raised when the file traversal process can't be started."""

    pass


class DebugBackendUnavailable(ProjcfgError):
    """Raised when no debug backend can be located."""

    pass
