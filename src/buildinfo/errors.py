"""Exceptions raised while collecting or loading build metadata."""


class BuildInfoError(Exception):
    """Base class for buildinfo failures."""


class DiscoveryError(BuildInfoError):
    """The package version could not be determined, so the build must stop."""


class EmbeddedFactsError(BuildInfoError):
    """The generated build-info module is missing or malformed."""
