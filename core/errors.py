"""Exception types raised by depsweep."""


class DepsweepError(Exception):
    """Base class for all depsweep errors."""


class ConfigError(DepsweepError):
    """Raised when the environment holds an invalid setting."""


class ManifestError(DepsweepError):
    """Raised when a manifest cannot be read or parsed.

    Fatal for the repository that owns the manifest, never for the run.
    """


class RegistryError(DepsweepError):
    """Raised when a single registry lookup fails."""


class UpdateError(DepsweepError):
    """Raised when a manifest rewrite cannot be written to disk."""


class NoRepositoriesError(DepsweepError):
    """Raised when discovery finds nothing to scan."""
