"""Go toolchain version resolution."""

from .config import Settings


def latest_go_version(settings: Settings) -> str:
    """Latest Go toolchain version.

    Taken from configuration (``GO_LATEST_VERSION``) rather than a release
    feed, so Go repositories never need the network.
    """
    return settings.go_latest_version
