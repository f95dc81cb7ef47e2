"""Match host package: wraps the slap-card engine with networking."""

from .server import HostServer, slap_notification

__all__ = ["HostServer", "slap_notification"]
