"""ser - one interface for launchd and systemd services."""

__version__ = "0.1.0"
