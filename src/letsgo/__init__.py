"""letsgo: ACME certificate provisioning for long-running servers."""

__version__ = "0.4.0"
