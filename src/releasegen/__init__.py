"""releasegen: release and tag reports for team-owned repositories."""

__version__ = "0.1.0"
