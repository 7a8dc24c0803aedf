"""GitHub forge backend."""
