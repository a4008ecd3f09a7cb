"""Session state containers."""
