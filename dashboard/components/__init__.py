"""Component namespace for the dashboard app."""
