"""Closed-form performance calculations."""
