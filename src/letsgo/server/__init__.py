"""Supervision of the external server process."""
