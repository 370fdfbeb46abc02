"""Utility module for picmark."""
