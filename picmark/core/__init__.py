"""Core processing module for picmark."""
