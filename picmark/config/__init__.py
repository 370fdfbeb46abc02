"""Configuration module for picmark."""

from picmark.config.settings import PicmarkSettings, get_settings, reload_settings

__all__ = ["PicmarkSettings", "get_settings", "reload_settings"]
