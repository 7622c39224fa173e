"""Configuration package for the portfolio simulator."""

from .settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]
