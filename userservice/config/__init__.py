"""Configuration module for the user service."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
