"""
Configuration — Runtime settings from YAML, master JSON and env vars.
"""

from .loader import PortalConfig, load_config

__all__ = ["PortalConfig", "load_config"]
