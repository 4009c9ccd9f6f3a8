"""
Utility modules
"""
from .secure_logging import configure_secure_logging, SensitiveDataFilter

__all__ = ["configure_secure_logging", "SensitiveDataFilter"]
