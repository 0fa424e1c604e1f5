"""
NameAPI - Thin asynchronous client for the Name.com API
"""

__version__ = "0.1.0"

from NameAPI.clients import ResourceClient, ApiError, ConfigurationError  # noqa: E402

__all__ = ["ResourceClient", "ApiError", "ConfigurationError", "__version__"]
