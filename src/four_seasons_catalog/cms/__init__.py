"""Read-only access to the WordPress/ACF content API."""

from .client import CmsClient, CmsError, CmsHttpError, CmsTransportError, RetryConfig

__all__ = ["CmsClient", "CmsError", "CmsHttpError", "CmsTransportError", "RetryConfig"]
