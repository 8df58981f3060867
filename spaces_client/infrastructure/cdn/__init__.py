"""
DigitalOcean CDN management API client.

Implements the CDNGateway protocol from core.gateways.
"""

from .client import CDNEndpoint, DigitalOceanCDNClient

__all__ = ["CDNEndpoint", "DigitalOceanCDNClient"]
