"""Proxy management package — round-robin rotation over configured endpoints."""

from ytdl_gateway.proxy.manager import ProxyManager
from ytdl_gateway.proxy.types import ProxyEndpoint

__all__ = ["ProxyEndpoint", "ProxyManager"]
