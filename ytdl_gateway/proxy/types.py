"""Proxy data models for the proxy manager."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ProxyEndpoint:
    """A single configured proxy endpoint and how often it has been handed out."""

    url: str
    protocol: str  # http, https, socks5
    selection_count: int = 0
