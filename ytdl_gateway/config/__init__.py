"""Configuration module — environment-driven settings."""

from ytdl_gateway.config.settings import GatewaySettings

__all__ = ["GatewaySettings"]
