"""Live Minecraft server status via public status APIs."""

__version__ = "0.1.0"
