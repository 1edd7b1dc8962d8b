"""otactl - release and rollout management for over-the-air app updates."""

__version__ = "0.1.0"
