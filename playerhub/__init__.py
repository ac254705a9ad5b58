"""Real-time room-state synchronisation backend for the Player Hub."""

__version__ = "0.1.0"
