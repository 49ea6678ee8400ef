"""Docker Swarm deployment status service."""

__version__ = "1.0.0"
