"""swarmdrop — share rl-swarm credential files from a headless box over a temporary tunnel."""

__version__ = "0.1.0"
