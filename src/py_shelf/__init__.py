"""py-shelf — browse a personal library like a Unix shell."""

__version__ = "0.1.0"
