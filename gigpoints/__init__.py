"""Points, ranks and notifications backend for the gig marketplace app."""

__version__ = "0.1.0"
