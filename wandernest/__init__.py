"""WanderNest: fuzzy destination search for a travel planning app."""

__version__ = "1.0.0"
