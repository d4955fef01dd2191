"""elabfront — command-processing frontend for a small elaboration pipeline."""

__version__ = "0.1.0"
