"""Backend for the Choose a License Alfred workflow."""

__version__ = "1.2.0"
