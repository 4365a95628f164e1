"""Team composition & membership service for the hackathon portal."""

__version__ = "1.0.0"
