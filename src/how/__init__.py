"""how: AI-powered shell assistant."""

__version__ = "0.1.0"
