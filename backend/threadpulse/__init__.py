"""ThreadPulse: Reddit discussion discovery, extraction and sentiment scoring."""

__version__ = "0.1.0"
