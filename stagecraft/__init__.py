"""stagecraft: compile visual-novel step logs into beats and play them back."""

__version__ = "0.1.0"
