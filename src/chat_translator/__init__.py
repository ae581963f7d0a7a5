"""Text translation through LLM chat-completion endpoints."""

__version__ = "1.0.0"
