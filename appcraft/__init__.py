"""AppCraft - outbound HTTP proxy with retries and caching, plus the chat code-generation route."""

__version__ = "1.0.0"
