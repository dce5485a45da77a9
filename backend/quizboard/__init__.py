"""Quiz board gateway: relays quiz payloads to a chat-completion provider."""

__version__ = "0.1.0"
