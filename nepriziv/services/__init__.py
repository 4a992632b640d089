"""
Services Layer

Business logic organized into Core and AI modules.
Core services handle accounts, documents, content and moderation.
AI services wrap the chat-completions gateway.
"""

__all__ = []
