"""
AI Services Module

Consultation chat, diagnosis and document analysis, scan enhancement and
government structures lookup through the chat-completions gateway.
"""

__all__ = []
