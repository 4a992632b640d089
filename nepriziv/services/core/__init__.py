"""
Core Services Module

Accounts, quotas, documents, content and moderation. Every public method
returns the standard {code, data, msg} envelope.
"""


__all__ = []
