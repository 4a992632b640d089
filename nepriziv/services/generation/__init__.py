"""
Document Generation Module

Russian legal templates filled from the user's profile and diagnoses,
rendered to DOCX or XLSX.
"""

__all__ = []
