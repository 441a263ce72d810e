"""Outlook report generation package.

Provides generate_report() to render a published snapshot as Markdown.
"""

from .generator import generate_report

__all__ = ["generate_report"]
