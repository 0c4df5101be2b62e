"""
Content records. The create/edit lifecycle lives in ``sitetaxon.content.editor``.
"""

from .models import ContentItem

__all__ = ["ContentItem"]
