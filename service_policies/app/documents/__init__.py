"""
Policy document generation: rendered sections plus an audit bundle.
"""

from .generator import document_filename, generate_document
from .models import AuditBundle, DocumentSection, PolicyDocument, PolicyInfo, RenderedClause

__all__ = [
    "AuditBundle",
    "DocumentSection",
    "PolicyDocument",
    "PolicyInfo",
    "RenderedClause",
    "document_filename",
    "generate_document",
]
