"""
Server-side storage of the state document and PDF binaries
"""
from .document_store import DocumentStore, DEFAULT_STATE, PUBLIC_PREFIX, sanitize_folder

__all__ = ['DocumentStore', 'DEFAULT_STATE', 'PUBLIC_PREFIX', 'sanitize_folder']
