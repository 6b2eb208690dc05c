"""
Access to per-app services from inside request handlers
"""
from flask import current_app


def get_store():
    """DocumentStore der laufenden App"""
    return current_app.extensions['document_store']
