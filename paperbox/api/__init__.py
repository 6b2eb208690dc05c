"""
API Blueprints Module
Organizes Flask routes into logical blueprints
"""

from .state import state_bp
from .pdfs import pdfs_bp
from .files import files_bp
from .monitoring import monitoring_bp

__all__ = ['state_bp', 'pdfs_bp', 'files_bp', 'monitoring_bp']
