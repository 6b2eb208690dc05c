"""
Paperbox - personal PDF archive
"""

__version__ = '1.0.0'
