"""
djay-sync CLI Package

Command-line interface for djay-sync.
"""

from .main import main as cli_main

__all__ = ['cli_main']
