"""
Invoice Manager API Package

This package provides a FastAPI server for invoice and business profile
management, backed by Supabase tables.
"""

__version__ = "1.0.0"
__author__ = "Invoice Manager Team"
