# creator/__init__.py
"""
Create Styler - creation orchestration service.
"""
__version__ = "2.0.0"
