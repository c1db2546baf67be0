"""
Mise - A personal recipe manager.

Save a recipe link, extract the structured recipe behind it, and read it
back as a clean, scalable checklist.
"""

__version__ = "0.1.0"
