"""
Treasure Hunt Storyline Asset Server

Resolves clue indices to storyline 3D assets for the AR treasure hunt,
and hosts the treasure image upload and web configuration endpoints.
"""

__version__ = "1.0.0"
