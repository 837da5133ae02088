"""
Perspective rectification of detected quads onto square canvases.
"""

from qrlocate.rectification.perspective import rectify_quad, square_destination

__all__ = ["rectify_quad", "square_destination"]
