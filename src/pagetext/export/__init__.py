"""Export helpers: visual overlays of the reading-order view."""

from .overlay import draw_text_overlay

__all__ = ["draw_text_overlay"]
