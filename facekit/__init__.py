"""Face detection post-processing, face alignment, embedding comparison and a channel-aligned tensor type."""

__version__ = "0.1.0"
__all__ = ["detector", "embedder", "geometry", "layer_type", "mat", "reshape", "views"]