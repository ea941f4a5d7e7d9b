from .metrics import BlobMetrics

__all__ = ["BlobMetrics"]
