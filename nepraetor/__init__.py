"""
Nepraetor - point cloud screenshot auditing.

Counts rendered points in three-view (overhead, side, back) screenshots,
reads the printed reference count with OCR and flags dummy frames.
"""

__version__ = "0.3.0"
