"""
OCR Module for Nepraetor

Pluggable text recognition used to read the reference count printed in
each view of a point cloud screenshot.

Usage:
    from nepraetor.ocr import create_engine

    # Create an OCR engine (Tesseract)
    engine = create_engine()

    # Process an image crop
    result = engine.process(crop)

    # Raw recognized text, e.g. "×1368"
    text = result.text

Example with a fixed reading:
    engine = create_engine("static", text="×1368")
"""

# Public API - Result types
from .result import OCRResult

# Public API - Base class for custom engines
from .base import OCREngine

# Public API - Factory functions
from .factory import (
    create_engine,
    register_engine,
    available_engines,
)

# Public API - Engines without heavy imports
from .static_engine import StaticOCREngine

__all__ = [
    # Result types
    "OCRResult",
    # Base class
    "OCREngine",
    # Factory
    "create_engine",
    "register_engine",
    "available_engines",
    # Engines
    "StaticOCREngine",
]
