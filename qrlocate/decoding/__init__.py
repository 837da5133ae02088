"""Decode waterfall and its building blocks.

Components:
    - binarization: numpy Otsu threshold with alpha handling
    - variants: colour and binarization variant generators
    - backends: OpenCV, zxing-cpp and pyzbar wrappers
    - waterfall: ordered providers with first-success short-circuit
"""

from qrlocate.decoding.backends import (
    DecoderBackend,
    OpenCVBackend,
    PyzbarBackend,
    ZXingBackend,
)
from qrlocate.decoding.binarization import otsu_threshold_value
from qrlocate.decoding.waterfall import DecodeOptions, DecodeProvider, DecodeWaterfall

__all__ = [
    "DecodeOptions",
    "DecodeProvider",
    "DecodeWaterfall",
    "DecoderBackend",
    "OpenCVBackend",
    "PyzbarBackend",
    "ZXingBackend",
    "otsu_threshold_value",
]
