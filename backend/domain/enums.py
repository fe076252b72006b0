"""
Domain enums (minimal set used for clarity in services).
"""

from enum import Enum


class PackageKind(str, Enum):
    BAG = "bag"
    BOX = "box"
    WRAP = "wrap"
