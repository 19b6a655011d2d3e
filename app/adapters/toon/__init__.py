"""TOON adapter layer - isolates the third-party encoder from the service."""

from app.adapters.toon.base import AbstractToonEncoder
from app.adapters.toon.factory import create_toon_encoder
from app.adapters.toon.toon_format_encoder import ToonFormatEncoder

__all__ = [
    "AbstractToonEncoder",
    "ToonFormatEncoder",
    "create_toon_encoder",
]
