"""Factory for the configured TOON encoder."""

from app.adapters.toon.base import AbstractToonEncoder
from app.adapters.toon.toon_format_encoder import ToonFormatEncoder
from app.core.config import settings
from app.core.errors import ValidationAppError

SUPPORTED_KEY_FOLDING = {"safe", "off"}
SUPPORTED_DELIMITERS = {",", "\t", "|"}


def create_toon_encoder() -> AbstractToonEncoder:
    """Instantiate the encoder from ``settings.toon``.

    Returns:
        AbstractToonEncoder: Configured encoder instance.

    Raises:
        ValidationAppError: If an option is outside what the encoder accepts.
    """
    key_folding = settings.toon.key_folding.lower()
    if key_folding not in SUPPORTED_KEY_FOLDING:
        raise ValidationAppError(
            code="toon_unknown_key_folding",
            message=(
                f"Unknown key folding mode: '{key_folding}'. "
                f"Supported modes: {', '.join(sorted(SUPPORTED_KEY_FOLDING))}"
            ),
        )

    if settings.toon.delimiter not in SUPPORTED_DELIMITERS:
        raise ValidationAppError(
            code="toon_unsupported_delimiter",
            message="TOON_DELIMITER must be one of ',', '|' or a tab",
        )

    return ToonFormatEncoder(
        key_folding=key_folding,
        indent=settings.toon.indent,
        delimiter=settings.toon.delimiter,
    )
