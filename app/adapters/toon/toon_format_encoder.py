"""TOON encoder adapter backed by the ``toon_format`` package."""

from typing import Any

from toon_format import encode

from app.adapters.toon.base import AbstractToonEncoder
from app.adapters.toon.key_folding import fold_keys
from app.core.errors import EncodingAppError


class ToonFormatEncoder(AbstractToonEncoder):
    """Encoder delegating to ``toon_format.encode``.

    The library owns escaping and tabular arrays. It has no key folding, so
    ``key_folding="safe"`` folds single-key chains here before encoding.
    """

    def __init__(
        self,
        key_folding: str = "safe",
        indent: int = 2,
        delimiter: str = ",",
    ) -> None:
        """Store encoder options.

        Args:
            key_folding: Key folding mode ("safe" or "off").
            indent: Spaces per indentation level.
            delimiter: Field delimiter for tabular rows and primitive arrays.
        """
        self.key_folding = key_folding
        self.options: dict[str, Any] = {
            "indent": indent,
            "delimiter": delimiter,
        }

    def encode(self, document: dict[str, Any]) -> str:
        """Encode ``document`` with the configured options.

        Raises:
            EncodingAppError: If the library raises for this document.
        """
        if self.key_folding == "safe":
            document = fold_keys(document)

        try:
            return encode(document, self.options)
        except Exception as exc:
            raise EncodingAppError(
                code="encoding_failed",
                message="TOON encoder rejected the document",
                details={"error_type": type(exc).__name__},
            ) from exc
