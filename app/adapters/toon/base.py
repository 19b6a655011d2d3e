from abc import ABC, abstractmethod
from typing import Any


class AbstractToonEncoder(ABC):
	"""Interface for encoders that turn a JSON object into TOON text."""

	@abstractmethod
	def encode(self, document: dict[str, Any]) -> str:
		"""Encode a parsed JSON object.

		Args:
			document: JSON object decoded from the request body.

		Returns:
			str: TOON text.

		Raises:
			EncodingAppError: If the underlying encoder rejects the document.
		"""
		...
