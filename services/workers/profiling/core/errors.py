from __future__ import annotations
from typing import Optional


class MalformedInputError(ValueError):
    """Raised when decoded rows break the shared column-set contract.

    Retrying cannot help: the caller has to re-decode its input.
    """

    def __init__(self, message: str, *, row_index: Optional[int] = None) -> None:
        super().__init__(message)
        self.row_index = row_index
