"""Abstract interface for part catalog storage."""

from abc import ABC, abstractmethod

from partsledger.core.entities.part import Part
from partsledger.core.entities.stock import StockMovement


class IPartStore(ABC):
    """Interface for part catalog persistence.

    Catalog edits never touch `stock`; only ledger postings do.
    """

    @abstractmethod
    async def create_part(
        self, part: Part, user_id: str
    ) -> tuple[Part, StockMovement | None]:
        """
        Create a part.

        A non-zero opening stock is posted as an ADJUST movement in the same
        transaction. Raises DuplicateCodeError if the code exists.
        """
        pass

    @abstractmethod
    async def get_part(self, part_id: int) -> Part | None:
        """Get part by ID."""
        pass

    @abstractmethod
    async def get_part_by_code(self, code: str) -> Part | None:
        """Get part by its unique code."""
        pass

    @abstractmethod
    async def update_part(self, part: Part) -> Part:
        """
        Update code, name, description and price.

        Raises PartNotFoundError or DuplicateCodeError.
        """
        pass

    @abstractmethod
    async def import_part(self, part: Part, user_id: str) -> tuple[Part, bool]:
        """
        Create or update the part with `part.code` in one transaction.

        Catalog fields are overwritten and a differing stock is posted as an
        ADJUST to `part.stock`. Returns the saved part and whether it was created.
        """
        pass

    @abstractmethod
    async def delete_part(self, part_id: int) -> None:
        """Delete a part and its movements. Raises PartNotFoundError or PartInUseError."""
        pass

    @abstractmethod
    async def list_parts(
        self, limit: int = 100, offset: int = 0, query: str | None = None
    ) -> list[Part]:
        """List parts ordered by code, optionally filtered by code/name substring."""
        pass

    @abstractmethod
    async def count_parts(self, query: str | None = None) -> int:
        """Count parts matching the same filter as list_parts."""
        pass
