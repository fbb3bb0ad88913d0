"""
Base Repository
Shared plumbing for Prisma-backed repositories.
"""
from typing import Any, Dict


class BaseRepository:
    """
    Holds the Prisma client and resolves the model accessor.

    Subclasses set ``model_name`` to the lower-cased Prisma model
    (``db.domain`` for ``model Domain``).
    """

    model_name: str = ""

    def __init__(self, db: Any) -> None:
        self.db = db

    @property
    def model(self) -> Any:
        if not self.model_name:
            raise NotImplementedError(f"{type(self).__name__} must set model_name")
        return getattr(self.db, self.model_name)

    @staticmethod
    def _strip_none(data: Dict[str, Any]) -> Dict[str, Any]:
        """Drop keys whose value is None so partial writes leave them untouched."""
        return {k: v for k, v in data.items() if v is not None}
