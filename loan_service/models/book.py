"""Remote book data as seen by the loan service."""

from dataclasses import dataclass

UNAVAILABLE_TITLE = "Information unavailable"


@dataclass
class BookSummary:
    """Subset of the Books service representation."""

    book_id: int
    title: str
    stock_count: int | None = None
    available: bool | None = None

    @classmethod
    def placeholder(cls, book_id: int) -> "BookSummary":
        """Summary used when the Books service cannot be reached."""
        return cls(book_id=book_id, title=UNAVAILABLE_TITLE)
