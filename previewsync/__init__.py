"""Map editor positions in a source document onto its rendered preview."""

__version__ = "0.1.0"

from .models.mapping import Cursor, LineMapping, OffsetMapping, Strategy  # noqa: E402
from .services.mapper import Mapper, create_mapping  # noqa: E402

__all__ = [
    "Cursor",
    "LineMapping",
    "Mapper",
    "OffsetMapping",
    "Strategy",
    "__version__",
    "create_mapping",
]
