"""MCP interface models."""

from recallmcp.models.schemas import AddMemoryInput
from recallmcp.models.schemas import AddMemoryResult
from recallmcp.models.schemas import CleanupResult
from recallmcp.models.schemas import GetMemoryResult
from recallmcp.models.schemas import ListMemoriesResult
from recallmcp.models.schemas import MemoryEntry
from recallmcp.models.schemas import SearchMemoriesInput
from recallmcp.models.schemas import SearchMemoriesResult
from recallmcp.models.schemas import SearchMeta
from recallmcp.models.schemas import SearchResultEntry

__all__ = [
    "AddMemoryInput",
    "AddMemoryResult",
    "CleanupResult",
    "GetMemoryResult",
    "ListMemoriesResult",
    "MemoryEntry",
    "SearchMemoriesInput",
    "SearchMemoriesResult",
    "SearchMeta",
    "SearchResultEntry",
]
