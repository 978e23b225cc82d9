"""
Search schemas.

Line numbers are 1-based and local to the scanned file. For a segmented
artifact each segment restarts at line 1; ``segment_index`` tells which
segment a hit came from.
"""

from typing import Optional

from pydantic import BaseModel, Field


class SearchQuery(BaseModel):
    """A literal or pattern query."""

    text: str = Field(..., description="Substring, or pattern when is_regex is set")
    is_regex: bool = Field(default=False, description="Treat text as a regular expression")
    ignore_case: bool = Field(default=True, description="Case-insensitive matching")


class SearchResult(BaseModel):
    """A single matching line."""

    file_name: str = Field(..., description="Display name of the scanned file")
    line_number: int = Field(..., ge=1, description="1-based line number within the file")
    line: str = Field(..., description="Raw line text without terminator")
    segment_index: Optional[int] = Field(
        None,
        ge=1,
        description="1-based segment number, None when a whole file was scanned",
    )

    def format(self) -> str:
        """Render as shown in result lists."""
        return f"[Line {self.line_number}] {self.line.strip()}"
