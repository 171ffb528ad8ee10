"""Raw package record representation before decoding."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class RawRecord(BaseModel):
    """
    Untyped attribute map as read from a legacy source.
    Values are strings, lists of strings or bytes (JSON exports may also
    carry native numbers, booleans and objects).
    """

    data: dict[str, Any] = Field(default_factory=dict)
    source_ref: Optional[str] = Field(
        default=None,
        description="Where the record came from, e.g. 'line 12' or a DN",
    )
