"""
Pydantic model for index documents returned by listIndexes.

Only the fields the client relies on are declared; anything else the
server reports is kept as extra data.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class IndexInfo(BaseModel):
    """
    Decoded listIndexes entry.

    Documents without a string ``name`` fail validation.
    """

    model_config = ConfigDict(extra="allow")

    name: StrictStr = Field(..., description="Index name")
    key: dict[str, Any] = Field(default_factory=dict, description="Indexed fields and directions")
    v: int | None = Field(default=None, description="Index version")
    unique: bool = Field(default=False, description="Unique constraint")
    sparse: bool = Field(default=False, description="Sparse index")
