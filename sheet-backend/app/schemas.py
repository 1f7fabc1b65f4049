from __future__ import annotations

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# A sheet cell as it travels over JSON; null is a blank cell
CellValue = Union[bool, int, float, str, None]
CellRows = List[List[CellValue]]


def _as_block(v: Any) -> Any:
    """Accept a bare scalar or a flat row as shorthand for a 1-row block."""
    if v is None:
        return None
    if not isinstance(v, list):
        return [[v]]
    if v and not any(isinstance(r, list) for r in v):
        return [v]
    return v


class CrsCallRequest(BaseModel):
    """Arguments of one cell function call, as cell blocks."""

    crs: Optional[CellRows] = Field(default=None, description="1x1 or 1x2 block identifying the CRS")
    index: CellValue = Field(default=None, description="Zero-based index for axis/identifier reads")
    crs2: Optional[CellRows] = Field(default=None, description="Second CRS for equivalence checks")
    point1: Optional[CellRows] = Field(default=None, description="1-row, 2-4 column numeric block")
    point2: Optional[CellRows] = Field(default=None, description="1-row, 2-4 column numeric block")

    @field_validator("crs", "crs2", "point1", "point2", mode="before")
    @classmethod
    def _validate_block(cls, v: Any) -> Any:
        return _as_block(v)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"crs": [[4326]]},
                {"crs": [["EPSG", 28992]], "index": 1},
                {"crs": [[4326]], "point1": [[5.0, 52.0]], "point2": [[6.0, 52.0]]},
                {"crs": [[4326]], "crs2": [["OGC:CRS84"]]},
            ]
        }
    )


class CellResult(BaseModel):
    """What the host renders in the cell: a value, or an error code with detail."""

    value: Any = None
    error: Optional[str] = Field(default=None, description="#VALUE! or #N/A when the call failed")
    detail: Optional[str] = None


class FunctionInfo(BaseModel):
    name: str
    params: List[str]
    optional: List[str] = Field(default_factory=list)
    description: str = ""


class KeyValueRequest(BaseModel):
    key: str = Field(min_length=1)
    value: str


class CfgResult(BaseModel):
    """Result of a settings operation; arrays come back as rows."""

    value: Any = None
