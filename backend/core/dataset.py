"""
Dataset snapshot model.
A snapshot is the fully-materialised input of one chart configuration:
ordered field descriptions plus the records keyed by field id.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, ValidationError

from core.errors import InvalidInputError


def convert_to_json_serializable(value: Any) -> Any:
    """Convert any value to JSON-serializable format."""
    if isinstance(value, dict):
        return {str(k): convert_to_json_serializable(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [convert_to_json_serializable(v) for v in value]
    elif isinstance(value, (np.ndarray, pd.Series)):
        return [convert_to_json_serializable(v) for v in value.tolist()]
    elif value is None:
        return None
    elif isinstance(value, (np.bool_, bool)):
        return bool(value)
    elif isinstance(value, (np.integer,)):
        return int(value)
    elif isinstance(value, (np.floating, float)):
        return float(value) if np.isfinite(value) else None
    elif isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.isoformat()
    elif isinstance(value, datetime):
        return value.isoformat()
    elif pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    else:
        return value


@dataclass(frozen=True)
class Field:
    """One column of a dataset. Identity is the id."""
    id: str
    type: str = "text"

    @classmethod
    def coerce(cls, value: Any) -> 'Field':
        """Build a Field from a Field, a {"id", "type"} mapping or a bare id."""
        if isinstance(value, Field):
            return value
        if isinstance(value, str):
            return cls(id=value)
        if isinstance(value, Mapping):
            field_id = value.get("id")
            if field_id is None or str(field_id) == "":
                raise InvalidInputError(f"Field is missing an id: {value!r}")
            return cls(id=str(field_id), type=str(value.get("type") or "text"))
        raise InvalidInputError(f"Invalid field description: {value!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.type}


def coerce_fields(fields: Sequence[Any]) -> List[Field]:
    """Coerce a sequence of field descriptions to Field objects."""
    if isinstance(fields, (str, bytes)) or not isinstance(fields, Sequence):
        raise InvalidInputError("fields must be a sequence of field descriptions")
    return [Field.coerce(item) for item in fields]


class FieldModel(BaseModel):
    """Wire shape of a field description."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    type: str = "text"


class SnapshotModel(BaseModel):
    """Wire shape of a dataset snapshot."""
    fields: List[FieldModel]
    records: List[Dict[str, Any]]


@dataclass
class DatasetSnapshot:
    """
    Fields and records of one dataset as supplied by the data source.
    """
    fields: List[Field]
    records: List[Dict[str, Any]]
    name: Optional[str] = None
    source: Optional[str] = None

    @property
    def field_ids(self) -> List[str]:
        return [f.id for f in self.fields]

    @property
    def row_count(self) -> int:
        return len(self.records)

    def validate_for_chart(self):
        """Raise InvalidInputError unless both fields and records are present."""
        if not self.fields:
            raise InvalidInputError("Dataset has no fields")
        if not self.records:
            raise InvalidInputError("Dataset has no records")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize snapshot for API/UI."""
        return {
            "name": self.name,
            "source": self.source,
            "fields": [f.to_dict() for f in self.fields],
            "records": convert_to_json_serializable(self.records),
            "row_count": self.row_count,
        }

    @classmethod
    def from_payload(cls, payload: Any, name: Optional[str] = None,
                     source: Optional[str] = None) -> 'DatasetSnapshot':
        """
        Validate a `{"fields": [...], "records": [...]}` payload.

        Raises:
            InvalidInputError: If the payload does not have that shape
        """
        try:
            model = SnapshotModel.model_validate(payload)
        except ValidationError as e:
            raise InvalidInputError(f"Malformed dataset payload: {e.error_count()} error(s): {e}") from e

        return cls(
            fields=[Field(id=f.id, type=f.type) for f in model.fields],
            records=model.records,
            name=name,
            source=source,
        )

    @classmethod
    def from_dataframe(cls, dataframe: pd.DataFrame, name: Optional[str] = None,
                       source: Optional[str] = None) -> 'DatasetSnapshot':
        """Factory method to create a snapshot from a pandas DataFrame."""
        fields = []
        for col in dataframe.columns:
            if pd.api.types.is_numeric_dtype(dataframe[col]) and not pd.api.types.is_bool_dtype(dataframe[col]):
                field_type = "numeric"
            elif pd.api.types.is_datetime64_any_dtype(dataframe[col]):
                field_type = "datetime"
            else:
                field_type = "text"
            fields.append(Field(id=str(col), type=field_type))

        records = [
            {str(col): convert_to_json_serializable(value) for col, value in row.items()}
            for row in dataframe.to_dict(orient="records")
        ]

        return cls(fields=fields, records=records, name=name, source=source)
