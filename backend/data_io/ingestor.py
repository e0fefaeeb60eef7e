"""
Dataset ingestion.
Normalises open-data API responses (data.gov.sg v2 and legacy CKAN) and
local CSV/TSV/JSON files into dataset snapshots.
"""
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
import logging
import warnings

import chardet
import pandas as pd

from core.dataset import DatasetSnapshot, Field
from core.errors import InvalidInputError

logger = logging.getLogger(__name__)

FIELD_ID_KEYS = ("id", "name", "field", "column")


class DataIngestor:
    """Builds dataset snapshots from API payloads and local files."""

    # Format-specific configurations
    READERS = {
        '.csv': {
            'function': pd.read_csv,
            'params': {
                'low_memory': False,
                'on_bad_lines': 'warn'
            }
        },
        '.tsv': {
            'function': pd.read_csv,
            'params': {
                'sep': '\t',
                'low_memory': False,
                'on_bad_lines': 'warn'
            }
        },
        '.json': {
            'function': pd.read_json,
            'params': {
                'orient': 'records',
                'convert_dates': False
            }
        }
    }

    DEFAULT_ENCODING = 'utf-8'

    # ========== API payloads ==========

    def from_api_payload(self, payload: Any, name: Optional[str] = None) -> DatasetSnapshot:
        """
        Normalise a dataset rows response into a snapshot.

        Args:
            payload: v2 `{"code": 0, "data": {"rows": [...], "fields": [...]}}`
                or CKAN `{"success": true, "result": {"fields": [...], "records": [...]}}`
            name: Optional display name

        Returns:
            DatasetSnapshot

        Raises:
            InvalidInputError: If the payload has neither shape
        """
        if not isinstance(payload, Mapping):
            raise InvalidInputError("API payload must be a JSON object")

        data = payload.get("data")
        if payload.get("code") == 0 and isinstance(data, Mapping):
            rows = data.get("rows") or []
            fields = self._normalise_fields(data.get("fields") or [], rows)
            logger.info(f"Normalised v2 payload: {len(rows)} rows, {len(fields)} fields")
            return DatasetSnapshot(fields=fields, records=self._normalise_rows(rows),
                                   name=name, source="v2")

        result = payload.get("result")
        if payload.get("success") and isinstance(result, Mapping):
            records = result.get("records") or []
            fields = self._normalise_fields(result.get("fields") or [], records)
            logger.info(f"Normalised CKAN payload: {len(records)} records, {len(fields)} fields")
            return DatasetSnapshot(fields=fields, records=self._normalise_rows(records),
                                   name=name, source="ckan")

        raise InvalidInputError("Unknown response format from dataset endpoint")

    def _normalise_fields(self, fields: List[Any], rows: List[Any]) -> List[Field]:
        """Field descriptions from the payload, or inferred from the first row."""
        if fields:
            normalised = []
            for index, item in enumerate(fields):
                if isinstance(item, str):
                    normalised.append(Field(id=item))
                    continue
                if not isinstance(item, Mapping):
                    raise InvalidInputError(f"Invalid field description at position {index}")
                field_id = next((item[key] for key in FIELD_ID_KEYS if item.get(key)), f"field_{index}")
                normalised.append(Field(id=str(field_id), type=str(item.get("type") or "text")))
            return normalised

        if rows and isinstance(rows[0], Mapping):
            logger.info("No fields provided, inferring from row structure")
            first_row = rows[0]
            return [
                Field(id=str(key), type="number" if isinstance(value, (int, float)) and not isinstance(value, bool) else "text")
                for key, value in first_row.items()
            ]

        return []

    @staticmethod
    def _normalise_rows(rows: List[Any]) -> List[Dict[str, Any]]:
        if not all(isinstance(row, Mapping) for row in rows):
            raise InvalidInputError("Every row must be a JSON object")
        return [dict(row) for row in rows]

    # ========== Local files ==========

    def load_file(self, file_path: str, **kwargs) -> DatasetSnapshot:
        """
        Load a dataset from a local file with automatic format detection.

        Args:
            file_path: Path to a .csv, .tsv or .json file
            **kwargs: Extra reader arguments

        Returns:
            DatasetSnapshot

        Raises:
            FileNotFoundError: If the file doesn't exist
            InvalidInputError: If the format is unsupported or unreadable
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        suffix = path.suffix.lower()

        if suffix not in self.READERS:
            raise InvalidInputError(
                f"Unsupported file format: {suffix}. "
                f"Supported: {list(self.READERS.keys())}"
            )

        logger.info(f"Loading {suffix} file: {file_path}")

        reader_config = self.READERS[suffix]
        params = reader_config['params'].copy()

        if suffix in ['.csv', '.tsv']:
            params['encoding'] = self._detect_encoding(path)

        params.update(kwargs)

        try:
            with warnings.catch_warnings():
                warnings.simplefilter('ignore', category=pd.errors.DtypeWarning)
                df = reader_config['function'](path, **params)
        except (ValueError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise InvalidInputError(f"Failed to load {suffix} file: {str(e)}") from e

        df = self._clean_dataframe(df)
        logger.info(f"Successfully loaded {len(df)} rows, {len(df.columns)} columns")

        return DatasetSnapshot.from_dataframe(df, name=path.stem, source=str(path))

    def _detect_encoding(self, path: Path) -> str:
        """Detect file encoding from the first 10KB."""
        with open(path, 'rb') as f:
            raw_data = f.read(10000)

        result = chardet.detect(raw_data)
        encoding = result['encoding'] or self.DEFAULT_ENCODING

        if result['confidence'] > 0.7:
            return encoding
        return self.DEFAULT_ENCODING

    def _clean_dataframe(self, df: pd.DataFrame) -> pd.DataFrame:
        """Strip column names and drop completely empty columns."""
        df_clean = df.copy()

        df_clean.columns = df_clean.columns.astype(str).str.strip()

        empty_cols = df_clean.columns[df_clean.isna().all()].tolist()
        if empty_cols:
            logger.info(f"Removing empty columns: {empty_cols}")
            df_clean = df_clean.drop(columns=empty_cols)

        return df_clean
