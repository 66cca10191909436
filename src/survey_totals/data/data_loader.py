"""Load survey tables and their level metadata"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
import yaml

from ..exceptions import ConfigError, SchemaError

logger = logging.getLogger(__name__)


class SurveyDataLoader:
    """
    Load survey rows from CSV or JSON

    Category level order is never read from the data; it comes from a
    ``levels`` mapping (column -> ordered labels), typically the ``levels:``
    section of a YAML file.
    """

    def __init__(self, levels: Optional[Dict[str, List[Any]]] = None):
        self.levels = dict(levels or {})

    def load(self, path: Union[str, Path]) -> pd.DataFrame:
        """
        Load a table

        Only empty cells are read as missing; labels such as "None" or "NA"
        stay real categories unless mapped through ``missing_labels``.
        Columns whose declared levels are all strings are read as strings.
        """
        path = Path(path)
        if not path.exists():
            raise SchemaError(f"Input file {path} does not exist")

        suffix = path.suffix.lower()
        if suffix == '.csv':
            header = pd.read_csv(path, nrows=0).columns
            df = pd.read_csv(path, keep_default_na=False, na_values=[''],
                             dtype=self._string_columns(header))
        elif suffix == '.json':
            df = pd.read_json(path, orient='records')
        else:
            raise SchemaError(f"Unsupported input format '{suffix}' for {path}")

        logger.info(f"Loaded {len(df)} rows and {len(df.columns)} columns from {path}")
        return df

    def _string_columns(self, columns) -> Dict[str, type]:
        """Columns with all-string levels, read with ``dtype=str``"""
        return {
            column: str for column, levels in self.levels.items()
            if column in columns and levels and all(isinstance(l, str) for l in levels)
        }

    def levels_for(self, column: str) -> Optional[List[Any]]:
        return self.levels.get(column)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'SurveyDataLoader':
        """Read a ``levels:`` section (or a bare mapping) from YAML"""
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Levels file {path} must contain a mapping")
        levels = data.get('levels', data)
        for column, values in levels.items():
            if not isinstance(values, list):
                raise ConfigError(f"Levels for '{column}' in {path} must be a list")
        return cls(levels=levels)

    def save_levels(self, path: Union[str, Path]) -> None:
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump({'levels': self.levels}, f, sort_keys=False, allow_unicode=True)
