"""Configuration for totals computation"""

from dataclasses import dataclass, field, fields, asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from ..exceptions import ConfigError


class TotalsMode(str, Enum):
    """Output cell semantics"""
    PERCENT = "percent"
    COUNT = "count"


@dataclass
class TotalsConfig:
    """
    Options controlling how weighted sums are turned into a table

    Attributes:
        mode: percent of the (group, weight) base, or raw weighted counts
        include_unweighted: add a uniform-weight estimate ahead of the weights
        by_total: with a grouping variable, prepend the ungrouped estimate
        digits: decimal places for percent cells (round half up)
        weight_names: display names for the weight columns, in weight order
        missing_in_base: count the Missing row in the percentage base
        missing_labels: source labels that mean Missing (e.g. "Refused")
        missing_label: display label of the Missing row/column
        total_label: display label of the overall column
        unweighted_label: display label of the unweighted estimate
        parallel: aggregate weights concurrently
        max_workers: thread pool size when parallel
    """
    mode: TotalsMode = TotalsMode.PERCENT
    include_unweighted: bool = False
    by_total: bool = False
    digits: int = 1
    weight_names: Optional[List[str]] = None
    missing_in_base: bool = False
    missing_labels: List[Any] = field(default_factory=list)
    missing_label: str = "Missing"
    total_label: str = "Total"
    unweighted_label: str = "Unweighted"
    parallel: bool = False
    max_workers: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.mode, str) and not isinstance(self.mode, TotalsMode):
            try:
                self.mode = TotalsMode(self.mode.lower())
            except ValueError:
                valid = [m.value for m in TotalsMode]
                raise ConfigError(f"Unknown mode {self.mode!r}; expected one of {valid}")
        if self.weight_names is not None:
            self.weight_names = list(self.weight_names)
        self.missing_labels = list(self.missing_labels or [])

    @classmethod
    def from_dict(cls, options: Optional[Dict[str, Any]]) -> 'TotalsConfig':
        """Build a config from a plain mapping, rejecting unknown keys"""
        options = dict(options or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(options) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration options: {unknown}")
        return cls(**options)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['mode'] = self.mode.value
        return data

    def replace(self, **changes) -> 'TotalsConfig':
        """Return a copy with the given options changed"""
        data = self.to_dict()
        data.update(changes)
        return TotalsConfig.from_dict(data)

    def validate(self, weights: Optional[Sequence[str]] = None) -> None:
        """
        Reject contradictory configuration before computation begins

        Args:
            weights: weight column names of the call, for weight_names checks

        Raises:
            ConfigError: if any option is out of range or inconsistent
        """
        if not isinstance(self.mode, TotalsMode):
            raise ConfigError(f"Unknown mode {self.mode!r}")

        if isinstance(self.digits, bool) or not isinstance(self.digits, int):
            raise ConfigError(f"digits must be an integer, got {self.digits!r}")
        if self.digits < 0:
            raise ConfigError(f"digits must be >= 0, got {self.digits}")

        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError(f"max_workers must be >= 1, got {self.max_workers}")

        labels = [self.missing_label, self.total_label, self.unweighted_label]
        if len(set(labels)) != len(labels):
            raise ConfigError(f"Display labels must be distinct, got {labels}")

        if self.weight_names is not None:
            if weights is not None and len(self.weight_names) != len(weights):
                raise ConfigError(
                    f"weight_names has {len(self.weight_names)} entries "
                    f"but {len(weights)} weights were given"
                )
            if len(set(self.weight_names)) != len(self.weight_names):
                raise ConfigError(f"weight_names must be unique: {self.weight_names}")
            if self.unweighted_label in self.weight_names and self.include_unweighted:
                raise ConfigError(
                    f"weight name {self.unweighted_label!r} collides with the unweighted column"
                )

    def display_names(self, weights: Sequence[str]) -> List[str]:
        """Display name for each weight column, in weight order"""
        if self.weight_names is None:
            return list(weights)
        return list(self.weight_names)


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file

    The file may hold a ``totals:`` section (``TotalsConfig`` options) and a
    ``levels:`` section mapping column names to their ordered levels.
    """
    path = Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {path} must contain a mapping")

    for section in ('totals', 'levels'):
        if section in data and data[section] is not None and not isinstance(data[section], dict):
            raise ConfigError(f"Section '{section}' in {path} must be a mapping")

    return data
