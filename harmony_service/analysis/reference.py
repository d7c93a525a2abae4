"""
Reference tables module.

Gender-specific ideal value (or acceptable range), tolerance and weight for
every metric. The table is data, not logic: it is built or loaded once at
startup, then injected into the scoring engine as an immutable object.

Tolerance is the deviation from the ideal (in the metric's own unit) at
which a score has dropped to 90.
"""

import json
import math
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from ..config import Config
from ..errors import ReferenceTableError, UnknownMetricError
from ..logging_config import get_logger
from .metrics import METRIC_IDS
from .models import GENDERS

logger = get_logger(__name__)

Ideal = Union[float, Tuple[float, float]]


@dataclass(frozen=True)
class ReferenceEntry:
    metric_id: str
    gender: str
    ideal: Ideal
    weight: float
    tolerance: float

    def __post_init__(self):
        if self.gender not in GENDERS:
            raise ReferenceTableError(f'{self.metric_id}: unknown gender {self.gender!r}')

        if isinstance(self.ideal, (list, tuple)):
            if len(self.ideal) != 2:
                raise ReferenceTableError(f'{self.metric_id}: ideal range needs 2 bounds')
            low, high = float(self.ideal[0]), float(self.ideal[1])
            if low > high:
                raise ReferenceTableError(f'{self.metric_id}: ideal range {low} > {high}')
            object.__setattr__(self, 'ideal', (low, high))
        else:
            object.__setattr__(self, 'ideal', float(self.ideal))

        if not all(math.isfinite(bound) for bound in self.bounds):
            raise ReferenceTableError(f'{self.metric_id}: ideal must be finite')

        if not (math.isfinite(self.weight) and self.weight > 0):
            raise ReferenceTableError(f'{self.metric_id}: weight must be > 0')
        if not (math.isfinite(self.tolerance) and self.tolerance > 0):
            raise ReferenceTableError(f'{self.metric_id}: tolerance must be > 0')

    @property
    def is_range(self) -> bool:
        return isinstance(self.ideal, tuple)

    @property
    def bounds(self) -> Tuple[float, float]:
        if isinstance(self.ideal, tuple):
            return self.ideal
        return (self.ideal, self.ideal)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metric': self.metric_id,
            'gender': self.gender,
            'ideal': list(self.ideal) if self.is_range else self.ideal,
            'weight': self.weight,
            'tolerance': self.tolerance,
        }


class ReferenceTables:
    """
    Immutable lookup of ReferenceEntry rows keyed by (metric_id, gender).

    Tests and deployments can build alternate tables with from_entries()
    or from_json().
    """

    def __init__(self, entries: Iterable[ReferenceEntry]):
        table: Dict[Tuple[str, str], ReferenceEntry] = {}
        for entry in entries:
            key = (entry.metric_id, entry.gender)
            if key in table:
                raise ReferenceTableError(
                    f'duplicate reference entry for {entry.metric_id} ({entry.gender})'
                )
            table[key] = entry
        self._table: Mapping[Tuple[str, str], ReferenceEntry] = MappingProxyType(table)

    @classmethod
    def from_entries(cls, entries: Iterable[ReferenceEntry]) -> 'ReferenceTables':
        return cls(entries)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ReferenceTables':
        """
        Build tables from {'entries': [{metric, gender, ideal, weight, tolerance}, ...]}.

        Raises:
            ReferenceTableError: Malformed data
        """
        rows = data.get('entries') if isinstance(data, Mapping) else None
        if not isinstance(rows, list):
            raise ReferenceTableError("reference data needs an 'entries' list")

        entries: List[ReferenceEntry] = []
        for i, row in enumerate(rows):
            try:
                entries.append(ReferenceEntry(
                    metric_id=str(row['metric']),
                    gender=str(row['gender']),
                    ideal=row['ideal'],
                    weight=float(row.get('weight', 1.0)),
                    tolerance=float(row['tolerance']),
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise ReferenceTableError(f'reference entry {i} is malformed: {e}') from e
        return cls(entries)

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'ReferenceTables':
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ReferenceTableError(f'cannot read reference tables from {path}: {e}') from e
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {'entries': [entry.to_dict() for entry in self._table.values()]}

    def lookup(self, metric_id: str, gender: str) -> ReferenceEntry:
        """
        Raises:
            UnknownMetricError: No entry for this metric and gender
        """
        entry = self._table.get((metric_id, gender))
        if entry is None:
            raise UnknownMetricError(f'no reference entry for {metric_id!r} ({gender})')
        return entry

    def missing(self, metric_ids: Iterable[str]) -> List[Tuple[str, str]]:
        """Return (metric_id, gender) pairs with no entry."""
        return [
            (metric_id, gender)
            for metric_id in metric_ids
            for gender in GENDERS
            if (metric_id, gender) not in self._table
        ]

    def __contains__(self, key: Tuple[str, str]) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self):
        return iter(self._table.values())


# metric id -> gender -> (ideal, weight, tolerance)
_DEFAULT_TABLE: Dict[str, Dict[str, Tuple[Ideal, float, float]]] = {
    'facial_thirds': {
        'male': ((1.00, 1.10), 1.5, 0.08),
        'female': ((0.95, 1.05), 1.5, 0.08),
    },
    'facial_width_to_height': {
        'male': ((1.85, 2.05), 1.5, 0.12),
        'female': ((1.75, 1.95), 1.25, 0.12),
    },
    'bigonial_bizygomatic': {
        'male': ((0.75, 0.90), 1.25, 0.06),
        'female': ((0.70, 0.82), 1.0, 0.06),
    },
    'nasal_index': {
        'male': ((0.65, 0.80), 1.0, 0.08),
        'female': ((0.60, 0.75), 1.0, 0.08),
    },
    'lip_fullness': {
        'male': ((1.40, 1.80), 0.75, 0.25),
        'female': ((1.30, 1.70), 1.0, 0.25),
    },
    'philtrum_to_lip': {
        'male': ((1.60, 2.40), 0.75, 0.30),
        'female': ((1.40, 2.00), 1.0, 0.30),
    },
    'eye_width_to_ipd': {
        'male': ((0.43, 0.50), 1.0, 0.04),
        'female': ((0.45, 0.52), 1.0, 0.04),
    },
    'canthal_tilt': {
        'male': ((3.0, 7.0), 1.0, 3.0),
        'female': ((4.0, 8.0), 1.25, 3.0),
    },
    'jaw_angle': {
        'male': ((120.0, 132.0), 1.25, 6.0),
        'female': ((124.0, 136.0), 1.0, 6.0),
    },
    'jaw_symmetry': {
        'male': (0.0, 1.5, 0.03),
        'female': (0.0, 1.5, 0.03),
    },
    'eyebrow_symmetry': {
        'male': (0.0, 0.75, 0.03),
        'female': (0.0, 0.75, 0.03),
    },
    'eye_symmetry': {
        'male': (0.0, 1.25, 0.03),
        'female': (0.0, 1.25, 0.03),
    },
    'mouth_symmetry': {
        'male': (0.0, 1.0, 0.03),
        'female': (0.0, 1.0, 0.03),
    },
}


def default_reference_tables() -> ReferenceTables:
    """Build the shipped reference tables."""
    return ReferenceTables(
        ReferenceEntry(metric_id, gender, ideal, weight, tolerance)
        for metric_id, by_gender in _DEFAULT_TABLE.items()
        for gender, (ideal, weight, tolerance) in by_gender.items()
    )


def load_reference_tables(config: Config) -> ReferenceTables:
    """
    Load reference tables for the service.

    Uses config.reference_table_file when set, otherwise the shipped defaults.
    Logs (but does not fail on) metrics the tables do not cover; scoring such
    a metric raises UnknownMetricError.
    """
    if config.reference_table_file:
        logger.info(f'Loading reference tables from {config.reference_table_file}')
        tables = ReferenceTables.from_json(config.reference_table_file)
    else:
        tables = default_reference_tables()

    missing = tables.missing(METRIC_IDS)
    if missing:
        logger.error(f'Reference tables incomplete, missing: {missing}')
    else:
        logger.info(f'✅ Reference tables loaded ({len(tables)} entries)')

    return tables
