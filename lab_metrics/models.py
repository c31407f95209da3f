# lab_metrics/models.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import enum

class Domain(enum.Enum):
    """Metric domains served by the dashboard.

    Values:
        SALES ('sales'): sell-out and sell-in quantities and amounts
        STOCK ('stock'): stock levels and stock value against sales
        STOCK_BREAK ('stock_break'): ordered quantities not delivered
        PRICING ('pricing'): average prices, margins and distinct counts
    """
    SALES = 'sales'
    STOCK = 'stock'
    STOCK_BREAK = 'stock_break'
    PRICING = 'pricing'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> 'Domain':
        """Create a Domain from its string value.

        Args:
            value: String value ('sales', 'stock', 'stock_break', 'pricing');
                   dashes are accepted in place of underscores

        Returns:
            Domain enum value

        Raises:
            ValueError if the string value is not valid
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace('-', '_'))
        except ValueError:
            valid = ', '.join(d.value for d in cls)
            raise ValueError(f"Invalid domain: {value}. Valid values are: {valid}")

class FieldKind(enum.Enum):
    """How a numeric field aggregates across months."""
    SUM = 'sum'    # additive flow (quantities, amounts)
    MEAN = 'mean'  # level or per-unit average (stock on hand, prices, distinct counts)

class Provenance(enum.Enum):
    """Origin of a forecast series entry."""
    ACTUAL = 'Actual'
    PRIOR_YEAR_FALLBACK = 'PriorYearFallback'
    EMPTY = 'Empty'

    def __str__(self):
        return self.value

@dataclass(frozen=True)
class MonthlyRecord:
    """One observation for one calendar month of one domain."""
    month: str
    values: Dict[str, float] = field(default_factory=dict)

    def get(self, name: str) -> float:
        return self.values.get(name, 0.0)

    def with_month(self, month: str) -> 'MonthlyRecord':
        """Copy of the record labelled with another month, values untouched."""
        return MonthlyRecord(month=month, values=dict(self.values))

    def to_dict(self) -> Dict:
        data = {'month': self.month}
        data.update(self.values)
        return data

@dataclass(frozen=True)
class ForecastEntry:
    record: MonthlyRecord
    provenance: Provenance

    def to_dict(self) -> Dict:
        data = self.record.to_dict()
        data['provenance'] = self.provenance.value
        return data

@dataclass(frozen=True)
class PeriodTotals:
    """Aggregates for the three baselines of one domain.

    ``comparison`` covers the prior year restricted to the elapsed months of
    the current year; ``global_`` covers the full prior year. ``adjusted`` is
    an alias of ``comparison``.
    """
    current: Dict[str, float]
    comparison: Dict[str, float]
    global_: Dict[str, float]

    @property
    def adjusted(self) -> Dict[str, float]:
        return self.comparison

@dataclass(frozen=True)
class ForecastState:
    percentage: float
    projected_totals: Dict[str, float]

@dataclass(frozen=True)
class MetricSet:
    """Aggregated totals together with the ratios derived from them."""
    totals: Dict[str, float]
    ratios: Dict[str, float]

    def value(self, name: str) -> float:
        if name in self.ratios:
            return self.ratios[name]
        return self.totals.get(name, 0.0)

    def to_dict(self) -> Dict[str, float]:
        data = dict(self.totals)
        data.update(self.ratios)
        return data

@dataclass(frozen=True)
class Evolution:
    """Percentage change between a comparison value and a current value."""
    value: Optional[float]
    label: str

    @property
    def is_available(self) -> bool:
        return self.value is not None

    @property
    def is_positive(self) -> bool:
        return self.value is not None and self.value >= 0

    def to_dict(self) -> Dict:
        return {'value': self.value, 'label': self.label}

@dataclass(frozen=True)
class DomainMetrics:
    """Everything the presentation layer needs for one domain."""
    domain: Domain
    current: MetricSet
    adjusted: MetricSet
    global_: MetricSet
    forecast: MetricSet
    forecast_percentage: float
    series: Tuple[ForecastEntry, ...]
    evolutions: Dict[str, Dict[str, Evolution]]
    dropped_records: int = 0

    def to_dict(self) -> Dict:
        return {
            'domain': self.domain.value,
            'forecast_percentage': self.forecast_percentage,
            'current': self.current.to_dict(),
            'adjusted': self.adjusted.to_dict(),
            'global': self.global_.to_dict(),
            'forecast': self.forecast.to_dict(),
            'series': [entry.to_dict() for entry in self.series],
            'evolutions': {
                name: {kind: evo.label for kind, evo in pair.items()}
                for name, pair in self.evolutions.items()
            },
            'dropped_records': self.dropped_records,
        }

@dataclass(frozen=True)
class FilterSelection:
    """Active filter selection sent to the record queries."""
    distributors: Tuple[str, ...] = ()
    ranges: Tuple[str, ...] = ()
    universes: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    sub_categories: Tuple[str, ...] = ()
    brands: Tuple[str, ...] = ()
    families: Tuple[str, ...] = ()
    sub_families: Tuple[str, ...] = ()
    specificities: Tuple[str, ...] = ()
    pharmacies: Tuple[str, ...] = ()
    ean13_products: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict) -> 'FilterSelection':
        """Build a selection from a dict of lists; unknown keys are ignored."""
        kwargs = {}
        for name in cls.__dataclass_fields__:
            values = data.get(name) or ()
            if isinstance(values, str):
                values = (values,)
            kwargs[name] = tuple(str(v) for v in values)
        return cls(**kwargs)

    def is_empty(self) -> bool:
        # Pharmacies alone narrow the scope but do not select products
        return not any(
            getattr(self, name) for name in self.__dataclass_fields__
            if name != 'pharmacies'
        )

    def to_dict(self) -> Dict[str, List[str]]:
        return {name: list(getattr(self, name)) for name in self.__dataclass_fields__}

@dataclass(frozen=True)
class YearBuckets:
    """Records of the current and prior year keyed by month number (1..12).

    ``malformed`` holds the month values of records dropped because their
    month could not be parsed; ``duplicates`` the month keys seen more than
    once (the last record wins).
    """
    current: Dict[int, MonthlyRecord]
    prior: Dict[int, MonthlyRecord]
    malformed: Tuple = ()
    duplicates: Tuple[str, ...] = ()

    @property
    def dropped(self) -> int:
        return len(self.malformed)
