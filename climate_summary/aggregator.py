"""
Per-region aggregation of climate observations.

Every accepted observation is folded into a running accumulator for its
region code, so memory stays constant regardless of input size.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Optional

from .exceptions import CapacityExceeded
from .models import Observation

logger = logging.getLogger(__name__)


@dataclass
class CompensatedSum:
    """Neumaier-compensated running sum of floats."""

    total: float = 0.0
    compensation: float = 0.0

    def add(self, value: float) -> None:
        t = self.total + value
        if abs(self.total) >= abs(value):
            self.compensation += (self.total - t) + value
        else:
            self.compensation += (value - t) + self.total
        self.total = t

    @property
    def value(self) -> float:
        return self.total + self.compensation


@dataclass(frozen=True)
class RegionSummary:
    """Read-only view of one region's statistics, handed to reporting."""

    code: str
    record_count: int
    humidity_sum: float
    cloud_cover_sum: float
    temperature_sum: float
    lightning_count: int
    snow_count: int
    max_temp: float
    max_temp_at: Optional[int]
    min_temp: float
    min_temp_at: Optional[int]

    def _mean(self, total: float) -> Optional[float]:
        if self.record_count == 0:
            return None
        return total / self.record_count

    @property
    def mean_humidity(self) -> Optional[float]:
        return self._mean(self.humidity_sum)

    @property
    def mean_cloud_cover(self) -> Optional[float]:
        return self._mean(self.cloud_cover_sum)

    @property
    def mean_temperature(self) -> Optional[float]:
        """Mean surface temperature in Kelvin."""
        return self._mean(self.temperature_sum)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class RegionAccumulator:
    """
    Running statistics for a single region code.

    Extremes are replaced only on strict improvement, so when two
    observations share the extreme value the first one applied keeps
    its timestamp.
    """

    code: str
    record_count: int = 0
    lightning_count: int = 0
    snow_count: int = 0
    max_temp: float = float("-inf")
    max_temp_at: Optional[int] = None
    min_temp: float = float("inf")
    min_temp_at: Optional[int] = None
    _humidity: CompensatedSum = field(default_factory=CompensatedSum, repr=False)
    _cloud_cover: CompensatedSum = field(default_factory=CompensatedSum, repr=False)
    _temperature: CompensatedSum = field(default_factory=CompensatedSum, repr=False)

    @property
    def humidity_sum(self) -> float:
        return self._humidity.value

    @property
    def cloud_cover_sum(self) -> float:
        return self._cloud_cover.value

    @property
    def temperature_sum(self) -> float:
        return self._temperature.value

    def apply(self, observation: Observation) -> None:
        """
        Fold one observation into the running statistics.

        Args:
            observation: Validated observation for this region
        """
        self.record_count += 1
        self._humidity.add(observation.humidity)
        self._cloud_cover.add(observation.cloud_cover)
        self._temperature.add(observation.temperature)
        if observation.lightning:
            self.lightning_count += 1
        if observation.snow:
            self.snow_count += 1

        if observation.temperature > self.max_temp:
            self.max_temp = observation.temperature
            self.max_temp_at = observation.timestamp_s
        if observation.temperature < self.min_temp:
            self.min_temp = observation.temperature
            self.min_temp_at = observation.timestamp_s

    def merge(self, other: "RegionAccumulator") -> None:
        """
        Fold another accumulator for the same code into this one.

        Ties on an extreme keep this accumulator's value and timestamp.

        Args:
            other: Accumulator built from a later shard of the input
        """
        if other.code != self.code:
            raise ValueError(f"Cannot merge region {other.code!r} into {self.code!r}")

        self.record_count += other.record_count
        self.lightning_count += other.lightning_count
        self.snow_count += other.snow_count
        for mine, theirs in (
            (self._humidity, other._humidity),
            (self._cloud_cover, other._cloud_cover),
            (self._temperature, other._temperature),
        ):
            mine.add(theirs.total)
            mine.add(theirs.compensation)

        if other.max_temp > self.max_temp:
            self.max_temp = other.max_temp
            self.max_temp_at = other.max_temp_at
        if other.min_temp < self.min_temp:
            self.min_temp = other.min_temp
            self.min_temp_at = other.min_temp_at

    def snapshot(self) -> RegionSummary:
        return RegionSummary(
            code=self.code,
            record_count=self.record_count,
            humidity_sum=self.humidity_sum,
            cloud_cover_sum=self.cloud_cover_sum,
            temperature_sum=self.temperature_sum,
            lightning_count=self.lightning_count,
            snow_count=self.snow_count,
            max_temp=self.max_temp,
            max_temp_at=self.max_temp_at,
            min_temp=self.min_temp,
            min_temp_at=self.min_temp_at,
        )


class AggregationTable:
    """Owns every region accumulator, keyed by code in insertion order."""

    def __init__(self, max_regions: Optional[int] = None):
        """
        Initialize table.

        Args:
            max_regions: Maximum number of distinct region codes,
                or None for no limit
        """
        if max_regions is not None and max_regions < 1:
            raise ValueError(f"max_regions must be positive, got {max_regions}")
        self.max_regions = max_regions
        self._regions: Dict[str, RegionAccumulator] = {}

    def __len__(self) -> int:
        return len(self._regions)

    def __contains__(self, code: str) -> bool:
        return code in self._regions

    def __iter__(self) -> Iterator[RegionSummary]:
        return iter(self.all())

    @property
    def regions(self) -> List[str]:
        """Region codes in insertion order."""
        return list(self._regions)

    def find_or_create(self, code: str) -> RegionAccumulator:
        """
        Look up the accumulator for a code, creating it on first sight.

        Codes are matched exactly as received; no case folding.

        Args:
            code: Region code

        Returns:
            The accumulator owned by this table for the code

        Raises:
            CapacityExceeded: Code is new and max_regions is reached
        """
        accumulator = self._regions.get(code)
        if accumulator is not None:
            return accumulator

        if self.max_regions is not None and len(self._regions) >= self.max_regions:
            raise CapacityExceeded(code, self.max_regions)

        accumulator = RegionAccumulator(code=code)
        self._regions[code] = accumulator
        logger.debug(f"Created accumulator for region {code}")
        return accumulator

    def apply(self, accumulator: RegionAccumulator, observation: Observation) -> None:
        """
        Apply an observation to one of this table's accumulators.

        Args:
            accumulator: Accumulator returned by find_or_create
            observation: Observation with a matching region code
        """
        if self._regions.get(accumulator.code) is not accumulator:
            raise ValueError(f"Accumulator for {accumulator.code!r} is not owned by this table")
        if observation.region_code != accumulator.code:
            raise ValueError(
                f"Observation for {observation.region_code!r} "
                f"applied to region {accumulator.code!r}"
            )
        accumulator.apply(observation)

    def add(self, observation: Observation) -> RegionAccumulator:
        """
        Route an observation to its region and apply it.

        Raises:
            CapacityExceeded: Region is new and the table is full
        """
        accumulator = self.find_or_create(observation.region_code)
        accumulator.apply(observation)
        return accumulator

    def merge(self, other: "AggregationTable") -> None:
        """
        Combine a table built from another shard of the input.

        Regions unseen here are appended in the other table's order.

        Args:
            other: Table to fold into this one; left unchanged

        Raises:
            CapacityExceeded: Merging would exceed max_regions
        """
        new_codes = [code for code in other._regions if code not in self._regions]
        if self.max_regions is not None and len(self._regions) + len(new_codes) > self.max_regions:
            raise CapacityExceeded(new_codes[0], self.max_regions)

        for code, theirs in other._regions.items():
            self.find_or_create(code).merge(theirs)

    def all(self) -> List[RegionSummary]:
        """
        Snapshot every region in insertion order.

        Returns:
            List of immutable RegionSummary objects
        """
        return [accumulator.snapshot() for accumulator in self._regions.values()]
