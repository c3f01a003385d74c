"""
Observation schema

One validated TDV record. Field constraints mirror the NOAA export:
percentages are bounded to [0, 100] and surface temperature is in Kelvin.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator


# Field order of a TDV line
TDV_FIELDS = (
    "region_code",
    "timestamp_ms",
    "geohash",
    "humidity",
    "snow",
    "cloud_cover",
    "lightning",
    "pressure",
    "temperature",
)

# Last millisecond of year 9999 UTC
MAX_TIMESTAMP_MS = 253402300799999

# Fields whose bound violations are range errors rather than shape errors
RANGE_CHECKED_FIELDS = ("humidity", "cloud_cover", "temperature")


class Observation(BaseModel):
    """A single parsed and range-checked climate observation."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)
    
    region_code: str = Field(min_length=1, max_length=2, pattern=r"^\S+$")
    timestamp_ms: int = Field(ge=0, le=MAX_TIMESTAMP_MS, description="Milliseconds since epoch")
    geohash: str = Field(min_length=1, max_length=12, pattern=r"^\S+$")
    humidity: float = Field(ge=0, le=100, description="Relative humidity (%)")
    snow: bool = Field(description="Snow present")
    cloud_cover: float = Field(ge=0, le=100, description="Cloud cover (%)")
    lightning: bool = Field(description="Lightning strike")
    pressure: float = Field(description="Surface pressure (Pa)")
    temperature: float = Field(ge=0, description="Surface temperature (K)")
    
    @field_validator("snow", "lightning", mode="before")
    @classmethod
    def _flag_from_number(cls, value):
        """Numeric flags count as present when > 0; nothing else is checked."""
        if isinstance(value, bool):
            return value
        number = float(value)
        if number != number:
            raise ValueError("flag is not a number")
        return number > 0
    
    @property
    def timestamp_s(self) -> int:
        """Timestamp in whole seconds, sub-second precision discarded."""
        return self.timestamp_ms // 1000
