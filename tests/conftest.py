"""
Pytest configuration and fixtures for climate summary tests.
"""
import pytest

from climate_summary import config as config_module
from climate_summary.config import ClimateConfig


CA_LINE = "CA\t1428300000000\t9prcjqk3yc80\t93.0\t0.0\t100.0\t0.0\t95644.0\t277.58716\n"


def make_line(
    code="WA",
    timestamp_ms=1428300000000,
    geohash="c23nb62w20sz",
    humidity=50.0,
    snow=0.0,
    cloud_cover=25.0,
    lightning=0.0,
    pressure=101325.0,
    temperature=280.0,
):
    """Build a TDV line from field values."""
    fields = [
        code, timestamp_ms, geohash, humidity, snow,
        cloud_cover, lightning, pressure, temperature,
    ]
    return "\t".join(str(f) for f in fields) + "\n"


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    """Keep the cached global config and CLIMATE_* env out of each test."""
    for name in ("CLIMATE_MAX_LINE_LENGTH", "CLIMATE_MAX_REGIONS",
                 "CLIMATE_REPORT_FORMAT", "CLIMATE_LOG_LEVEL", "CLIMATE_ENCODING"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_config", None)
    yield
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
def config():
    """Default configuration, independent of any .env file."""
    return ClimateConfig(_env_file=None)


@pytest.fixture
def ca_line():
    """The CA sample record from the NOAA export."""
    return CA_LINE


@pytest.fixture
def sample_tn_lines():
    """A handful of TN records, one of them invalid."""
    return [
        make_line("TN", 1438599600000, "dn4h3ebsbxbp", 40.0, 0.0, 10.0, 1.0, 98000.0, 316.70),
        make_line("TN", 1424404800000, "dn4h3ebsbxbp", 80.0, 1.0, 90.0, 0.0, 101000.0, 249.20),
        make_line("TN", 1430000000000, "dn4h3ebsbxbp", 150.0, 0.0, 50.0, 0.0, 100000.0, 290.00),
        make_line("TN", 1431000000000, "dn4h3ebsbxbp", 60.0, 0.0, 50.0, 1.0, 100500.0, 290.00),
    ]


@pytest.fixture
def write_tdv(tmp_path):
    """Write lines to a TDV file under tmp_path and return its path."""
    def _write(name, lines):
        path = tmp_path / name
        path.write_text("".join(lines), encoding="utf-8")
        return path
    return _write
