"""Shared test fixtures."""

from pathlib import Path

import pytest

from barsgen.config import PatternConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_config_path() -> Path:
    return FIXTURES_DIR / "sample_config.json"


@pytest.fixture
def config() -> PatternConfig:
    return PatternConfig(
        output_format="mp4",
        output_target="out.mp4",
        header="Test Header",
        ffmpeg="ffmpeg",
    )


@pytest.fixture
def logo_path(tmp_path: Path) -> Path:
    path = tmp_path / "logo.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    return path
