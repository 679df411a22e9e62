import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from chatfeed.settings import ScrollSettings  # noqa: E402


@pytest.fixture
def small_settings() -> ScrollSettings:
    """Settings giving an 8-row limit for a 200px viewport."""
    return ScrollSettings(
        buffer_ratio=0.75,
        query_factor=2.0,
        estimated_row_height=50.0,
        min_page_size=5,
        default_viewport_height=200.0,
    )
