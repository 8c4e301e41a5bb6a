from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def counter_path() -> Path:
	return FIXTURES / "Counter.cs"


@pytest.fixture
def counter_source(counter_path: Path) -> str:
	return counter_path.read_text()
