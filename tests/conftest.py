import pytest

from access_stats.services.parser import CombinedLogParser
from tests.samples import SCENARIO_LINES


@pytest.fixture
def parser():
    return CombinedLogParser()


@pytest.fixture
def scenario_log(tmp_path):
    path = tmp_path / "access.log"
    path.write_text("\n".join(SCENARIO_LINES) + "\n", encoding="utf-8")
    return path
