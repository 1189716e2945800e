"""
Pytest configuration and shared fixtures.
"""
import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from responsible_tool.engine import CollectingSink, MappingConfig

MAPPING_CSV = """rule_type,match_value,responsible_id,active,notes
default,,1,true,Sales desk
weekday,1,17,true,Monday handover
weekday,5,23,true,Friday handover
tag,wholesale,31,true,
tag,vip,40,false,paused
country,CY,23,true,
source,pos,31,true,
"""


@pytest.fixture
def mapping() -> MappingConfig:
    """Mapping with every section populated."""
    return MappingConfig(
        default_id="D1",
        by_weekday={"1": "MON", "5": "FRI", "3": "WED"},
        by_tag={"wholesale": "R2", "b2b": "R3"},
        by_country_code={"CY": "C1", "GR": "C2"},
        by_source={"pos": "S1"},
    )


@pytest.fixture
def sink() -> CollectingSink:
    return CollectingSink()


@pytest.fixture
def mapping_csv(tmp_path):
    """A small mapping table on disk."""
    path = tmp_path / "responsible_mapping.csv"
    path.write_text(MAPPING_CSV, encoding="utf-8")
    return path
