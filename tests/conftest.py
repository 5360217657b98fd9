"""Fixtures partagées : base SQLite en mémoire avec données de référence."""

from collections.abc import Iterator

import pytest

from budgetmatch.store import SQLiteStore


@pytest.fixture
def store() -> Iterator[SQLiteStore]:
    s = SQLiteStore(":memory:")
    s.init_schema()
    s.add_province("เชียงใหม่", province_id="p-cm")
    s.add_province("ลำปาง", province_id="p-lp")
    s.add_province("น่าน", province_id="p-nan")
    s.add_hospital("โรงพยาบาลนครพิงค์", "p-cm", unit_id="h-nakornping")
    s.add_hospital("โรงพยาบาลลำปาง", "p-lp", unit_id="h-lampang")
    s.add_health_office("สำนักงานสาธารณสุขจังหวัดเชียงใหม่", "p-cm", unit_id="o-ssj-cm")
    s.seed_categories(17)
    yield s
    s.close()
