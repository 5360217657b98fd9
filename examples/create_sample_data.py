"""Crée une base de référence et un fichier de budgets de démonstration pour budgetmatch."""

import json
from pathlib import Path

import pandas as pd

from budgetmatch.regions import PROVINCE_TO_REGION
from budgetmatch.store import SQLiteStore

DATA_DIR = Path(__file__).parent / "data"
DATA_DIR.mkdir(exist_ok=True)

db_path = DATA_DIR / "budgets.sqlite"
with SQLiteStore(db_path) as store:
    store.init_schema()
    provinces = store.seed_provinces(PROVINCE_TO_REGION)
    store.seed_categories(17)
    store.add_hospital("โรงพยาบาลนครพิงค์", provinces["เชียงใหม่"])
    store.add_hospital("โรงพยาบาลลำปาง", provinces["ลำปาง"])
    store.add_hospital("โรงพยาบาลชุมชนสันทราย", provinces["เชียงใหม่"])
    store.add_health_office("สำนักงานสาธารณสุขจังหวัดเชียงใหม่", provinces["เชียงใหม่"], "region-1")
    store.add_health_office("สำนักงานสาธารณสุขจังหวัดน่าน", provinces["น่าน"], "region-1")

header = ["ชื่อหน่วยงาน", "จังหวัด", *[str(i) for i in range(1, 18)]]
budgets = pd.DataFrame([
    header,
    ["โรงพยาบาลนครพิงค", "เชียงใหม่", 150000, 20000, 35000],
    ["รพช.สันทราย", "เชียงใหม่", 50000],
    ["สสจ.เชียงใหม่", "เชียงใหม่", 80000, 12000],
    ["สสจ. น่าน", "จ.น่าน", 60000],
    ["โรงพยาบาลลำปาง", "", 120000, 0, 15000],
    ["โรงพยาบาลที่ไม่มีในระบบ", "ตาก", 1000],
])
budgets.to_excel(DATA_DIR / "budgets.xlsx", header=False, index=False, engine="openpyxl")

(DATA_DIR / "config.json").write_text(
    json.dumps({"database": "budgets.sqlite", "similarity_threshold": 70}, indent=4),
    encoding="utf-8",
)
print(f"Fichiers créés dans {DATA_DIR}")
