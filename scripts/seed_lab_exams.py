"""
Carga el catálogo de exámenes de laboratorio desde un CSV.

Uso:
    python scripts/seed_lab_exams.py data/laboratory_exams.csv

Columnas: code, name, price, category, description, result_time, preparation.
El precio admite el formato de las planillas ("S/ 1,234.50").
Hace upsert por código: si el examen existe se actualiza, si no se crea.
"""

import asyncio
import csv
import sys
from pathlib import Path

from sqlalchemy import select

from hah_erp.database import async_session_factory, engine
from hah_erp.models.lab import LabExam
from hah_erp.services.billing import parse_legacy_price

FIELDS = ("name", "category", "description", "result_time", "preparation")


def read_rows(csv_path: Path) -> list[dict]:
    with open(csv_path, newline="", encoding="utf-8-sig") as f:
        return [row for row in csv.DictReader(f) if (row.get("code") or "").strip()]


async def seed_exams(csv_path: Path) -> None:
    rows = read_rows(csv_path)
    print(f"Leyendo {len(rows)} exámenes desde {csv_path.name}...")

    created = 0
    updated = 0
    async with async_session_factory() as db:
        for row in rows:
            code = row["code"].strip()
            values = {field: (row.get(field) or "").strip() or None for field in FIELDS}
            values["price"] = parse_legacy_price(row.get("price"))
            if not values["name"]:
                print(f"  Omitido {code}: sin nombre")
                continue

            result = await db.execute(select(LabExam).where(LabExam.code == code))
            exam = result.scalar_one_or_none()
            if exam:
                for key, value in values.items():
                    setattr(exam, key, value)
                updated += 1
            else:
                db.add(LabExam(code=code, **values))
                created += 1

        await db.commit()

    await engine.dispose()
    print(f"Listo: {created} creados, {updated} actualizados.")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    path = Path(sys.argv[1])
    if not path.exists():
        print(f"ERROR: No se encontró el archivo {path}")
        sys.exit(1)
    asyncio.run(seed_exams(path))
