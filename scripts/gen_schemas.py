# scripts/gen_schemas.py
"""
Export JSON Schemas of the Rotaplan data contracts.

The configuration form and the grid renderer exchange RegimeParameters and
DaySchedule payloads with the planner; these schemas describe them.

Output directory: schemas/ (or the directory passed as first argument)
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

from pydantic import BaseModel

from rotaplan.schemas.models import Config, DaySchedule, RegimeParameters

SCHEMAS: dict[str, type[BaseModel]] = {
    "regime": RegimeParameters,
    "day_schedule": DaySchedule,
    "config": Config,
}


def export_schema(model_cls: type[BaseModel], name: str, out_dir: Path) -> Path:
    """
    @brief
    Write "<name>.schema.json" for one pydantic model.

    @details
    Aliased models (RegimeParameters) are exported in "serialization" mode so
    the schema lists the snake_case names the planner emits.

    @returns
        Path of the written schema file.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    schema_path = (out_dir / f"{name}.schema.json").resolve()
    schema = model_cls.model_json_schema(by_alias=False, mode="serialization")

    with schema_path.open("w", encoding="utf-8") as f:
        json.dump(schema, f, indent=2, ensure_ascii=False)
        f.write("\n")
    return schema_path


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    out_dir = Path(args[0] if args else "schemas").resolve()

    for name, model_cls in SCHEMAS.items():
        path = export_schema(model_cls, name, out_dir)
        print(f"Generated {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
