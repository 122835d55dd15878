from __future__ import annotations

import io
import json
from collections.abc import Sequence
from dataclasses import asdict

import pandas as pd

from ..domain.items import all_items
from ..domain.models import SCORED_DISCIPLINES, Customer, SkillCheck
from ..domain.ranking import classify_total, format_duration
from ..domain.scoring import discipline_score, item_score, overall_total
from ..domain.services import overall_rank, total_time_minutes

HISTORY_COLUMNS = [
    "SkillCheckID",
    "ImportedAt",
    "Total",
    "Rank",
    *[f"{d.label}" for d in SCORED_DISCIPLINES],
    *[f"{d.label} rank" for d in SCORED_DISCIPLINES],
    "TotalTime",
]


def _to_iso(val):
    if hasattr(val, "isoformat"):
        return val.isoformat()
    return val


def history_frame(checks: Sequence[SkillCheck]) -> pd.DataFrame:
    """One row per skill check with computed totals and ranks, newest first."""
    rows = []
    for check in checks:
        record = check.record
        row = {
            "SkillCheckID": check.id,
            "ImportedAt": check.imported_at,
            "Total": overall_total(record),
            "Rank": overall_rank(record),
            "TotalTime": format_duration(total_time_minutes(record)),
        }
        for d in SCORED_DISCIPLINES:
            score = discipline_score(record, d)
            row[d.label] = score
            row[f"{d.label} rank"] = classify_total(score, d)
        rows.append(row)
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def items_frame(checks: Sequence[SkillCheck]) -> pd.DataFrame:
    """Item-by-item scores, one column per skill check."""
    items = all_items()
    frame = pd.DataFrame(
        {
            "Discipline": [i.discipline.label for i in items],
            "Item": [i.id for i in items],
            "Label": [i.label for i in items],
            "Allocation": [i.allocation for i in items],
        }
    )
    for check in checks:
        frame[f"#{check.id} {check.imported_at:%Y-%m-%d}"] = [
            item_score(check.record, i) for i in items
        ]
    return frame


def make_json_export_payload(customer: Customer, checks: Sequence[SkillCheck]) -> str:
    history = history_frame(checks)
    payload = {
        "customer": {k: _to_iso(v) for k, v in asdict(customer).items()},
        "history": history.map(_to_iso).to_dict(orient="records"),
        "records": [
            {"skill_check_id": c.id, "imported_at": _to_iso(c.imported_at), "record": c.record}
            for c in checks
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


def make_xlsx_export_bytes(customer: Customer, checks: Sequence[SkillCheck]) -> bytes:
    """Workbook with a history sheet and an item-level sheet."""
    history = history_frame(checks)
    history["ImportedAt"] = history["ImportedAt"].map(_to_iso)

    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        history.to_excel(writer, index=False, sheet_name="History")
        items_frame(checks).to_excel(writer, index=False, sheet_name="Items")
        sheet = writer.sheets["History"]
        sheet.write(len(history) + 2, 0, f"{customer.name} ({customer.customer_number})")
    return bio.getvalue()
