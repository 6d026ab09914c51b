# # Report writing for a user output folder.

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from ..metrics.report_builder import WrappedReport, report_to_dict


@dataclass
class ReportWriter:
    root: Path

    def write_report(self, report: WrappedReport) -> Path:
        # # <root>/wrapped_<year>.json
        self.root.mkdir(parents=True, exist_ok=True)
        p = self.root / f"wrapped_{report.year}.json"
        p.write_text(json.dumps(report_to_dict(report), indent=2, ensure_ascii=False), encoding="utf-8")
        return p
