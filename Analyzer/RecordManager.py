from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Any


class RecordManager:
    """
    테스트 결과(pass / fail)를 소스 라인별로 모아 두는 기본 sink.
    DiagnosticsCollector.require() 가 호출할 때마다 record_check() 로 기록된다.
    """

    def __init__(self) -> None:
        # line_no -> list[ record-dict ]
        self.ledger: defaultdict[int, List[Dict[str, Any]]] = defaultdict(list)

    def clear(self) -> None:
        self.ledger.clear()

    # ─────────────────────────────────────────────────────
    # check 결과 기록
    # ─────────────────────────────────────────────────────
    def record_check(
            self,
            *,
            passed: bool,
            filename: str,
            line_no: int,
            message: str,
            kind: str = "assert",
    ) -> None:
        self.ledger[line_no].append({
            "kind": kind,
            "passed": bool(passed),
            "file": filename,
            "message": message,
        })

    def failures(self) -> List[Dict[str, Any]]:
        return [dict(rec, line=ln)
                for ln, recs in sorted(self.ledger.items())
                for rec in recs if not rec["passed"]]

    def summary(self) -> Dict[str, int]:
        total = sum(len(recs) for recs in self.ledger.values())
        failed = len(self.failures())
        return {"checks": total, "passed": total - failed, "failed": failed}
