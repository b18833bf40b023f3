from __future__ import annotations

import logging
from dataclasses import dataclass

from Analyzer.RecordManager import RecordManager

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Diagnostic:
    message: str
    filename: str
    line: int
    kind: str = "assert"


class DiagnosticsCollector:
    """
    assert 실패·평가 오류 메시지를 모아 두는 버퍼.
    비어 있으면 테스트 성공.
    """

    def __init__(self, sink: RecordManager | None = None):
        self.sink = sink if sink is not None else RecordManager()
        self.entries: list[Diagnostic] = []

    def require(self, check: bool, filename: str, line: int, message: str) -> bool:
        self.sink.record_check(passed=check, filename=filename, line_no=line, message=message)
        if not check:
            log.warning("%s:%s: %s", filename, line, message)
            self.entries.append(Diagnostic(message, filename, line))
        return check

    def error(self, message: str, filename: str, line: int, kind: str = "error") -> None:
        self.sink.record_check(passed=False, filename=filename, line_no=line, message=message, kind=kind)
        log.warning("%s:%s: %s", filename, line, message)
        self.entries.append(Diagnostic(message, filename, line, kind))

    @property
    def buffer(self) -> str:
        return "\n".join(d.message for d in self.entries)

    @property
    def empty(self) -> bool:
        return not self.entries

    def __bool__(self):
        return bool(self.entries)

    def __len__(self):
        return len(self.entries)
