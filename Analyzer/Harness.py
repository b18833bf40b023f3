from __future__ import annotations

import logging
from typing import Protocol

from Domain.Operand import Operand

log = logging.getLogger(__name__)


class Harness(Protocol):
    """soltest.<member>(...) 호출을 실제로 수행하는 외부 객체."""

    def call(self, member_name: str, arguments: list[Operand]) -> None: ...


class RecordingHarness:
    """전달된 호출을 순서대로 기록만 한다 (dry-run / 테스트용)."""

    def __init__(self):
        self.calls: list[tuple[str, list[Operand]]] = []

    def call(self, member_name: str, arguments: list[Operand]) -> None:
        log.debug("soltest.%s(%d args)", member_name, len(arguments))
        self.calls.append((member_name, list(arguments)))

    def __len__(self):
        return len(self.calls)
