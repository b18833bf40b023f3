from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, TextIO

from Analyzer.Diagnostics import DiagnosticsCollector
from Analyzer.Harness import Harness, RecordingHarness
from Analyzer.RecordManager import RecordManager
from Domain.AST import ASTNode
from Domain.Variable import VariableState
from Interpreter.Engine import Engine, OperandStack
from Utils.Helper import find_function
from Utils.Printer import ASTPrinter
from config import Settings, get_settings

log = logging.getLogger(__name__)


@dataclass
class ExecutionContext:
    """execute() 한 번 동안만 살아 있는 실행 문맥."""
    source_unit: ASTNode
    contract: str
    filename: str
    source: str
    line: int
    testcase: str
    settings: Settings
    harness: Harness
    diagnostics: DiagnosticsCollector
    stack: OperandStack = field(default_factory=OperandStack)
    state: VariableState = field(default_factory=VariableState)


class SoltestExecutor:
    """
    (contract, file, line) 하나당 하나씩 만들어서 테스트 함수를 실행한다.

        ex = SoltestExecutor(source_unit, "MyTest", "MyTest.sol", source, 12)
        ok, message = ex.execute("testSomething")
    """

    def __init__(self,
                 source_unit: ASTNode | dict[str, Any],
                 contract: str,
                 filename: str,
                 source: str,
                 line: int,
                 harness: Harness | None = None,
                 sink: RecordManager | None = None,
                 settings: Settings | None = None):
        if not isinstance(source_unit, ASTNode):
            source_unit = ASTNode.from_json(source_unit)
        self.source_unit = source_unit
        self.contract = contract
        self.filename = filename
        self.source = source
        self.line = line
        self.harness = harness if harness is not None else RecordingHarness()
        self.sink = sink if sink is not None else RecordManager()
        self.settings = settings if settings is not None else get_settings()
        self.last_context: ExecutionContext | None = None

    def execute(self, testcase: str) -> tuple[bool, str]:
        function = self._find(testcase)
        if function is None:
            log.debug("test function '%s' not found in %s", testcase, self.filename)
            return False, ""

        # 실행마다 새 stack / state / 진단 버퍼
        ctx = ExecutionContext(
            source_unit=self.source_unit,
            contract=self.contract,
            filename=self.filename,
            source=self.source,
            line=self.line,
            testcase=testcase,
            settings=self.settings,
            harness=self.harness,
            diagnostics=DiagnosticsCollector(self.sink),
        )
        self.last_context = ctx

        body = function.child("body")
        if body is not None:
            Engine(ctx).walk(body)

        if ctx.diagnostics.empty:
            return True, ""
        message = f"{ctx.diagnostics.buffer}: {self.contract} {testcase} {self.filename}:{self.line}"
        return False, message

    def print(self, node: ASTNode, stream: TextIO | None = None) -> None:
        ASTPrinter(node).print(stream)

    def _find(self, testcase: str) -> ASTNode | None:
        has_contract = any(n.node_type == "ContractDefinition" and n.name == self.contract
                           for n in self.source_unit.iter_tree())
        return find_function(self.source_unit, testcase, self.contract if has_contract else None)
