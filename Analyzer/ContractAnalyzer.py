from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any

from solcx import (
    install_solc,
    set_solc_version,
    compile_source,
    get_installed_solc_versions
)
from solcx.exceptions import SolcError

from Analyzer.Harness import Harness
from Analyzer.RecordManager import RecordManager
from Domain.AST import ASTNode
from Interpreter.Errors import CompilationError
from Interpreter.Executor import SoltestExecutor
from Utils.Helper import line_of_offset
from config import Settings, get_settings

log = logging.getLogger(__name__)


@dataclass
class TestResult:
    __test__ = False  # pytest 수집 대상 아님

    contract: str
    testcase: str
    success: bool
    message: str
    line: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ContractAnalyzer:
    """
    solidity 소스 → compact AST → 테스트 함수 탐색 → SoltestExecutor 실행.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings if settings is not None else get_settings()
        self.recorder = RecordManager()

    # ────────────────────────────────────────────────────── 소스 로딩
    def ensure_solc(self) -> None:
        wanted = self.settings.solc_version

        # ① 아직 안 깔려 있으면 다운로드
        if wanted not in {str(v) for v in get_installed_solc_versions()}:
            log.info("installing solc %s …", wanted)
            install_solc(wanted)  # 네트워크·권한 오류나면 여기서 예외 발생

        # ② active 버전 지정
        set_solc_version(wanted)

    def compile(self, source: str) -> ASTNode:
        self.ensure_solc()
        try:
            output = compile_source(source, output_values=["ast"])
        except SolcError as e:
            raise CompilationError(str(e)) from e

        for unit in output.values():
            if "ast" in unit:
                return ASTNode.from_json(unit["ast"])
        raise CompilationError("solc produced no AST")

    @staticmethod
    def load_ast(data: dict[str, Any] | str | Path) -> ASTNode:
        if isinstance(data, Path):
            data = json.loads(data.read_text(encoding="utf-8"))
        elif isinstance(data, str):
            data = json.loads(data)
        # solc standard-json 출력이면 sources.<file>.ast 를 꺼낸다
        if "nodeType" not in data and "sources" in data:
            data = next(iter(data["sources"].values()))["ast"]
        elif "nodeType" not in data and "ast" in data:
            data = data["ast"]
        return ASTNode.from_json(data)

    # ────────────────────────────────────────────────────── 테스트 탐색
    def test_functions(self, source_unit: ASTNode, source: str | None = None) -> list[tuple[str, str, int]]:
        """(contract, function, contract 시작 라인) 목록"""
        found = []
        prefix = self.settings.test_prefix
        for contract in source_unit.iter_tree():
            if contract.node_type != "ContractDefinition":
                continue
            rng = contract.source_range
            line = line_of_offset(source, rng[0]) if (source and rng) else 0
            for fn in contract.children():
                if fn.node_type == "FunctionDefinition" and (fn.name or "").startswith(prefix):
                    found.append((contract.name, fn.name, line))
        return found

    # ────────────────────────────────────────────────────── 실행
    def run(self,
            source_unit: ASTNode,
            source: str,
            filename: str,
            harness: Harness | None = None,
            contract: str | None = None,
            testcase: str | None = None) -> list[TestResult]:
        results = []
        for c_name, fn_name, line in self.test_functions(source_unit, source):
            if contract is not None and c_name != contract:
                continue
            if testcase is not None and fn_name != testcase:
                continue

            executor = SoltestExecutor(source_unit, c_name, filename, source, line,
                                       harness=harness, sink=self.recorder, settings=self.settings)
            ok, message = executor.execute(fn_name)
            log.info("%s %s.%s", "PASS" if ok else "FAIL", c_name, fn_name)
            results.append(TestResult(c_name, fn_name, ok, message, line))
        return results

    def run_source(self, source: str, filename: str, **kwargs) -> list[TestResult]:
        return self.run(self.compile(source), source, filename, **kwargs)
