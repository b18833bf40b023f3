from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:                                         # 타입 검사 전용
    from Interpreter.Engine import Engine

from Domain.AST import ASTNode
from Domain.Operand import Operand, Literal, Identifier, MemberAccess, describe
from Interpreter.Errors import HarnessError
from Utils.Helper import extract_call_span

log = logging.getLogger(__name__)


class Runtime:
    """
    FunctionCall 이 끝났을 때 호출되는 dispatcher.
      • assert(<bool>)           → 진단 기록
      • soltest.<member>(args…)  → harness 로 전달
      • 그 밖의 호출             → 무시
    어떤 경우에도 호출은 operand 를 push 하지 않는다.
    """

    def __init__(self, engine: "Engine"):
        self.eng = engine

    # ── lazy properties ──────────────────────────────────────────────
    @property
    def ctx(self):
        return self.eng.ctx

    @property
    def stack(self):
        return self.eng.stack

    @property
    def ev(self):
        return self.eng.eval

    def dispatch_function_call(self, node: ASTNode, depth: int) -> None:
        snippet, line = extract_call_span(node, self.ctx.source)
        log.debug("- %s...", snippet)

        n = len(node.arguments)
        try:
            # ① 인자가 호출식 등이라 operand 가 모자라면 인식할 수 없는 호출
            if len(self.stack) - depth < n + 1:
                log.debug("unrecognised call form: %s", snippet)
                return

            arguments = self.stack.collect_arguments(n)
            callee = self.stack.pop()

            # ② callee 위치로 분류
            s = self.ctx.settings
            match callee:
                case Identifier(name=name) if name == s.assert_name and n == 1:
                    self.interpret_assert(arguments[0], snippet, line)
                case MemberAccess(member_name=member, expression=Identifier(name=rn, type_name=rt)):
                    if rn == s.harness_name and rt == s.harness_type:
                        self.forward_to_harness(member, arguments)
                    else:
                        log.debug("member call on '%s' (%s) ignored", rn, rt)
                case _:
                    log.debug("unrecognised call form: %s", snippet)
        finally:
            self.stack.truncate(depth)
            log.debug("- %s... done", snippet)

    def interpret_assert(self, argument: Operand, snippet: str, line: int) -> None:
        if not isinstance(argument, Literal):
            log.info("%s:%s: assert argument is %s, not checked", self.ctx.filename, line, describe(argument))
            return
        check = self.ev.to_bool(argument)
        self.ctx.diagnostics.require(check, self.ctx.filename, line, f"{snippet} failed.")

    def forward_to_harness(self, member: str, arguments: list[Operand]) -> None:
        harness = self.ctx.harness
        try:
            harness.call(member, arguments)
        except Exception as e:
            raise HarnessError(f"{self.ctx.settings.harness_name}.{member} failed: {e}") from e
