from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:                                         # 타입 검사 전용
    from Interpreter.Engine import Engine

from Domain.AST import ASTNode
from Domain.Operand import Operand, Literal, Identifier, VariableDeclaration, describe
from Domain.Variable import default_value
from Interpreter.Errors import InterpreterError, UnsupportedExpression

log = logging.getLogger(__name__)


class Update:
    """선언·대입·증감 연산으로 상태 테이블을 갱신한다."""

    def __init__(self, engine: "Engine"):
        self.eng = engine

    # ── lazy properties ──────────────────────────────────────────────
    @property
    def ev(self):
        return self.eng.eval

    @property
    def state(self):
        return self.eng.state

    # ─────────────────────────────────────────────────────
    # T x;  /  T x = <literal | identifier>;  /  (T a, T b) = …;
    # ─────────────────────────────────────────────────────
    def interpret_variable_declaration_statement(self, node: ASTNode, frame: list[Operand]) -> None:
        match frame:
            case []:
                return
            case [VariableDeclaration() as decl]:
                self._declare(decl, None)
                if node.child("initialValue") is not None:
                    # 초기값이 operand 를 남기지 않음 (형변환, 호출 결과 …)
                    raise UnsupportedExpression(f"cannot evaluate the initial value of '{decl.name}'")
            case [VariableDeclaration() as decl, (Literal() | Identifier()) as value]:
                self._declare(decl, value)
            case [VariableDeclaration(), VariableDeclaration(), *_]:
                self._declare_many(node, frame)
            case _:
                for op in frame:
                    if isinstance(op, VariableDeclaration):
                        self.state.declare(op.name, op.type_name)
                raise UnsupportedExpression(
                    "cannot initialise a variable from " + ", ".join(describe(op) for op in frame))

    def _declare_many(self, node: ASTNode, frame: list[Operand]) -> None:
        split = 0
        while split < len(frame) and isinstance(frame[split], VariableDeclaration):
            split += 1
        decls, values = frame[:split], frame[split:]

        if not values:
            for decl in decls:
                self._declare(decl, None)
            if node.child("initialValue") is not None:
                raise UnsupportedExpression(
                    "cannot evaluate the initial value of " + ", ".join(f"'{d.name}'" for d in decls))
            return

        if len(values) == len(decls) and all(isinstance(v, (Literal, Identifier)) for v in values):
            for decl, value in zip(decls, values):
                self._declare(decl, value)
            return

        for decl in decls:
            self._declare(decl, None)
        raise UnsupportedExpression(
            f"cannot destructure {len(values)} value(s) into {len(decls)} declaration(s)")

    def _declare(self, decl: VariableDeclaration, value: Operand | None) -> None:
        if value is None:
            self.state.declare(decl.name, decl.type_name)
            return
        try:
            lit = self.eng.resolve(value)
            if not isinstance(lit, Literal):
                raise UnsupportedExpression(f"cannot initialise '{decl.name}' from {describe(lit)}")
            text = self.ev.coerce(lit, decl.type_name)
        except InterpreterError:
            # 이후 참조가 연쇄 오류를 내지 않도록 기본값으로라도 등록
            self.state.declare(decl.name, decl.type_name)
            raise
        self.state.declare(decl.name, decl.type_name, text)

    # ─────────────────────────────────────────────────────
    # x = v;  x += v; …
    # ─────────────────────────────────────────────────────
    def interpret_assignment(self, node: ASTNode, frame: list[Operand]) -> None:
        op = node.operator or "="
        match frame:
            case [Identifier(name=name), (Literal() | Identifier()) as rhs]:
                var = self.state.lookup(name)
                if var is None:
                    raise UnsupportedExpression(f"assignment to undeclared variable '{name}'")
                value = self.eng.resolve(rhs)
                if op != "=":
                    current = var.as_literal()
                    if current is None:
                        raise UnsupportedExpression(f"'{name}' of type '{var.type_name}' has no literal value")
                    value = self.ev.evaluate(current, op[:-1], value)
                self.state.assign(name, self.ev.coerce(value, var.type_name))
            case _:
                # member / index 대입, 호출 결과 대입 등은 대상 아님
                log.debug("assignment ignored: %s", ", ".join(describe(x) for x in frame))

    # ─────────────────────────────────────────────────────
    # ++x / x-- / delete x
    # ─────────────────────────────────────────────────────
    def interpret_unary_update(self, node: ASTNode, frame: list[Operand]) -> Literal | None:
        op = node.operator
        match frame:
            case [Identifier(name=name)]:
                var = self.state.lookup(name)
                if var is None:
                    raise UnsupportedExpression(f"unknown identifier '{name}'")
                if op == "delete":
                    self.state.assign(name, default_value(var.type_name))
                    return None
                old = var.as_literal()
                if old is None:
                    raise UnsupportedExpression(f"'{name}' of type '{var.type_name}' has no literal value")
                new = self.ev.evaluate_unary(op, old)
                self.state.assign(name, new.value)
                return new if node.get("prefix") else old
            case _:
                log.debug("unary '%s' ignored: %s", op, ", ".join(describe(x) for x in frame))
                return None
