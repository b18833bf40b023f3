from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:                                         # 타입 검사 전용
    from Interpreter.Executor import ExecutionContext

from Domain.AST import ASTNode
from Domain.Operand import Operand, Literal, Identifier, MemberAccess, VariableDeclaration, describe
from Domain.Type import SolType
from Interpreter.Errors import InterpreterError, StackUnderflow, UnsupportedExpression
from Interpreter.Semantics.Evaluation import Evaluation
from Interpreter.Semantics.Runtime import Runtime
from Interpreter.Semantics.Update import Update
from Utils.Helper import extract_call_span

log = logging.getLogger(__name__)

# 자식이 만든 operand 를 모두 버리고 아무것도 push 하지 않는 노드
_DRAIN_KINDS = frozenset({
    "ExpressionStatement", "Return", "EmitStatement", "RevertStatement",
    "IfStatement", "ForStatement", "WhileStatement", "DoWhileStatement",
    "Block", "UncheckedBlock",
    "NewExpression", "IndexAccess", "IndexRangeAccess", "Conditional",
    "ElementaryTypeNameExpression",
})

_LITERAL_KIND_CATEGORY = {
    "bool": "bool", "number": "integer",
    "string": "string", "hexString": "string", "unicodeString": "string",
}


class OperandStack:
    """post-order 순회 중 중간 결과를 쌓아 두는 LIFO."""

    def __init__(self):
        self._items: list[Operand] = []

    def push(self, op: Operand) -> None:
        self._items.append(op)

    def pop(self) -> Operand:
        if not self._items:
            raise StackUnderflow("operand stack is empty")
        return self._items.pop()

    def peek(self) -> Operand | None:
        return self._items[-1] if self._items else None

    @property
    def height(self) -> int:
        return len(self._items)

    # ── frame : depth 위에 쌓인 것 = 현재 노드의 자식들이 만든 operand ──
    def frame(self, depth: int) -> list[Operand]:
        return list(self._items[depth:])

    def pop_frame(self, depth: int) -> list[Operand]:
        items = self._items[depth:]
        del self._items[depth:]
        return items

    def truncate(self, depth: int) -> None:
        del self._items[depth:]

    def collect_arguments(self, n: int) -> list[Operand]:
        """
        인자 n 개를 pop 한 뒤 뒤집어서 호출 지점의 왼쪽→오른쪽 순서로 돌려준다.
        (마지막 인자가 가장 나중에 push 되었으므로)
        """
        if n > len(self._items):
            raise StackUnderflow(f"call expects {n} arguments, stack holds {len(self._items)}")
        args = [self._items.pop() for _ in range(n)]
        args.reverse()
        return args

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Operand]:
        return iter(self._items)

    def __repr__(self):
        return f"OperandStack({self._items!r})"


class Engine:
    """
    함수 body 를 post-order 로 순회하면서 노드 종류별 end_visit 처리를 호출한다.
    handler 에서 발생한 InterpreterError 는 진단으로 기록하고 순회는 계속한다.
    """

    def __init__(self, ctx: "ExecutionContext"):
        self.ctx = ctx
        self.eval = Evaluation()
        self.up = Update(self)
        self.rt = Runtime(self)

    # ── lazy properties ──────────────────────────────────────────────
    @property
    def stack(self) -> OperandStack:
        return self.ctx.stack

    @property
    def state(self):
        return self.ctx.state

    @property
    def diagnostics(self):
        return self.ctx.diagnostics

    # ──────────────────────────────────────────────────── traversal
    def walk(self, node: ASTNode) -> None:
        depth = len(self.stack)
        errors_before = len(self.diagnostics)

        for child in node.children():
            self.walk(child)

        try:
            self.end_visit(node, depth)
        except InterpreterError as e:
            self.stack.truncate(depth)
            # 하위 노드에서 이미 보고된 오류의 연쇄 결과라면 다시 보고하지 않는다
            if len(self.diagnostics) == errors_before:
                self.report(node, e)

    def end_visit(self, node: ASTNode, depth: int) -> None:
        kind = node.node_type
        if kind == "Literal":
            self.end_visit_literal(node, depth)
        elif kind == "Identifier":
            self.stack.truncate(depth)
            self.stack.push(Identifier(node.name, node.type_string))
        elif kind == "MemberAccess":
            frame = self.stack.pop_frame(depth)
            receiver = frame[-1] if frame else None
            self.stack.push(MemberAccess(node.member_name, node.type_string, receiver))
        elif kind == "VariableDeclaration":
            # ArrayTypeName 의 길이 literal 등은 버린다
            self.stack.truncate(depth)
            self.stack.push(VariableDeclaration(node.name, node.type_string))
        elif kind == "VariableDeclarationStatement":
            self.up.interpret_variable_declaration_statement(node, self.stack.pop_frame(depth))
        elif kind == "BinaryOperation":
            self.end_visit_binary_operation(node, depth)
        elif kind == "UnaryOperation":
            self.end_visit_unary_operation(node, depth)
        elif kind == "Assignment":
            self.up.interpret_assignment(node, self.stack.pop_frame(depth))
        elif kind == "FunctionCall":
            self.rt.dispatch_function_call(node, depth)
        elif kind == "FunctionCallOptions":
            # soltest.foo{value: 1}(…) → callee 만 남긴다
            frame = self.stack.pop_frame(depth)
            if frame:
                self.stack.push(frame[0])
        elif kind == "TupleExpression":
            if node.get("isInlineArray"):
                self.stack.truncate(depth)
            # 괄호식 (a + b) 는 그대로 통과
        elif kind in _DRAIN_KINDS:
            self.stack.truncate(depth)

    # ──────────────────────────────────────────────────── handlers
    def end_visit_literal(self, node: ASTNode, depth: int) -> None:
        self.stack.truncate(depth)
        category = SolType.from_type_string(node.type_string).literal_category
        if category is None:
            category = _LITERAL_KIND_CATEGORY.get(node.get("kind"))
        if category is None:
            raise UnsupportedExpression(f"literal of type '{node.type_string}' is not supported")

        value = node.value
        if node.get("kind") == "hexString" and node.get("hexValue") is not None:
            # hex"ff" : UTF-8 이 아니면 value 가 비어 있으므로 원래 바이트를 쓴다
            category, value = "bytes", "0x" + node.get("hexValue")
        elif value is None and node.get("hexValue") is not None:
            value = "0x" + node.get("hexValue")
        sub = node.get("subdenomination")
        if sub and category in ("integer", "rational"):
            value = self.eval.apply_subdenomination(value, sub)
            category = "integer" if self.eval.parse_number(value).denominator == 1 else "rational"
        self.stack.push(Literal(category, value))

    def end_visit_binary_operation(self, node: ASTNode, depth: int) -> None:
        op = node.operator
        if len(self.stack) - depth != 2:
            raise UnsupportedExpression(
                f"binary '{op}' expects two operands, got {len(self.stack) - depth}")
        right = self.resolve(self.stack.pop())
        left = self.resolve(self.stack.pop())

        match (left, right):
            case (Literal(), Literal()):
                self.stack.push(self.eval.evaluate(left, op, right))
            case _:
                raise UnsupportedExpression(f"cannot evaluate {describe(left)} {op} {describe(right)}")

    def end_visit_unary_operation(self, node: ASTNode, depth: int) -> None:
        op = node.operator
        frame = self.stack.pop_frame(depth)
        if op in ("++", "--", "delete"):
            result = self.up.interpret_unary_update(node, frame)
            if result is not None:
                self.stack.push(result)
            return

        if len(frame) != 1:
            raise UnsupportedExpression(f"unary '{op}' expects one operand, got {len(frame)}")
        operand = self.resolve(frame[0])
        match operand:
            case Literal():
                self.stack.push(self.eval.evaluate_unary(op, operand))
            case _:
                raise UnsupportedExpression(f"cannot evaluate {op}{describe(operand)}")

    # ──────────────────────────────────────────────────── helpers
    def resolve(self, op: Operand) -> Operand:
        """Identifier 는 상태 테이블의 값(Literal 뷰)으로 바꾼다."""
        match op:
            case Identifier(name=name):
                var = self.state.lookup(name)
                if var is None:
                    raise UnsupportedExpression(f"unknown identifier '{name}'")
                lit = var.as_literal()
                if lit is None:
                    raise UnsupportedExpression(f"'{name}' of type '{var.type_name}' has no literal value")
                return lit
            case Literal() | MemberAccess() | VariableDeclaration():
                return op
        raise TypeError(f"not an operand: {op!r}")

    def report(self, node: ASTNode, err: InterpreterError) -> None:
        snippet, line = extract_call_span(node, self.ctx.source)
        where = snippet or node.node_type
        self.diagnostics.error(f"{where}: {err}", self.ctx.filename, line or self.ctx.line,
                               kind=type(err).__name__)
