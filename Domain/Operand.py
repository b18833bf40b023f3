from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class LiteralCategory(str, Enum):
    BOOL = "bool"
    INTEGER = "integer"
    RATIONAL = "rational"
    STRING = "string"
    ADDRESS = "address"
    BYTES = "bytes"

    @classmethod
    def of(cls, value: "LiteralCategory | str | None") -> "LiteralCategory | None":
        if value is None or isinstance(value, cls):
            return value
        return cls(value)


# ─────────────────────────────────────────────── operand stack entries
@dataclass(frozen=True)
class Literal:
    category: LiteralCategory
    value: str
    # 변수에서 꺼낸 값이면 선언 타입 (uint8 …), 비교에는 쓰지 않는다
    type_name: str | None = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "category", LiteralCategory.of(self.category))


@dataclass(frozen=True)
class Identifier:
    name: str
    type_name: str | None = None


@dataclass(frozen=True)
class MemberAccess:
    member_name: str
    type_name: str | None = None
    expression: "Operand | None" = None   # receiver (soltest.foo 의 soltest)


@dataclass(frozen=True)
class VariableDeclaration:
    name: str
    type_name: str | None = None


Operand = Union[Literal, Identifier, MemberAccess, VariableDeclaration]


def describe(op: Operand | None) -> str:
    match op:
        case Literal(category=c, value=v):
            return f"{c.value} literal '{v}'"
        case Identifier(name=n):
            return f"identifier '{n}'"
        case MemberAccess(member_name=m):
            return f"member access '.{m}'"
        case VariableDeclaration(name=n):
            return f"declaration of '{n}'"
        case None:
            return "nothing"
    raise TypeError(f"not an operand: {op!r}")
