from __future__ import annotations

from Domain.Operand import Literal
from Domain.Type import SolType

ZERO_ADDRESS = "0x" + "0" * 40


def default_value(type_name: str | None) -> str:
    """선언만 된 변수의 기본값 (텍스트 형태)."""
    t = SolType.from_type_string(type_name)
    cat = t.literal_category
    if cat == "integer":
        return "0"
    if cat == "bool":
        return "false"
    if cat == "address":
        return ZERO_ADDRESS
    if cat == "bytes":
        return "0x" + "00" * t.bytesLength
    return ""


class Variables:
    def __init__(self, identifier, type_name=None, value=None):
        self.identifier = identifier  # 변수명
        self.type_name = type_name    # 선언 타입 문자열 (solc typeString)
        self.typeInfo = SolType.from_type_string(type_name)

        # 값 정보 - 항상 텍스트
        self.value = default_value(type_name) if value is None else value

    def as_literal(self) -> Literal | None:
        """Literal 뷰. 리터럴로 볼 수 없는 타입(struct, contract …)이면 None."""
        cat = self.typeInfo.literal_category
        if cat is None:
            return None
        return Literal(cat, self.value, self.type_name)

    def __repr__(self):
        return f"Variables({self.identifier!r}: {self.type_name} = {self.value!r})"


class VariableState:
    """
    변수명 → Variables.
    execute() 한 번마다 새로 만들어지고 끝나면 버려진다.
    """

    def __init__(self):
        self._vars: dict[str, Variables] = {}

    def declare(self, name: str, type_name: str | None, value: str | None = None) -> Variables:
        var = Variables(name, type_name, value)
        self._vars[name] = var
        return var

    def assign(self, name: str, value: str) -> Variables:
        var = self._vars[name]
        var.value = value
        return var

    def lookup(self, name: str) -> Variables | None:
        return self._vars.get(name)

    def __getitem__(self, name: str) -> Variables:
        return self._vars[name]

    def __contains__(self, name: str) -> bool:
        return name in self._vars

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self):
        return iter(self._vars)

    def snapshot(self) -> dict[str, str]:
        return {k: v.value for k, v in self._vars.items()}
