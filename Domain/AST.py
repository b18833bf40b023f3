from __future__ import annotations

from typing import Any, Iterator


# nodeType → 자식 필드 (solc ASTConstVisitor 의 방문 순서 그대로)
_CHILD_FIELDS: dict[str, tuple[str, ...]] = {
    "SourceUnit":                   ("nodes",),
    "ContractDefinition":           ("baseContracts", "nodes"),
    "InheritanceSpecifier":         ("baseName", "arguments"),
    "FunctionDefinition":           ("parameters", "modifiers", "returnParameters", "body"),
    "ModifierDefinition":           ("parameters", "body"),
    "ModifierInvocation":           ("modifierName", "arguments"),
    "ParameterList":                ("parameters",),
    "Block":                        ("statements",),
    "UncheckedBlock":               ("statements",),
    "ExpressionStatement":          ("expression",),
    "VariableDeclarationStatement": ("declarations", "initialValue"),
    "VariableDeclaration":          ("typeName", "value"),
    "IfStatement":                  ("condition", "trueBody", "falseBody"),
    "ForStatement":                 ("initializationExpression", "condition", "loopExpression", "body"),
    "WhileStatement":               ("condition", "body"),
    "DoWhileStatement":             ("condition", "body"),
    "Return":                       ("expression",),
    "EmitStatement":                ("eventCall",),
    "RevertStatement":              ("errorCall",),
    "Assignment":                   ("leftHandSide", "rightHandSide"),
    "BinaryOperation":              ("leftExpression", "rightExpression"),
    "UnaryOperation":               ("subExpression",),
    "Conditional":                  ("condition", "trueExpression", "falseExpression"),
    "TupleExpression":              ("components",),
    "FunctionCall":                 ("expression", "arguments"),
    "FunctionCallOptions":          ("expression", "options"),
    "NewExpression":                ("typeName",),
    "MemberAccess":                 ("expression",),
    "IndexAccess":                  ("baseExpression", "indexExpression"),
    "IndexRangeAccess":             ("baseExpression", "startExpression", "endExpression"),
    "ElementaryTypeNameExpression": ("typeName",),
    "ArrayTypeName":                ("baseType", "length"),
    "Mapping":                      ("keyType", "valueType"),
    "UserDefinedTypeName":          ("pathNode",),
}


class ASTNode:
    """
    solc compact-JSON AST 노드 한 개를 감싸는 읽기 전용 래퍼.
      • node_type   : "FunctionCall", "Literal", …
      • src         : "start:length:fileIndex"
      • type_string : typeDescriptions.typeString (타입 검사 단계에서 채워짐)
    자식 노드는 from_json() 에서 한 번만 만들어 두고 재사용한다.
    """

    def __init__(self, data: dict[str, Any], children: dict[str, Any] | None = None):
        self.data = data
        self.node_type: str = data.get("nodeType", "")
        self.id = data.get("id")
        self.src: str | None = data.get("src")
        self._children: dict[str, Any] = children or {}

    # ──────────────────────────────────────────── 생성
    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ASTNode":
        if not isinstance(data, dict) or "nodeType" not in data:
            raise ValueError("compact AST node must be a dict with a 'nodeType'")

        children: dict[str, Any] = {}
        for field in _CHILD_FIELDS.get(data["nodeType"], ()):
            raw = data.get(field)
            if isinstance(raw, list):
                children[field] = [cls.from_json(x) if isinstance(x, dict) else None for x in raw]
            elif isinstance(raw, dict) and "nodeType" in raw:
                children[field] = cls.from_json(raw)
        return cls(data, children)

    # ──────────────────────────────────────────── 순회
    def children(self) -> Iterator["ASTNode"]:
        for field in _CHILD_FIELDS.get(self.node_type, ()):
            child = self._children.get(field)
            if isinstance(child, list):
                yield from (c for c in child if c is not None)
            elif child is not None:
                yield child

    def child(self, field: str):
        return self._children.get(field)

    def iter_tree(self) -> Iterator["ASTNode"]:
        """pre-order 로 자신과 모든 하위 노드를 돌려준다."""
        yield self
        for c in self.children():
            yield from c.iter_tree()

    # ──────────────────────────────────────────── 속성 접근
    def get(self, key: str, default=None):
        return self.data.get(key, default)

    @property
    def type_string(self) -> str | None:
        desc = self.data.get("typeDescriptions") or {}
        return desc.get("typeString")

    @property
    def name(self) -> str | None:
        return self.data.get("name")

    @property
    def member_name(self) -> str | None:
        return self.data.get("memberName")

    @property
    def operator(self) -> str | None:
        return self.data.get("operator")

    @property
    def value(self) -> str | None:
        return self.data.get("value")

    @property
    def arguments(self) -> list["ASTNode"]:
        return [a for a in (self._children.get("arguments") or []) if a is not None]

    @property
    def source_range(self) -> tuple[int, int] | None:
        """src 의 (start, length). 없거나 -1 이면 None."""
        if not self.src:
            return None
        parts = self.src.split(":")
        try:
            start, length = int(parts[0]), int(parts[1])
        except (IndexError, ValueError):
            return None
        if start < 0 or length < 0:
            return None
        return start, length

    def __repr__(self):
        label = self.name or self.member_name or self.value
        return f"ASTNode({self.node_type}{'' if label is None else ' ' + repr(label)})"
