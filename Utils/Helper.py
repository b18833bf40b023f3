from __future__ import annotations

from Domain.AST import ASTNode


def find_function(source_unit: ASTNode, name: str, contract: str | None = None) -> ASTNode | None:
    """
    source unit 안에서 이름이 name 인 FunctionDefinition 을 찾는다.
    contract 가 주어지면 그 컨트랙트 안에서만 찾는다.
    """
    roots = [source_unit]
    if contract is not None:
        roots = [n for n in source_unit.iter_tree()
                 if n.node_type == "ContractDefinition" and n.name == contract]

    for root in roots:
        for node in root.iter_tree():
            if node.node_type == "FunctionDefinition" and node.name == name:
                return node
    return None


def line_of_offset(source: str, offset: int) -> int:
    """byte offset → 1-based 라인 번호."""
    raw = source.encode("utf-8")
    return raw.count(b"\n", 0, max(0, min(offset, len(raw)))) + 1


def extract_call_span(call: ASTNode, source: str | None) -> tuple[str, int]:
    """
    호출식의 원문 텍스트와 시작 라인.
    solc 의 src 는 UTF-8 byte offset 이므로 bytes 로 잘라서 decode 한다.
    """
    rng = call.source_range
    if rng is None or not source:
        return "", 0
    start, length = rng
    raw = source.encode("utf-8")
    if start > len(raw):
        return "", 0
    snippet = raw[start:start + length].decode("utf-8", errors="replace")
    return snippet, line_of_offset(source, start)
