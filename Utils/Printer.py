from __future__ import annotations

import io
import sys
from typing import TextIO

from Domain.AST import ASTNode

_LABEL_KEYS = ("name", "memberName", "operator", "value", "kind")


class ASTPrinter:
    """AST 노드를 들여쓰기된 텍스트로 덤프 (진단용)."""

    def __init__(self, node: ASTNode, indent: str = "   "):
        self.node = node
        self.indent = indent

    def print(self, stream: TextIO | None = None) -> None:
        out = stream if stream is not None else sys.stdout
        self._print(self.node, out, 0)

    def to_text(self) -> str:
        buf = io.StringIO()
        self.print(buf)
        return buf.getvalue()

    def _print(self, node: ASTNode, out: TextIO, depth: int) -> None:
        labels = [f"{k}={node.get(k)!r}" for k in _LABEL_KEYS if node.get(k) is not None]
        if node.type_string:
            labels.append(f"type={node.type_string!r}")
        head = f"{self.indent * depth}{node.node_type}"
        if labels:
            head += " " + " ".join(labels)
        if node.src:
            head += f"  [src {node.src}]"
        out.write(head + "\n")
        for child in node.children():
            self._print(child, out, depth + 1)
