import pytest

from Domain.AST import ASTNode
from Utils.Helper import extract_call_span, find_function, line_of_offset
from Utils.Printer import ASTPrinter

from conftest import (
    assert_call, binop, build, contract, function, ident, lit, locate, node, source_unit, stmt, true,
)


def test_from_json_requires_node_type():
    with pytest.raises(ValueError):
        ASTNode.from_json({"id": 1})


def test_children_follow_visit_order():
    n = ASTNode.from_json(binop(ident("a"), "+", lit("1")))
    assert [c.node_type for c in n.children()] == ["Identifier", "Literal"]
    assert n.child("leftExpression").name == "a"
    assert n.operator == "+"


def test_call_children_visit_callee_first():
    n = ASTNode.from_json(assert_call(true()))
    kinds = [c.node_type for c in n.children()]
    assert kinds == ["Identifier", "Literal"]
    assert len(n.arguments) == 1


def test_null_list_entries_are_skipped():
    tup = ASTNode.from_json(node("TupleExpression", components=[None, lit("1")]))
    assert [c.value for c in tup.children()] == ["1"]


@pytest.mark.parametrize("src, expected", [
    ("10:5:0", (10, 5)),
    ("-1:-1:0", None),
    (None, None),
    ("garbage", None),
])
def test_source_range(src, expected):
    data = {"nodeType": "Identifier"}
    if src is not None:
        data["src"] = src
    assert ASTNode.from_json(data).source_range == expected


def test_iter_tree_is_pre_order():
    unit = build(function("test", stmt(assert_call(true()))))
    kinds = [n.node_type for n in unit.iter_tree()]
    assert kinds[:3] == ["SourceUnit", "ContractDefinition", "FunctionDefinition"]
    assert kinds.index("Identifier") < kinds.index("Literal")


def test_find_function():
    unit = ASTNode.from_json(source_unit(
        contract("A", function("test")),
        contract("B", function("other"), function("test")),
    ))
    found = find_function(unit, "test", "B")
    assert found is not None and found.name == "test"
    assert find_function(unit, "other", "A") is None
    assert find_function(unit, "other").name == "other"
    assert find_function(unit, "missing") is None


def test_line_of_offset():
    src = "a\nbb\nccc"
    assert line_of_offset(src, 0) == 1
    assert line_of_offset(src, 2) == 2
    assert line_of_offset(src, 5) == 3
    assert line_of_offset(src, 999) == 3


def test_extract_call_span_uses_byte_offsets():
    source = '// ünïcödé\nstring s = "é";\nassert(x == 1);\n'
    call = ASTNode.from_json(assert_call(true(), src=locate(source, "assert(x == 1)")))
    assert extract_call_span(call, source) == ("assert(x == 1)", 3)


def test_extract_call_span_without_source():
    call = ASTNode.from_json(assert_call(true(), src="0:4:0"))
    assert extract_call_span(call, "") == ("", 0)
    assert extract_call_span(ASTNode.from_json(assert_call(true())), "abc") == ("", 0)
    assert extract_call_span(ASTNode.from_json(assert_call(true(), src="50:4:0")), "abc") == ("", 0)


def test_printer_indents_children():
    text = ASTPrinter(ASTNode.from_json(binop(ident("a", "uint256"), "+", lit("1"), "uint256")),
                      indent="..").to_text()
    lines = text.splitlines()
    assert lines[0].startswith("BinaryOperation operator='+' type='uint256'")
    assert lines[1].startswith("..Identifier name='a'")
    assert lines[2].startswith("..Literal value='1' kind='number'")
