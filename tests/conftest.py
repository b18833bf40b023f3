"""
Builders for solc compact-JSON AST fragments, so tests can describe a test
function without invoking the compiler.
"""
import itertools

import pytest

from Analyzer.Harness import RecordingHarness
from Domain.AST import ASTNode
from Interpreter.Executor import SoltestExecutor
from config import Settings

_ids = itertools.count(1)

HARNESS_TYPE = "contract Soltest"


def locate(source: str, snippet: str, occurrence: int = 0) -> str:
    """src attribute ("start:length:0") of the n-th occurrence of snippet."""
    raw, needle = source.encode("utf-8"), snippet.encode("utf-8")
    start = -1
    for _ in range(occurrence + 1):
        start = raw.index(needle, start + 1)
    return f"{start}:{len(needle)}:0"


def node(node_type, src=None, type_string=None, **fields):
    d = {"nodeType": node_type, "id": next(_ids), "src": src or "-1:-1:0"}
    if type_string is not None:
        d["typeDescriptions"] = {"typeString": type_string}
    d.update(fields)
    return d


def lit(value, type_string=None, kind="number", **fields):
    if type_string is None:
        type_string = {
            "number": f"int_const {value}",
            "bool": "bool",
            "string": f'literal_string "{value}"',
        }.get(kind)
    return node("Literal", type_string=type_string, kind=kind, value=value, **fields)


def true():
    return lit("true", kind="bool")


def false():
    return lit("false", kind="bool")


def ident(name, type_string=None):
    return node("Identifier", type_string=type_string, name=name)


def soltest():
    return ident("soltest", HARNESS_TYPE)


def member(expression, member_name, type_string="function () external"):
    return node("MemberAccess", type_string=type_string, expression=expression, memberName=member_name)


def call(callee, *args, src=None):
    return node("FunctionCall", src=src, type_string="tuple()", expression=callee,
                arguments=list(args), kind="functionCall")


def assert_call(arg, src=None):
    return call(ident("assert", "function (bool) pure"), arg, src=src)


def binop(left, operator, right, type_string="bool"):
    return node("BinaryOperation", type_string=type_string, leftExpression=left,
                operator=operator, rightExpression=right)


def unary(operator, sub, prefix=True, type_string=None):
    return node("UnaryOperation", type_string=type_string, operator=operator,
                prefix=prefix, subExpression=sub)


def assign(lhs, rhs, operator="="):
    return node("Assignment", type_string=(lhs.get("typeDescriptions") or {}).get("typeString"),
                leftHandSide=lhs, rightHandSide=rhs, operator=operator)


def var_decl(name, type_string):
    return node("VariableDeclaration", type_string=type_string, name=name,
                typeName=node("ElementaryTypeName", name=type_string.split(" ")[0]))


def decl_stmt(*decls, init=None):
    return node("VariableDeclarationStatement", declarations=list(decls), initialValue=init)


def stmt(expression):
    return node("ExpressionStatement", expression=expression)


def function(name, *statements):
    return node("FunctionDefinition", name=name,
                parameters=node("ParameterList", parameters=[]),
                returnParameters=node("ParameterList", parameters=[]),
                modifiers=[], body=node("Block", statements=list(statements)))


def contract(name, *functions, src=None):
    return node("ContractDefinition", src=src, name=name, baseContracts=[], nodes=list(functions))


def source_unit(*nodes):
    return node("SourceUnit", nodes=list(nodes))


def build(*functions, contract_name="MyTest"):
    return ASTNode.from_json(source_unit(contract(contract_name, *functions)))


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def harness():
    return RecordingHarness()


@pytest.fixture
def run(settings, harness):
    """run(*functions, testcase=..., source=...) → (ok, message, executor)"""

    def _run(*functions, testcase="test", source="", filename="MyTest.sol", line=1):
        unit = build(*functions)
        ex = SoltestExecutor(unit, "MyTest", filename, source, line, harness=harness, settings=settings)
        ok, message = ex.execute(testcase)
        return ok, message, ex

    return _run
