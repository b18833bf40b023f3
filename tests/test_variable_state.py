import pytest

from Domain.Operand import Literal, LiteralCategory as C
from Domain.Type import SolType
from Domain.Variable import VariableState, Variables, default_value, ZERO_ADDRESS


@pytest.mark.parametrize("type_string, category", [
    ("uint256", "integer"),
    ("int8", "integer"),
    ("uint", "integer"),
    ("bool", "bool"),
    ("string memory", "string"),
    ("bytes storage ref", "string"),
    ("address", "address"),
    ("address payable", "address"),
    ("bytes32", "bytes"),
    ("int_const 42", "integer"),
    ("rational_const 1 / 2", "rational"),
    ('literal_string "abc"', "string"),
    ("contract Soltest", None),
    ("uint256[] memory", None),
    ("mapping(address => uint256)", None),
    (None, None),
])
def test_literal_category_of_type_strings(type_string, category):
    assert SolType.from_type_string(type_string).literal_category == category


def test_integer_type_details():
    t = SolType.from_type_string("int16")
    assert (t.signed, t.intTypeLength, t.int_range()) == (True, 16, (-32768, 32767))
    u = SolType.from_type_string("uint")
    assert u.elementaryTypeName == "uint256"
    assert u.int_range() == (0, 2 ** 256 - 1)


def test_contract_type():
    t = SolType.from_type_string("contract Soltest")
    assert t.typeCategory == "contract"
    assert t.contractTypeName == "Soltest"


@pytest.mark.parametrize("type_string, expected", [
    ("uint256", "0"),
    ("bool", "false"),
    ("address", ZERO_ADDRESS),
    ("bytes4", "0x00000000"),
    ("string memory", ""),
])
def test_default_values(type_string, expected):
    assert default_value(type_string) == expected


def test_declare_assign_and_lookup():
    state = VariableState()
    state.declare("x", "uint256")
    assert state["x"].value == "0"
    state.assign("x", "5")
    assert "x" in state
    assert state.lookup("x").value == "5"
    assert state.lookup("y") is None
    assert state.snapshot() == {"x": "5"}
    assert len(state) == 1


def test_literal_view_carries_declared_type():
    var = Variables("x", "uint8", "7")
    lit = var.as_literal()
    assert lit == Literal(C.INTEGER, "7")
    assert lit.type_name == "uint8"
    assert Variables("c", "contract Soltest").as_literal() is None


def test_redeclaration_replaces_entry():
    state = VariableState()
    state.declare("x", "uint256", "1")
    state.declare("x", "bool")
    assert state["x"].value == "false"
