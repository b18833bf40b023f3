import logging

from Domain.Operand import Literal, Identifier, LiteralCategory as C

from conftest import (
    assert_call, binop, call, decl_stmt, false, function, ident, lit, locate, member, node,
    soltest, stmt, true, var_decl,
)

SOURCE = """contract MyTest {
    function test() public {
        assert(true);
        assert(1 + 1 == 3);
    }
}
"""


def test_assert_true_records_nothing(run):
    ok, message, ex = run(function("test", stmt(assert_call(true()))))
    assert ok
    assert message == ""
    assert ex.last_context.diagnostics.empty
    # the passing check is still visible to the sink
    assert ex.sink.summary() == {"checks": 1, "passed": 1, "failed": 0}


def test_assert_false_records_call_text_and_line(run):
    failing = assert_call(binop(binop(lit("1"), "+", lit("1"), "int_const 2"), "==", lit("3")),
                          src=locate(SOURCE, "assert(1 + 1 == 3)"))
    ok, message, ex = run(function("test", stmt(assert_call(true(), src=locate(SOURCE, "assert(true)"))),
                                   stmt(failing)),
                          source=SOURCE, filename="MyTest.sol", line=1)
    assert not ok
    entries = ex.last_context.diagnostics.entries
    assert len(entries) == 1
    assert entries[0].message == "assert(1 + 1 == 3) failed."
    assert entries[0].line == 4
    assert message == "assert(1 + 1 == 3) failed.: MyTest test MyTest.sol:1"


def test_multiple_failures_are_joined(run):
    ok, message, _ = run(function("test", stmt(assert_call(false())), stmt(assert_call(false()))))
    assert not ok
    assert message.count(" failed.") == 2


def test_assert_accepts_numeric_bool_text(run):
    ok, _, _ = run(function("test", stmt(assert_call(lit("1")))))
    assert ok


def test_assert_on_variable_is_ignored(run):
    f = function("test", decl_stmt(var_decl("ok", "bool"), init=false()),
                 stmt(assert_call(ident("ok", "bool"))))
    ok, _, _ = run(f)
    assert ok


def test_assert_with_two_arguments_is_ignored(run):
    ok, _, _ = run(function("test", stmt(call(ident("assert", "function (bool) pure"), false(), false()))))
    assert ok


def test_harness_call_forwards_arguments_in_source_order(run, harness):
    ok, _, _ = run(function("test", stmt(call(member(soltest(), "foo"), lit("1"), lit("2")))))
    assert ok
    assert harness.calls == [("foo", [Literal(C.INTEGER, "1"), Literal(C.INTEGER, "2")])]


def test_harness_call_forwards_identifiers_unresolved(run, harness):
    f = function("test", decl_stmt(var_decl("x", "uint256"), init=lit("3")),
                 stmt(call(member(soltest(), "bar"), ident("x", "uint256"))))
    ok, _, _ = run(f)
    assert ok
    assert harness.calls == [("bar", [Identifier("x", "uint256")])]


def test_member_call_on_other_receiver_is_ignored(run, harness):
    wrong_type = ident("soltest", "contract Other")
    wrong_name = ident("other", "contract Soltest")
    ok, _, _ = run(function("test",
                            stmt(call(member(wrong_type, "foo"), lit("1"))),
                            stmt(call(member(wrong_name, "foo"), lit("1")))))
    assert ok
    assert harness.calls == []


def test_unrecognised_call_is_silent(run, harness):
    ok, message, ex = run(function("test", stmt(call(ident("doSomething", "function (uint256)"), lit("1")))))
    assert ok
    assert message == ""
    assert harness.calls == []
    assert ex.sink.summary()["checks"] == 0


def test_nested_call_argument_is_unrecognised(run, harness):
    inner = call(member(soltest(), "value"))
    ok, _, _ = run(function("test", stmt(assert_call(inner))))
    assert ok
    # the inner harness call still happens
    assert [m for m, _ in harness.calls] == ["value"]


def test_call_options_keep_the_callee(run, harness):
    options = node("FunctionCallOptions", expression=member(soltest(), "deposit"),
                   names=["value"], options=[lit("1")])
    ok, _, _ = run(function("test", stmt(call(options, lit("5")))))
    assert ok
    assert harness.calls == [("deposit", [Literal(C.INTEGER, "5")])]


class ExplodingHarness:
    def call(self, member_name, arguments):
        raise RuntimeError("revert")


def test_harness_failure_becomes_a_diagnostic(settings):
    from Interpreter.Executor import SoltestExecutor
    from conftest import build

    unit = build(function("test", stmt(call(member(soltest(), "boom"))),
                          stmt(assert_call(true()))))
    ex = SoltestExecutor(unit, "MyTest", "MyTest.sol", "", 1, harness=ExplodingHarness(), settings=settings)
    ok, message = ex.execute("test")
    assert not ok
    assert "soltest.boom failed: revert" in message
    # the walk went on to the assert
    assert ex.sink.summary()["checks"] == 2


def test_unchecked_assert_is_logged_at_info(run, caplog):
    f = function("test", decl_stmt(var_decl("flag", "bool"), init=false()),
                 stmt(assert_call(ident("flag", "bool"))))
    with caplog.at_level(logging.INFO, logger="Interpreter.Semantics.Runtime"):
        ok, _, _ = run(f)
    assert ok
    assert any(r.levelno == logging.INFO and "identifier 'flag'" in r.getMessage() for r in caplog.records)


def test_unrecognised_call_still_logs_completion(run, caplog):
    with caplog.at_level(logging.DEBUG, logger="Interpreter.Semantics.Runtime"):
        run(function("test", stmt(call(ident("doSomething", "function (uint256)"), call(member(soltest(), "x"))))))
    done = [r for r in caplog.records if r.getMessage().endswith("... done")]
    # inner harness call and outer unrecognised call
    assert len(done) == 2
