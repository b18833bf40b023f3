import argparse
import logging
import sys
from pathlib import Path

from Analyzer.ContractAnalyzer import ContractAnalyzer
from Analyzer.Harness import RecordingHarness
from Interpreter.Errors import CompilationError
from config import get_settings


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="soltest", description="Run soltest test functions of a Solidity file.")
    p.add_argument("file", type=Path, help="Solidity test file")
    p.add_argument("--contract", help="only run tests of this contract")
    p.add_argument("--test", dest="testcase", help="only run this test function")
    p.add_argument("--ast", type=Path, help="use a pre-built compact JSON AST instead of invoking solc")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    source = args.file.read_text(encoding="utf-8")
    analyzer = ContractAnalyzer(settings)
    try:
        unit = analyzer.load_ast(args.ast) if args.ast else analyzer.compile(source)
    except CompilationError as e:
        print(f"[err] Solidity compiler reported:\n{e}", file=sys.stderr)
        return 2

    harness = RecordingHarness()
    results = analyzer.run(unit, source, args.file.name, harness=harness,
                           contract=args.contract, testcase=args.testcase)

    for r in results:
        print(f"{'PASS' if r.success else 'FAIL'}  {r.contract}.{r.testcase}")
        if not r.success and r.message:
            print(f"      {r.message}")
    if not results:
        print("no test functions found")

    summary = analyzer.recorder.summary()
    print(f"{len(results)} test(s), {summary['checks']} check(s), "
          f"{summary['failed']} failed, {len(harness)} harness call(s)")
    return 0 if all(r.success for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
