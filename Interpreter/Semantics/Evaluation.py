from __future__ import annotations

import re
from fractions import Fraction

from Domain.Operand import Literal, LiteralCategory, describe
from Domain.Type import SolType
from Interpreter.Errors import EvaluationError, TypeMismatch


_DECIMAL = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")  # 10, 0.5, 1e8, 2.5e1 …
_FRACTION = re.compile(r"^[+-]?\d+\s*/\s*\d+$")                      # 7/2 (계산 결과 표기)
_HEX = re.compile(r"^0[xX][0-9a-fA-F]*$")

_INTEGER_FAMILY = (LiteralCategory.INTEGER, LiteralCategory.RATIONAL)
_COMPARISON = ("==", "!=", "<", ">", "<=", ">=")
_BITWISE = ("&", "|", "^")
_SHIFT = ("<<", ">>")

# 리터럴 상수(분자·분모)가 이 비트 수를 넘으면 거부 (solc 의 rational 한계와 동일)
MAX_LITERAL_BITS = 4096
_MAX_LITERAL_DIGITS = MAX_LITERAL_BITS // 3

# literal 의 sub-denomination 배수
SUBDENOMINATIONS = {
    "wei": 1, "gwei": 10 ** 9, "szabo": 10 ** 12, "finney": 10 ** 15, "ether": 10 ** 18,
    "seconds": 1, "minutes": 60, "hours": 3600, "days": 86400, "weeks": 604800, "years": 31536000,
}


def bool_text(flag: bool) -> str:
    return "true" if flag else "false"


class Evaluation:
    """
    Literal × operator × Literal → Literal.
    카테고리(bool / integer / rational / string / address / bytes)별 규칙은 Solidity 를 따른다.
    리터럴 상수는 정확한 유리수, 선언 타입이 붙은 값은 고정 폭 정수.
    """

    # ───────────────────────────────────────────── 숫자 파싱
    @staticmethod
    def parse_number(text: str) -> Fraction:
        """10·16진수(+부호, '_' 구분자), 소수, 지수표기, 'p/q' 를 Fraction 으로."""
        if text is None:
            raise EvaluationError("missing numeric literal")
        txt = text.strip().replace("_", "")
        if len(txt) > _MAX_LITERAL_DIGITS:
            raise EvaluationError(f"literal '{text[:16]}…' is too large")
        try:
            return Fraction(int(txt, 0))  # 0x… / plain decimal
        except ValueError:
            pass

        m = _DECIMAL.match(txt)
        if m:
            exp = m.group(3)
            if exp and abs(int(exp[1:])) > _MAX_LITERAL_DIGITS:
                raise EvaluationError(f"literal '{text}' is too large")
            return Fraction(txt)
        if _FRACTION.match(txt):
            num, den = txt.split("/")
            if int(den) == 0:
                raise EvaluationError(f"'{text}' has a zero denominator")
            return Fraction(int(num), int(den))
        raise EvaluationError(f"'{text}' is not a numeric literal")

    @classmethod
    def parse_int(cls, text: str) -> int:
        v = cls.parse_number(text)
        if v.denominator != 1:
            raise EvaluationError(f"'{text}' is not an integer literal")
        return int(v)

    @classmethod
    def apply_subdenomination(cls, value: str, sub: str) -> str:
        """'1.5' + 'ether' → '1500000000000000000'"""
        mult = SUBDENOMINATIONS.get(sub)
        if mult is None:
            raise EvaluationError(f"unknown sub-denomination '{sub}'")
        return str(cls.parse_number(value) * mult)

    def to_number(self, lit: Literal) -> Fraction:
        if lit.category in (LiteralCategory.ADDRESS, LiteralCategory.BYTES):
            return Fraction(self.to_int(lit))
        return self.parse_number(lit.value)

    def to_int(self, lit: Literal) -> int:
        if lit.category in (LiteralCategory.ADDRESS, LiteralCategory.BYTES):
            return int((lit.value or "0x")[2:] or "0", 16)
        return self.parse_int(lit.value)

    def to_bool(self, lit: Literal) -> bool:
        raw = lit.value
        if raw == "true":
            return True
        if raw == "false":
            return False
        try:
            return self.parse_int(raw) != 0
        except EvaluationError:
            raise EvaluationError(f"cannot interpret '{raw}' as bool") from None

    # ───────────────────────────────────────────── 이항 연산
    def evaluate(self, left: Literal, operator: str, right: Literal) -> Literal:
        lc, rc = left.category, right.category
        if not (lc == rc or (lc in _INTEGER_FAMILY and rc in _INTEGER_FAMILY)):
            raise TypeMismatch(describe(left), operator, describe(right))

        if lc in _INTEGER_FAMILY:
            return self._evaluate_number(left, operator, right)
        if lc == LiteralCategory.BOOL:
            return self._evaluate_bool(left, operator, right)
        if lc == LiteralCategory.STRING:
            return self._evaluate_string(left, operator, right)
        if lc == LiteralCategory.ADDRESS:
            if operator in _COMPARISON:
                return self._compare(self.to_int(left), operator, self.to_int(right))
        elif lc == LiteralCategory.BYTES:
            return self._evaluate_bytes(left, operator, right)
        raise EvaluationError(f"operator '{operator}' is not defined for {lc.value}")

    def _evaluate_number(self, left: Literal, operator: str, right: Literal) -> Literal:
        a, b = self.to_number(left), self.to_number(right)

        if operator in _COMPARISON:
            return self._compare(a, operator, b)

        whole = a.denominator == 1 and b.denominator == 1
        if operator in _SHIFT:
            if not whole:
                raise EvaluationError(f"shift is not defined for fractional {describe(left)}")
            return self._shift(int(a), operator, int(b), left.type_name)

        result_type = self._result_type(left, right, operator)
        if result_type is not None and not whole:
            raise EvaluationError(f"fractional constant cannot be used with {result_type}")

        if operator == "+":
            v = a + b
        elif operator == "-":
            v = a - b
        elif operator == "*":
            v = a * b
        elif operator in ("/", "%"):
            if b == 0:
                raise EvaluationError("division by zero" if operator == "/" else "modulo by zero")
            if operator == "/" and result_type is None:
                # 상수끼리의 나눗셈은 정확한 유리수
                v = a / b
            else:
                # 0 방향 절사, 나머지는 피제수 부호
                q = Fraction(int(a / b))
                v = q if operator == "/" else a - b * q
        elif operator == "**":
            if b.denominator != 1:
                raise EvaluationError(f"fractional exponent {b}")
            if b < 0:
                raise EvaluationError(f"negative exponent {b}")
            if result_type is not None:
                v = Fraction(self._checked_pow(int(a), int(b), result_type))
            else:
                size = max(a.numerator.bit_length(), a.denominator.bit_length())
                if abs(a) != 1 and a != 0 and int(b) * size > MAX_LITERAL_BITS:
                    raise EvaluationError(f"literal exponentiation {a} ** {b} is too large")
                v = a ** int(b)
        elif operator in _BITWISE:
            if not whole:
                raise EvaluationError(f"operator '{operator}' is not defined for fractional constants")
            x, y = int(a), int(b)
            v = Fraction(x & y if operator == "&" else x | y if operator == "|" else x ^ y)
        else:
            raise EvaluationError(f"operator '{operator}' is not defined for integer")
        return self._make_number(v, result_type)

    def _shift(self, a: int, operator: str, b: int, type_name: str | None) -> Literal:
        if b < 0:
            raise EvaluationError(f"negative shift amount {b}")
        bits = SolType.from_type_string(type_name).intTypeLength if type_name else None

        if operator == ">>":
            # 비트 폭 이상으로 밀면 부호만 남는다
            v = a >> b if b <= a.bit_length() else (-1 if a < 0 else 0)
            return self._make_int(v, type_name)

        if bits is not None:
            if b >= bits:
                return self._wrap(0, type_name)
            return self._wrap(a << b, type_name)
        if a != 0 and a.bit_length() + b > MAX_LITERAL_BITS:
            raise EvaluationError(f"literal shift {a} << {b} is too large")
        return self._make_int(a << b, type_name)

    def _evaluate_bool(self, left: Literal, operator: str, right: Literal) -> Literal:
        a, b = self.to_bool(left), self.to_bool(right)
        if operator == "&&":
            return Literal(LiteralCategory.BOOL, bool_text(a and b))
        if operator == "||":
            return Literal(LiteralCategory.BOOL, bool_text(a or b))
        if operator == "==":
            return Literal(LiteralCategory.BOOL, bool_text(a == b))
        if operator == "!=":
            return Literal(LiteralCategory.BOOL, bool_text(a != b))
        raise EvaluationError(f"operator '{operator}' is not defined for bool")

    def _evaluate_string(self, left: Literal, operator: str, right: Literal) -> Literal:
        if operator == "==":
            return Literal(LiteralCategory.BOOL, bool_text(left.value == right.value))
        if operator == "!=":
            return Literal(LiteralCategory.BOOL, bool_text(left.value != right.value))
        if operator == "+":
            return Literal(LiteralCategory.STRING, (left.value or "") + (right.value or ""))
        raise EvaluationError(f"operator '{operator}' is not defined for string")

    def _evaluate_bytes(self, left: Literal, operator: str, right: Literal) -> Literal:
        width = max(self._bytes_width(left), self._bytes_width(right))
        # bytesN 은 왼쪽 정렬: 짧은 쪽은 오른쪽에 0 을 채워 비교한다
        a = int.from_bytes(self._bytes_of(left).ljust(width, b"\0"), "big")
        b = int.from_bytes(self._bytes_of(right).ljust(width, b"\0"), "big")
        if operator in _COMPARISON:
            return self._compare(a, operator, b)
        if operator in _BITWISE:
            v = a & b if operator == "&" else a | b if operator == "|" else a ^ b
            return Literal(LiteralCategory.BYTES, self._format_bytes(v, width), left.type_name or right.type_name)
        raise EvaluationError(f"operator '{operator}' is not defined for bytes")

    # ───────────────────────────────────────────── 단항 연산
    def evaluate_unary(self, operator: str, operand: Literal) -> Literal:
        cat = operand.category
        if operator == "!" and cat == LiteralCategory.BOOL:
            return Literal(LiteralCategory.BOOL, bool_text(not self.to_bool(operand)))

        if cat in _INTEGER_FAMILY:
            t = SolType.from_type_string(operand.type_name)
            if operator == "-":
                if operand.type_name and not t.signed:
                    raise EvaluationError(f"unary minus on unsigned type {operand.type_name}")
                return self._make_number(-self.to_number(operand), operand.type_name)
            v = self.to_int(operand)
            if operator == "~":
                if operand.type_name and not t.signed:
                    rng = t.int_range()
                    return self._make_int(rng[1] ^ v, operand.type_name)
                return self._make_int(~v, operand.type_name)
            if operator in ("++", "--"):
                return self._make_int(v + 1 if operator == "++" else v - 1, operand.type_name)

        raise EvaluationError(f"unary operator '{operator}' is not defined for {describe(operand)}")

    # ───────────────────────────────────────────── 선언 타입으로 변환
    def coerce(self, lit: Literal, type_name: str | None) -> str:
        """
        리터럴 텍스트를 선언 타입의 정규 텍스트로 변환한다.
          uint8 x = 0x10;     → "16"
          bool  b = true;     → "true"
          bytes2 h = hex"ff"; → "0xff00"
        """
        target = SolType.from_type_string(type_name)
        cat = target.literal_category
        if cat is None:
            return lit.value

        src = lit.category
        if cat == "integer" and src in _INTEGER_FAMILY:
            v = self.parse_number(lit.value)
            if v.denominator != 1:
                raise EvaluationError(f"fractional value {lit.value} cannot be stored in {type_name}")
            return self._make_int(int(v), type_name).value
        if cat == "bool" and src == LiteralCategory.BOOL:
            return bool_text(self.to_bool(lit))
        if cat == "string" and src == LiteralCategory.STRING:
            return lit.value
        if cat == "string" and src == LiteralCategory.BYTES:
            if target.elementaryTypeName == "bytes":
                return lit.value
            try:
                return self._bytes_of(lit).decode("utf-8")
            except UnicodeDecodeError:
                raise EvaluationError(f"{describe(lit)} is not valid UTF-8") from None
        if cat == "address" and src == LiteralCategory.ADDRESS:
            return lit.value.lower()
        if cat == "bytes":
            width = target.bytesLength
            if src == LiteralCategory.BYTES:
                raw = self._bytes_of(lit)
            elif src == LiteralCategory.STRING:
                raw = (lit.value or "").encode("utf-8")
            elif src in _INTEGER_FAMILY and _HEX.match(lit.value or ""):
                v = self.parse_int(lit.value)
                if v.bit_length() > width * 8:
                    raise EvaluationError(f"literal {lit.value} does not fit into {type_name}")
                return self._format_bytes(v, width)
            else:
                raise TypeMismatch(describe(lit), "=", type_name)
            if len(raw) > width:
                raise EvaluationError(f"{describe(lit)} does not fit into {type_name}")
            return "0x" + raw.ljust(width, b"\0").hex()

        raise TypeMismatch(describe(lit), "=", type_name)

    # ───────────────────────────────────────────── helpers
    @staticmethod
    def _compare(a, operator: str, b) -> Literal:
        result = {
            "==": a == b, "!=": a != b,
            "<": a < b, ">": a > b,
            "<=": a <= b, ">=": a >= b,
        }[operator]
        return Literal(LiteralCategory.BOOL, bool_text(result))

    @staticmethod
    def _result_type(left: Literal, right: Literal, operator: str) -> str | None:
        """고정 폭 결과 타입. 둘 다 리터럴 상수면 None (정확한 유리수)."""
        lt, rt = left.type_name, right.type_name
        if operator == "**":
            return lt
        if not lt or not rt or lt == rt:
            return lt or rt
        ls, rs = SolType.from_type_string(lt), SolType.from_type_string(rt)
        if ls.intTypeLength is None or rs.intTypeLength is None:
            return lt
        if ls.signed != rs.signed:
            raise TypeMismatch(lt, operator, rt)
        return lt if ls.intTypeLength >= rs.intTypeLength else rt

    @classmethod
    def _make_number(cls, v: Fraction, type_name: str | None) -> Literal:
        if v.denominator == 1:
            return cls._make_int(int(v), type_name)
        if type_name is not None:
            raise EvaluationError(f"fractional result {v} cannot be stored in {type_name}")
        if max(v.numerator.bit_length(), v.denominator.bit_length()) > MAX_LITERAL_BITS:
            raise EvaluationError("rational constant is too large")
        return Literal(LiteralCategory.RATIONAL, str(v))

    @staticmethod
    def _make_int(v: int, type_name: str | None) -> Literal:
        rng = SolType.from_type_string(type_name).int_range() if type_name else None
        if rng is not None and not (rng[0] <= v <= rng[1]):
            kind = "overflow" if v > rng[1] else "underflow"
            raise EvaluationError(f"arithmetic {kind}: {v} does not fit into {type_name}")
        if rng is None and v.bit_length() > MAX_LITERAL_BITS:
            raise EvaluationError("integer constant is too large")
        return Literal(LiteralCategory.INTEGER, str(v), type_name)

    @staticmethod
    def _wrap(v: int, type_name: str | None) -> Literal:
        t = SolType.from_type_string(type_name) if type_name else None
        if t is None or t.intTypeLength is None:
            return Literal(LiteralCategory.INTEGER, str(v), type_name)
        bits = t.intTypeLength
        v &= (1 << bits) - 1
        if t.signed and v >> (bits - 1):
            v -= 1 << bits
        return Literal(LiteralCategory.INTEGER, str(v), type_name)

    @staticmethod
    def _checked_pow(a: int, b: int, type_name: str) -> int:
        bits = SolType.from_type_string(type_name).intTypeLength
        # |a| >= 2^k 이면 |a|^b >= 2^(k*b) → 계산 전에 overflow 판정
        if bits is not None and abs(a) > 1 and (abs(a).bit_length() - 1) * b > bits:
            raise EvaluationError(f"arithmetic overflow: {a} ** {b} does not fit into {type_name}")
        return a ** b

    @staticmethod
    def _bytes_of(lit: Literal) -> bytes:
        digits = (lit.value or "0x")[2:]
        if len(digits) % 2:
            digits = "0" + digits
        return bytes.fromhex(digits)

    @staticmethod
    def _bytes_width(lit: Literal) -> int:
        t = SolType.from_type_string(lit.type_name) if lit.type_name else None
        if t is not None and t.bytesLength:
            return t.bytesLength
        digits = (lit.value or "0x")[2:]
        return max(1, (len(digits) + 1) // 2)

    @staticmethod
    def _format_bytes(v: int, width: int) -> str:
        return "0x" + v.to_bytes(width, "big").hex()
