import re

_INT_RE = re.compile(r"^(u?)int(\d*)$")
_FIXED_BYTES_RE = re.compile(r"^bytes(\d+)$")
_LOCATIONS = (" memory", " storage ref", " storage pointer", " storage", " calldata", " pointer")


class SolType:
    def __init__(self):
        self.typeString = None    # solc 가 붙여 준 원문 (예: 'uint8', 'string memory')
        self.typeCategory = None  # 'elementary', 'literal', 'contract', 'array', 'mapping', 'struct', 'function', 'other'

        # elementary 타입 정보
        self.elementaryTypeName = None  # 예: 'uint256', 'address'
        self.intTypeLength = None  # 정수 타입의 비트 길이 (예: 256)
        self.signed = False
        self.bytesLength = None  # bytesN 의 N

        # literal 타입 정보 (int_const / rational_const / literal_string)
        self.literalKind = None

        # contract / struct 이름
        self.contractTypeName = None

    # ────────────────────────────────────────────── 파싱
    @classmethod
    def from_type_string(cls, text: str | None) -> "SolType":
        t = cls()
        t.typeString = text
        if not text:
            t.typeCategory = "other"
            return t

        s = text.strip()
        for loc in _LOCATIONS:
            if s.endswith(loc):
                s = s[: -len(loc)]
                break

        if s.startswith("int_const"):
            t.typeCategory, t.literalKind = "literal", "integer"
        elif s.startswith("rational_const"):
            t.typeCategory, t.literalKind = "literal", "rational"
        elif s.startswith("literal_string"):
            t.typeCategory, t.literalKind = "literal", "string"
        elif s.startswith("contract ") or s.startswith("library "):
            t.typeCategory = "contract"
            t.contractTypeName = s.split(" ", 1)[1]
        elif s.startswith("struct "):
            t.typeCategory = "struct"
        elif s.startswith("mapping("):
            t.typeCategory = "mapping"
        elif s.startswith("function "):
            t.typeCategory = "function"
        elif s.endswith("]"):
            t.typeCategory = "array"
        elif s in ("bool", "string", "bytes", "address", "address payable"):
            t.typeCategory = "elementary"
            t.elementaryTypeName = "address" if s.startswith("address") else s
        else:
            m = _INT_RE.match(s)
            fb = _FIXED_BYTES_RE.match(s)
            if m:
                t.typeCategory = "elementary"
                t.signed = m.group(1) == ""
                t.intTypeLength = int(m.group(2)) if m.group(2) else 256
                t.elementaryTypeName = f"{'' if t.signed else 'u'}int{t.intTypeLength}"
            elif fb:
                t.typeCategory = "elementary"
                t.bytesLength = int(fb.group(1))
                t.elementaryTypeName = s
            else:
                t.typeCategory = "other"
        return t

    # ────────────────────────────────────────────── literal 카테고리
    @property
    def literal_category(self) -> str | None:
        if self.typeCategory == "literal":
            return self.literalKind
        if self.typeCategory != "elementary":
            return None
        name = self.elementaryTypeName
        if self.intTypeLength is not None:
            return "integer"
        if self.bytesLength is not None:
            return "bytes"
        if name in ("string", "bytes"):
            return "string"
        return name  # 'bool', 'address'

    def int_range(self) -> tuple[int, int] | None:
        """고정 폭 정수라면 [min, max], 아니면 None."""
        if self.intTypeLength is None:
            return None
        bits = self.intTypeLength
        if self.signed:
            return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
        return 0, (1 << bits) - 1

    def __repr__(self):
        return f"SolType({self.typeString!r}, {self.typeCategory})"
