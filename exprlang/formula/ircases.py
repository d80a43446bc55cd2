"""Golden IR test cases.

Each case is a `NAME.formula` file holding one formula and a sibling
`NAME.golden.json` file holding the expected compiler output:

    {"input_formula": "(+ 1 2)", "ast": {...AST wire message...}}

or, for formulas that must not compile, `{"input_formula": ..., "error": "ArityError"}`.
Source context is stripped from the recorded AST.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from exprlang import WireMessage
from exprlang.config import get_ircases_root
from exprlang.errors import ExprError
from exprlang.formula.compiler import compile
from exprlang.reader.expression_reader import parse_sexpression
from exprlang.types import wire

INPUT_SUFFIX = ".formula"
GOLDEN_SUFFIX = ".golden.json"


@dataclass
class IRCase:
    input_path: Path
    input_formula: str
    golden: Optional[WireMessage] = None
    regenerated: Optional[WireMessage] = None

    @property
    def name(self) -> str:
        return self.input_path.name[: -len(INPUT_SUFFIX)]

    @property
    def golden_path(self) -> Path:
        return self.input_path.with_name(self.name + GOLDEN_SUFFIX)


def regenerate_case(case: IRCase) -> IRCase:
    out: WireMessage = {"input_formula": case.input_formula}
    try:
        compiled = compile(parse_sexpression(case.input_formula, str(case.input_path)))
    except ExprError as err:
        out["error"] = type(err).__name__
    else:
        out["ast"] = compiled.ast_wire(include_source=False)
    case.regenerated = out
    return case


def load_golden(case: IRCase) -> IRCase:
    case.golden = wire.loads(case.golden_path.read_text(encoding="utf-8"))
    return case


def load(regenerate: bool = True, load_goldens: bool = True, root: Optional[Path] = None) -> list[IRCase]:
    """Return every case under `root` (default: the configured ircases directory)."""
    root = Path(root) if root is not None else get_ircases_root()
    cases = [
        IRCase(p, p.read_text(encoding="utf-8").strip())
        for p in sorted(root.glob("*" + INPUT_SUFFIX))
    ]
    with ThreadPoolExecutor() as pool:
        if load_goldens:
            list(pool.map(load_golden, cases))
        if regenerate:
            list(pool.map(regenerate_case, cases))
    return cases


def write_goldens(cases: list[IRCase]) -> None:
    for case in cases:
        if case.regenerated is None:
            regenerate_case(case)
        case.golden_path.write_text(wire.dumps(case.regenerated) + "\n", encoding="utf-8")
