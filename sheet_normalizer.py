"""
Spreadsheet 1NF/2NF normalization tool.

Takes the rows of one flat worksheet, splits multi-valued and composite cells
into atomic values (1NF), discovers every minimal candidate key, and extracts a
partial dependency on a composite key into its own relation (2NF). The
resulting relations carry primary/foreign key metadata and are rendered to a
SQL script by `sql_script_generator`.

The module is self contained and can be invoked as
`python sheet_normalizer.py path/to/workbook.xlsx`; run-wide settings live in
the CONFIG constant below. Every normalization stage is pure: it builds fresh
rows and never mutates its input, so each stage can be tested on its own.
Degenerate outcomes (no rows, no candidate key, ambiguous column names) are
reported as structured warnings on the result rather than raised.
"""
from __future__ import annotations

import argparse
import json
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import combinations, product
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from excel_reader import CURRENCY_SYMBOLS, IngestionError, read_excel_rows
from seed_demo_workbook import build_workbook
from sql_script_generator import generate_sql_script, to_sql_identifier


Row = Dict[str, Any]
AttributeSet = Tuple[str, ...]


# --------------------------------------------------------------------------------------
# Configuration
# --------------------------------------------------------------------------------------
CONFIG: Dict[str, Any] = {
    "HEURISTICS": {
        # A trimmed text cell containing this delimiter holds several atomic values.
        "ROW_SPLIT_DELIMITER": ",",
        "CURRENCY_SYMBOLS": CURRENCY_SYMBOLS,
        "MAX_UNIT_LENGTH": 3,
    },
    "NAMING": {
        "DEFAULT_PREFIX": "EXCEL_DATA",
        "MAIN_RELATION": "MainRelation",
        "DETAILS_SUFFIX": "Details",
    },
    "LIMITS": {
        # Key search is exponential in the attribute count; it still runs above
        # this width but the run is flagged.
        "KEY_SEARCH_WARN_ATTRIBUTES": 16,
    },
    "SQL": {
        "DIALECT": None,  # e.g. "sqlite", "postgresql"; None renders generic SQL
        "VARCHAR_LENGTH": 255,
        "DECIMAL_PRECISION": 18,
        "DECIMAL_SCALE": 4,
    },
    "OUTPUT": {
        "BASE_PATH": "output",
    },
}


# --------------------------------------------------------------------------------------
# Utility helpers
# --------------------------------------------------------------------------------------
def value_key(value: Any) -> Tuple[str, Any]:
    """Type-tagged comparison key for a cell value.

    Booleans, numbers and text never compare equal to each other (`True` vs `1`,
    `"1"` vs `1`); `None` compares equal only to `None`.
    """
    if value is None:
        return ("null", None)
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (int, float)):
        return ("number", value)
    if isinstance(value, str):
        return ("text", value)
    return (type(value).__name__, value)


def project(row: Row, attributes: Sequence[str]) -> Tuple[Tuple[str, Any], ...]:
    """Structural projection of one row; a missing column projects as null."""
    return tuple(value_key(row.get(attribute)) for attribute in attributes)


def relation_columns(rows: Iterable[Row]) -> List[str]:
    """Union of the column names of all rows, in encounter order."""
    columns: Dict[str, None] = {}
    for row in rows:
        for column in row:
            columns.setdefault(column, None)
    return list(columns)


# --------------------------------------------------------------------------------------
# Data containers
# --------------------------------------------------------------------------------------
@dataclass(frozen=True)
class NormalizationWarning:
    code: str
    message: str


@dataclass(frozen=True)
class DecomposedRelation:
    """A named relation with sanitized key metadata, ready for script generation.

    `foreign_keys` maps a sanitized local column to `OTHER_RELATION(COLUMN)`.
    Rows keep their source column names; `to_sql_identifier` maps them onto the
    key names.
    """

    name: str
    data: List[Row]
    primary_keys: Tuple[str, ...] = ()
    foreign_keys: Dict[str, str] = field(default_factory=dict)

    @property
    def columns(self) -> List[str]:
        return relation_columns(self.data)


@dataclass
class FirstNormalFormResult:
    rows: List[Row]
    # Columns produced by a heuristic rule; a later pass leaves them alone.
    derived_columns: FrozenSet[str] = frozenset()


@dataclass
class NormalizationOutcome:
    relations: List[DecomposedRelation]
    status: str
    candidate_keys: List[AttributeSet] = field(default_factory=list)
    selected_key: AttributeSet = ()
    warnings: List[NormalizationWarning] = field(default_factory=list)
    atomic_rows: List[Row] = field(default_factory=list)

    @property
    def is_degenerate(self) -> bool:
        return self.status in {"empty", "unkeyed", "reverted"}

    def warn(self, code: str, message: str) -> None:
        self.warnings.append(NormalizationWarning(code=code, message=message))
        print(f"[WARN] {message}")


# --------------------------------------------------------------------------------------
# Heuristic rules
# --------------------------------------------------------------------------------------
class HeuristicRule:
    """Replaces one composite text cell with derived `<column>_<suffix>` columns.

    `attempt` returns the derived columns in insertion order, or None when the
    rule declines. Non-text values are always declined, as are columns that
    already carry one of the rule's own suffixes.
    """

    name = "rule"
    suffixes: Tuple[str, str] = ("First", "Second")

    def attempt(self, column: str, value: Any) -> Optional[Row]:
        if not isinstance(value, str) or self.is_derived(column):
            return None
        return self._split(column, value.strip())

    def is_derived(self, column: str) -> bool:
        lowered = column.lower()
        return any(lowered.endswith(f"_{suffix.lower()}") for suffix in self.suffixes)

    def _split(self, column: str, text: str) -> Optional[Row]:
        raise NotImplementedError

    def _derived(self, column: str, first: Any, second: Any) -> Row:
        return {f"{column}_{self.suffixes[0]}": first, f"{column}_{self.suffixes[1]}": second}


class CurrencyRule(HeuristicRule):
    """`50.00 €` or `$60` -> `_Amount` (float) and `_Currency` (symbol)."""

    name = "currency"
    suffixes = ("Amount", "Currency")

    def __init__(self, symbols: Optional[str] = None) -> None:
        symbols = re.escape(symbols or CONFIG["HEURISTICS"]["CURRENCY_SYMBOLS"])
        amount = r"[-+]?\d+(?:\.\d+)?"
        # Exactly one symbol, either leading or trailing.
        self.pattern = re.compile(
            rf"^(?:(?P<lead>[{symbols}])\s*(?P<lead_amount>{amount})|(?P<amount>{amount})\s*(?P<trail>[{symbols}]))$"
        )

    def _split(self, column: str, text: str) -> Optional[Row]:
        match = self.pattern.match(text)
        if match is None:
            return None
        symbol = match.group("lead") or match.group("trail")
        try:
            amount = float(match.group("lead_amount") or match.group("amount"))
        except ValueError:
            return None
        return self._derived(column, amount, symbol)


class QuantityItemRule(HeuristicRule):
    """`5 Books` -> `_Quantity` (int) and `_Item`."""

    name = "quantity_item"
    suffixes = ("Quantity", "Item")
    pattern = re.compile(r"^(\d+)\s+(.+)$")

    def _split(self, column: str, text: str) -> Optional[Row]:
        match = self.pattern.match(text)
        if match is None:
            return None
        try:
            quantity = int(match.group(1))
        except ValueError:
            return None
        return self._derived(column, quantity, match.group(2).strip())


class ValueUnitRule(HeuristicRule):
    """`12.5 kg`, `20.5°C`, `101,1 mg` -> `_Value` (float) and `_Unit`.

    Generalist fallback for physical quantities, so it must run after the
    currency and quantity rules.
    """

    name = "value_unit"
    suffixes = ("Value", "Unit")

    def __init__(self, max_unit_length: Optional[int] = None) -> None:
        length = max_unit_length or CONFIG["HEURISTICS"]["MAX_UNIT_LENGTH"]
        self.pattern = re.compile(rf"^([-+]?\d+(?:[.,]\d+)?)\s*([A-Za-z%°.]{{1,{length}}})$")

    def _split(self, column: str, text: str) -> Optional[Row]:
        match = self.pattern.match(text)
        if match is None:
            return None
        try:
            value = float(match.group(1).replace(",", "."))
        except ValueError:
            return None
        return self._derived(column, value, match.group(2).strip())


class ParentheticalAliasRule(HeuristicRule):
    """`IBA (formerly BQL)` -> `_Primary` and `_Alias`."""

    name = "parenthetical_alias"
    suffixes = ("Primary", "Alias")
    pattern = re.compile(r"^(.*?)\s*\((.*?)\)$")

    def _split(self, column: str, text: str) -> Optional[Row]:
        match = self.pattern.match(text)
        if match is None:
            return None
        primary, alias = match.group(1).strip(), match.group(2).strip()
        if not primary or not alias:
            return None
        return self._derived(column, primary, alias)


def default_rules() -> List[HeuristicRule]:
    """The column-splitting chain. Order is precedence: the first match wins."""
    return [CurrencyRule(), QuantityItemRule(), ValueUnitRule(), ParentheticalAliasRule()]


# --------------------------------------------------------------------------------------
# First normal form
# --------------------------------------------------------------------------------------
class FirstNormalizer:
    """Row splitting for multi-valued cells, then column splitting for composite cells."""

    def __init__(self, rules: Optional[Sequence[HeuristicRule]] = None, delimiter: Optional[str] = None) -> None:
        self.rules = list(rules) if rules is not None else default_rules()
        self.delimiter = delimiter or CONFIG["HEURISTICS"]["ROW_SPLIT_DELIMITER"]

    def normalize(self, rows: Sequence[Row], derived_columns: Iterable[str] = ()) -> FirstNormalFormResult:
        if not rows:
            return FirstNormalFormResult(rows=[], derived_columns=frozenset(derived_columns))
        return self.split_columns(self.split_rows(rows), derived_columns)

    # Pass A --------------------------------------------------------------------------
    def _parts(self, value: Any) -> Optional[List[str]]:
        if not isinstance(value, str):
            return None
        trimmed = value.strip()
        if self.delimiter not in trimmed:
            return None
        return [part.strip() for part in trimmed.split(self.delimiter)]

    def expand_row(self, row: Row) -> List[Row]:
        """Cartesian product over every multi-valued column of one row.

        Earlier columns vary slowest; single-valued columns are repeated
        unchanged and column order is kept.
        """
        multi_valued = {}
        for column, value in row.items():
            parts = self._parts(value)
            if parts is not None:
                multi_valued[column] = parts
        if not multi_valued:
            return [dict(row)]

        split_columns = list(multi_valued)
        expanded = []
        for combination in product(*(multi_valued[column] for column in split_columns)):
            chosen = dict(zip(split_columns, combination))
            expanded.append({column: chosen[column] if column in chosen else value for column, value in row.items()})
        return expanded

    def split_rows(self, rows: Sequence[Row]) -> List[Row]:
        output: List[Row] = []
        for row in rows:
            output.extend(self.expand_row(row))
        return output

    # Pass B --------------------------------------------------------------------------
    def _apply_rules(self, column: str, value: Any, taken: Iterable[str] = ()) -> Optional[Row]:
        """First rule whose derived columns do not overwrite an existing column."""
        taken = set(taken)
        for rule in self.rules:
            derived = rule.attempt(column, value)
            if derived is None:
                continue
            if taken.intersection(derived):
                continue
            return derived
        return None

    def split_columns(self, rows: Sequence[Row], derived_columns: Iterable[str] = ()) -> FirstNormalFormResult:
        already_derived = frozenset(derived_columns)
        newly_derived = set()
        # A source column anywhere in the relation blocks a derived column of the same name.
        source_columns = set(relation_columns(rows))
        output: List[Row] = []
        for row in rows:
            new_row: Row = {}
            for column, value in row.items():
                derived = None
                if isinstance(value, str) and column not in already_derived:
                    derived = self._apply_rules(column, value, source_columns.union(new_row))
                if derived is None:
                    new_row[column] = value
                else:
                    new_row.update(derived)
                    newly_derived.update(derived)
            output.append(new_row)
        return FirstNormalFormResult(rows=output, derived_columns=already_derived | newly_derived)


# --------------------------------------------------------------------------------------
# Candidate keys
# --------------------------------------------------------------------------------------
class CandidateKeyFinder:
    """Enumerates all minimal candidate keys by ascending subset size.

    Attributes are taken from the first row. Subsets containing an accepted key
    are skipped, which keeps every accepted key minimal because all smaller
    sizes have already been tested. Cost is O(2^N * R) projections.
    """

    def __init__(self, rows: Sequence[Row]) -> None:
        self.rows = rows
        self.attributes: List[str] = list(rows[0].keys()) if rows else []

    def is_superkey(self, attributes: Sequence[str]) -> bool:
        seen = set()
        for row in self.rows:
            projected = project(row, attributes)
            if projected in seen:
                return False
            seen.add(projected)
        return True

    def find_candidates(self) -> List[AttributeSet]:
        if not self.rows or not self.attributes:
            return []
        # Duplicate full rows mean no subset can be unique either.
        if not self.is_superkey(self.attributes):
            return []

        candidates: List[AttributeSet] = []
        for size in range(1, len(self.attributes) + 1):
            for subset in combinations(self.attributes, size):
                if any(set(key).issubset(subset) for key in candidates):
                    continue
                if self.is_superkey(subset):
                    candidates.append(subset)
        return candidates


def select_key(candidate_keys: Sequence[AttributeSet]) -> AttributeSet:
    """Smallest composite key, else the smallest simple key; ties go to discovery order."""
    if not candidate_keys:
        return ()
    composite = [key for key in candidate_keys if len(key) > 1]
    return min(composite or list(candidate_keys), key=len)


def is_functionally_dependent(rows: Sequence[Row], determinant: str, dependent: str) -> bool:
    """Empirical check that `determinant -> dependent` holds on every row.

    Null equals null on both sides, so rows with a null determinant form one
    group like any other value. A determinant that is null in every row
    establishes no dependency.
    """
    seen: Dict[Tuple[str, Any], Tuple[str, Any]] = {}
    has_value = False
    for row in rows:
        det_value = row.get(determinant)
        has_value = has_value or det_value is not None
        dep_key = value_key(row.get(dependent))
        if seen.setdefault(value_key(det_value), dep_key) != dep_key:
            return False
    return has_value


# --------------------------------------------------------------------------------------
# Second normal form
# --------------------------------------------------------------------------------------
class SecondNormalizer:
    """Splits one partial dependency off a composite key into a details relation.

    Simplifications: the determinant is the first attribute of the selected key,
    only the first dependent attribute found (in column order) is extracted, and
    full dependency on the whole key is not ruled out.
    """

    def __init__(self, prefix: Optional[str] = None) -> None:
        self.prefix = prefix.strip() if prefix and prefix.strip() else None

    def relation_name(self, base: str) -> str:
        return to_sql_identifier(f"{self.prefix}_{base}" if self.prefix else base)

    @property
    def main_relation_name(self) -> str:
        return self.relation_name(CONFIG["NAMING"]["MAIN_RELATION"])

    def details_relation_name(self, determinant: str) -> str:
        return self.relation_name(f"{determinant}_{CONFIG['NAMING']['DETAILS_SUFFIX']}")

    def normalize(self, rows: Sequence[Row], candidate_keys: Optional[Sequence[AttributeSet]] = None) -> NormalizationOutcome:
        if not rows:
            outcome = NormalizationOutcome(relations=[], status="empty")
            outcome.warn("EMPTY_RELATION", "Relation has no rows; no relations produced.")
            return outcome

        if candidate_keys is None:
            candidate_keys = CandidateKeyFinder(rows).find_candidates()
        key = select_key(candidate_keys)
        if not key:
            outcome = NormalizationOutcome(
                relations=[DecomposedRelation(self.main_relation_name, [dict(r) for r in rows])],
                status="unkeyed",
            )
            outcome.warn(
                "NO_CANDIDATE_KEY",
                f"No candidate key could be identified; returning {self.main_relation_name} without keys.",
            )
            return outcome

        outcome = self.decompose(rows, key)
        outcome.candidate_keys = list(candidate_keys)
        return outcome

    def _ambiguous_identifiers(self, rows: Sequence[Row]) -> List[str]:
        owners: Dict[str, str] = {}
        clashes = []
        for column in relation_columns(rows):
            identifier = to_sql_identifier(column)
            if identifier in owners and owners[identifier] != column:
                clashes.append(f"{owners[identifier]!r}/{column!r} -> {identifier}")
            owners.setdefault(identifier, column)
        return clashes

    def _unchanged(self, rows: Sequence[Row], key: AttributeSet) -> NormalizationOutcome:
        relation = DecomposedRelation(
            name=self.main_relation_name,
            data=[dict(row) for row in rows],
            primary_keys=tuple(to_sql_identifier(attribute) for attribute in key),
        )
        return NormalizationOutcome(relations=[relation], status="unchanged", selected_key=key)

    def find_partial_dependency(self, rows: Sequence[Row], key: AttributeSet, determinant: str) -> Optional[str]:
        for column in rows[0]:
            if column in key:
                continue
            if is_functionally_dependent(rows, determinant, column):
                return column
        return None

    def decompose(self, rows: Sequence[Row], key: AttributeSet) -> NormalizationOutcome:
        clashes = self._ambiguous_identifiers(rows)
        if clashes:
            outcome = NormalizationOutcome(
                relations=[DecomposedRelation(self.main_relation_name, [dict(r) for r in rows])],
                status="reverted",
                selected_key=key,
            )
            outcome.warn(
                "NAME_MAPPING_FAULT",
                "Column names collide after sanitization (" + "; ".join(clashes) + "); relation left undecomposed.",
            )
            return outcome

        if len(key) <= 1:
            return self._unchanged(rows, key)

        determinant = key[0]
        dependent = self.find_partial_dependency(rows, key, determinant)
        if dependent is None:
            return self._unchanged(rows, key)

        details_rows: List[Row] = []
        seen = set()
        for row in rows:
            projected = project(row, (determinant, dependent))
            if projected in seen:
                continue
            seen.add(projected)
            details_rows.append({determinant: row.get(determinant), dependent: row.get(dependent)})

        determinant_id = to_sql_identifier(determinant)
        details_name = self.details_relation_name(determinant)
        details = DecomposedRelation(
            name=details_name,
            data=details_rows,
            primary_keys=(determinant_id,),
        )
        main = DecomposedRelation(
            name=self.main_relation_name,
            data=[{column: value for column, value in row.items() if column != dependent} for row in rows],
            primary_keys=tuple(to_sql_identifier(attribute) for attribute in key),
            foreign_keys={determinant_id: f"{details_name}({determinant_id})"},
        )
        return NormalizationOutcome(relations=[details, main], status="decomposed", selected_key=key)


# --------------------------------------------------------------------------------------
# Pipeline entry points
# --------------------------------------------------------------------------------------
def normalize_to_1nf(rows: Sequence[Row]) -> List[Row]:
    return FirstNormalizer().normalize(rows).rows


def identify_candidate_keys(rows: Sequence[Row]) -> List[AttributeSet]:
    return CandidateKeyFinder(rows).find_candidates()


def normalize_to_2nf(rows: Sequence[Row], prefix: Optional[str] = None) -> NormalizationOutcome:
    return SecondNormalizer(prefix).normalize(rows)


def normalize_relation(rows: Sequence[Row], prefix: Optional[str] = None) -> NormalizationOutcome:
    """Raw rows -> 1NF -> candidate keys -> 2NF relations."""
    atomic = FirstNormalizer().normalize(rows).rows
    finder = CandidateKeyFinder(atomic)
    wide = len(finder.attributes) > CONFIG["LIMITS"]["KEY_SEARCH_WARN_ATTRIBUTES"]
    if wide:
        print(f"[WARN] Key search over {len(finder.attributes)} attributes; this may take a while.")
    outcome = SecondNormalizer(prefix).normalize(atomic, finder.find_candidates() if atomic else None)
    if wide:
        outcome.warnings.append(
            NormalizationWarning("WIDE_KEY_SEARCH", f"Key search covered {len(finder.attributes)} attributes.")
        )
    outcome.atomic_rows = atomic
    return outcome


# --------------------------------------------------------------------------------------
# Artifact writer
# --------------------------------------------------------------------------------------
class ArtifactWriter:
    """Writes the SQL script, a machine-readable relation dump and a readable report."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)

    def write_json(self, path: Path, obj: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(obj, indent=2, default=str, ensure_ascii=False), encoding="utf-8")

    def write_sql(self, path: Path, script: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(script, encoding="utf-8")

    def write_report(self, path: Path, context: Dict[str, Any]) -> None:
        outcome: NormalizationOutcome = context["outcome"]
        lines = [
            f"# Normalization Report: {context['source']}",
            "",
            "## Input",
            f"- Source rows: {context['source_rows']}",
            f"- Rows after 1NF: {len(outcome.atomic_rows)}",
            "",
            "## Candidate Keys",
        ]
        if outcome.candidate_keys:
            for key in outcome.candidate_keys:
                lines.append(f"- ({', '.join(key)})")
        else:
            lines.append("- None identified.")
        lines.append("")
        lines.append("## Outcome")
        lines.append(f"- Selected key: ({', '.join(outcome.selected_key)})")
        lines.append(f"- Status: {outcome.status}")
        for warning in outcome.warnings:
            lines.append(f"- Warning [{warning.code}]: {warning.message}")
        lines.append("")
        lines.append("## Relations")
        for relation in outcome.relations:
            lines.append(f"- {relation.name}: {len(relation.data)} rows")
            lines.append(f"  - Primary key: {', '.join(relation.primary_keys) or '(none)'}")
            for column, reference in relation.foreign_keys.items():
                lines.append(f"  - Foreign key: {column} -> {reference}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines), encoding="utf-8")


# --------------------------------------------------------------------------------------
# Runner
# --------------------------------------------------------------------------------------
class Runner:
    """Reads one workbook, normalizes it and writes the artifacts of the run."""

    def __init__(self, workbook: Path, prefix: Optional[str] = None, output_base: Optional[Path] = None) -> None:
        self.workbook = Path(workbook)
        self.prefix = prefix if prefix and prefix.strip() else CONFIG["NAMING"]["DEFAULT_PREFIX"]
        ts = datetime.now(timezone.utc).strftime("run_%Y%m%d_%H%M%S")
        self.output_root = Path(output_base or CONFIG["OUTPUT"]["BASE_PATH"]) / ts
        self.writer = ArtifactWriter(self.output_root)

    def run(self) -> Optional[NormalizationOutcome]:
        print(f"[INFO] Reading workbook {self.workbook}")
        try:
            rows = read_excel_rows(self.workbook, CONFIG["HEURISTICS"]["CURRENCY_SYMBOLS"])
        except IngestionError as exc:
            print(f"[ERROR] Failed reading {self.workbook}: {exc}")
            return None
        print(f"[INFO] Read {len(rows)} rows")

        outcome = normalize_relation(rows, prefix=self.prefix)
        print(f"[INFO] 1NF complete: {len(outcome.atomic_rows)} atomic rows")
        print(f"[INFO] Candidate keys: {outcome.candidate_keys or 'none'}")
        print(f"[INFO] 2NF complete ({outcome.status}): {len(outcome.relations)} relation(s)")

        for relation in outcome.relations:
            print(f"[INFO] == {relation.name} == PK {list(relation.primary_keys)} FK {relation.foreign_keys}")

        sql_cfg = CONFIG["SQL"]
        script = generate_sql_script(
            outcome.relations,
            dialect=sql_cfg["DIALECT"],
            varchar_length=sql_cfg["VARCHAR_LENGTH"],
            decimal_precision=sql_cfg["DECIMAL_PRECISION"],
            decimal_scale=sql_cfg["DECIMAL_SCALE"],
        )
        self.writer.write_sql(self.output_root / "schema.sql", script)
        self.writer.write_json(
            self.output_root / "relations.json",
            [self._relation_to_dict(relation) for relation in outcome.relations],
        )
        self.writer.write_report(
            self.output_root / "report.md",
            {"source": self.workbook.name, "source_rows": len(rows), "outcome": outcome},
        )
        print(f"[INFO] Run complete. Artifacts at {self.output_root}")
        return outcome

    @staticmethod
    def _relation_to_dict(relation: DecomposedRelation) -> Dict[str, Any]:
        return {
            "name": relation.name,
            "primary_keys": list(relation.primary_keys),
            "foreign_keys": relation.foreign_keys,
            "row_count": len(relation.data),
            "data": relation.data,
        }


def _configure_demo_source(output_base: Path) -> Path:
    """Write the demo workbook and return its path."""
    return build_workbook(output_base / "demo_enrollments.xlsx")


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Normalize a spreadsheet to 2NF and emit a SQL script.")
    parser.add_argument("source", help="Path to an .xlsx workbook, or 'demo' to use the bundled demo data.")
    parser.add_argument("--prefix", default=None, help="Relation name prefix (default: EXCEL_DATA)")
    parser.add_argument("--dialect", default=None, help="SQLAlchemy dialect name for the script, e.g. sqlite")
    parser.add_argument("--output", default=None, help="Base directory for run artifacts")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    if args.dialect:
        CONFIG["SQL"]["DIALECT"] = args.dialect
    if args.output:
        CONFIG["OUTPUT"]["BASE_PATH"] = args.output
    output_base = Path(CONFIG["OUTPUT"]["BASE_PATH"])

    workbook = _configure_demo_source(output_base) if args.source == "demo" else Path(args.source)
    outcome = Runner(workbook, prefix=args.prefix, output_base=output_base).run()
    return 0 if outcome is not None else 1


if __name__ == "__main__":
    sys.exit(main())
