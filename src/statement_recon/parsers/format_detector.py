"""
Statement CSV format detection.

Classifies every column into a semantic role (date, description, amount)
from its header text and a sample of its values. There are no per-bank
templates: each column gets a scored table of role candidates and the best
column per role is picked from those tables.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
import logging

from ..config import CsvInputConfig, ReconConfig
from .csv_frame import StatementFrame, read_statement_frame
from .values import is_amount_shaped, parse_date

logger = logging.getLogger(__name__)


class ColumnRole(Enum):
    """Semantic role of a statement column."""

    DATE = "date"
    DESCRIPTION = "description"
    AMOUNT = "amount"
    UNKNOWN = "unknown"


# Order matters: description is assigned last so it takes what is left over
REQUIRED_ROLES = (ColumnRole.DATE, ColumnRole.AMOUNT, ColumnRole.DESCRIPTION)
SCORED_ROLES = (ColumnRole.DATE, ColumnRole.DESCRIPTION, ColumnRole.AMOUNT)


@dataclass(frozen=True)
class ColumnHints:
    """Caller-supplied column names that override detection."""

    date_column: Optional[str] = None
    description_column: Optional[str] = None
    amount_column: Optional[str] = None

    def for_role(self, role: ColumnRole) -> Optional[str]:
        return {
            ColumnRole.DATE: self.date_column,
            ColumnRole.DESCRIPTION: self.description_column,
            ColumnRole.AMOUNT: self.amount_column,
        }.get(role)

    @property
    def is_empty(self) -> bool:
        return not (self.date_column or self.description_column or self.amount_column)


@dataclass
class ColumnClassification:
    """Analysis of a single CSV column."""

    index: int
    column_name: str
    role: ColumnRole
    confidence: float
    sample_values: list[str] = field(default_factory=list)
    # Confidence per role, clamped to [0, 1]
    scores: dict[ColumnRole, float] = field(default_factory=dict)
    # Unclamped ranking value per role (content score plus header bonus)
    ranks: dict[ColumnRole, float] = field(default_factory=dict)
    average_length: float = 0.0
    assigned: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "column_name": self.column_name,
            "role": self.role.value,
            "confidence": round(self.confidence, 3),
            "assigned": self.assigned,
            "sample_values": list(self.sample_values),
            "scores": {role.value: round(score, 3) for role, score in self.scores.items()},
        }


@dataclass(frozen=True)
class AmountColumn:
    """
    A column contributing to the signed amount.

    kind is "signed" for a single amount column taken as-is, "credit" for
    a money-in column (always positive) and "debit" for a money-out column
    (always negative).
    """

    index: int
    kind: str = "signed"


@dataclass
class FormatDetectionResult:
    """Best role assignment for a statement CSV, or the reason there is none."""

    success: bool
    column_analysis: list[ColumnClassification]
    date_column: Optional[int] = None
    description_column: Optional[int] = None
    amount_columns: list[AmountColumn] = field(default_factory=list)
    confidence: float = 0.0
    errors: list[str] = field(default_factory=list)


def header_matches(header: str, keywords: list[str]) -> bool:
    """Case-insensitive substring test of a header against keywords."""
    name = header.lower()
    return any(keyword in name for keyword in keywords)


def score_column(header: str, values: list[str], csv_config: CsvInputConfig) -> dict[ColumnRole, float]:
    """
    Score how well sampled values fit each role, ignoring header wording.

    Args:
        header: Column header (only used to exclude running balances)
        values: Non-empty sampled values
        csv_config: Detection settings

    Returns:
        Content score in [0, 1] per role
    """
    scores = {role: 0.0 for role in SCORED_ROLES}
    if not values:
        return scores

    total = len(values)
    date_hits = [parse_date(v, csv_config.date_formats) is not None for v in values]
    amount_hits = [is_amount_shaped(v) for v in values]

    scores[ColumnRole.DATE] = sum(date_hits) / total

    # A running balance is amount-shaped but never the transaction amount
    if not header_matches(header, csv_config.balance_keywords):
        scores[ColumnRole.AMOUNT] = sum(amount_hits) / total

    text_hits = sum(
        1
        for value, is_date, is_amount in zip(values, date_hits, amount_hits)
        if not is_date
        and not is_amount
        and len(value) >= csv_config.description_min_length
        and any(ch.isalpha() for ch in value)
    )
    if text_hits:
        average_length = sum(len(v) for v in values) / total
        length_factor = min(1.0, 0.5 + average_length / 30)
        scores[ColumnRole.DESCRIPTION] = (text_hits / total) * length_factor

    return scores


def header_bonus(header: str, role: ColumnRole, csv_config: CsvInputConfig) -> float:
    """Ranking bonus a header earns for a role."""
    bonus = 0.0
    if header_matches(header, csv_config.header_keywords.get(role.value, [])):
        bonus += csv_config.header_bonus

    if role == ColumnRole.DATE:
        # Earlier priority keywords outrank later ones ("Posting Date" over "Effective Date")
        name = header.lower()
        count = len(csv_config.date_priority_keywords)
        for position, keyword in enumerate(csv_config.date_priority_keywords):
            if keyword in name:
                bonus += 0.01 * (count - position)

    return bonus


def classify_columns(frame: StatementFrame, csv_config: CsvInputConfig) -> list[ColumnClassification]:
    """
    Build the scored role table for every column of a statement.

    Pure function of the frame and settings; no role is assigned here.
    """
    analysis: list[ColumnClassification] = []

    for index, header in enumerate(frame.headers):
        values = frame.column_values(index, limit=csv_config.sample_rows)
        content = score_column(header, values, csv_config)

        ranks: dict[ColumnRole, float] = {}
        for role, score in content.items():
            ranks[role] = score + header_bonus(header, role, csv_config) if score > 0 else 0.0
        scores = {role: min(1.0, rank) for role, rank in ranks.items()}

        best_role = max(SCORED_ROLES, key=lambda r: ranks[r])
        if ranks[best_role] <= 0:
            best_role = ColumnRole.UNKNOWN

        analysis.append(
            ColumnClassification(
                index=index,
                column_name=header,
                role=best_role,
                confidence=scores.get(best_role, 0.0),
                sample_values=values[:3],
                scores=scores,
                ranks=ranks,
                average_length=(sum(len(v) for v in values) / len(values)) if values else 0.0,
            )
        )

    return analysis


def find_column(analysis: list[ColumnClassification], name: str) -> Optional[int]:
    """Locate a column by header name: exact (case-insensitive) first, then substring."""
    wanted = name.strip().lower()
    for column in analysis:
        if column.column_name.strip().lower() == wanted:
            return column.index
    for column in analysis:
        if wanted and wanted in column.column_name.lower():
            return column.index
    return None


class FormatDetector:
    """
    Detects which statement columns hold the date, description and amount.

    Detection failure is reported through an unsuccessful
    FormatDetectionResult that carries the full column analysis, so a
    caller can retry with explicit hints.
    """

    def __init__(self, config: ReconConfig):
        """
        Initialize the detector.

        Args:
            config: Application configuration
        """
        self.csv_config = config.input.csv

    def detect(self, csv_text: str, hints: Optional[ColumnHints] = None) -> FormatDetectionResult:
        """Detect column roles in raw CSV text."""
        frame = read_statement_frame(csv_text, self.csv_config.delimiter)
        return self.detect_frame(frame, hints)

    def detect_frame(
        self, frame: StatementFrame, hints: Optional[ColumnHints] = None
    ) -> FormatDetectionResult:
        """Detect column roles in an already parsed frame."""
        analysis = classify_columns(frame, self.csv_config)
        errors: list[str] = []

        if frame.row_count == 0:
            errors.append("CSV must have at least a header row and one data row")
        if frame.column_count < 3:
            errors.append("CSV must have at least 3 columns")
        if errors:
            return FormatDetectionResult(success=False, column_analysis=analysis, errors=errors)

        result = self._assign_roles(analysis, hints or ColumnHints())

        if result.success:
            logger.debug(
                f"Detected columns: date={frame.headers[result.date_column]!r}, "
                f"description={frame.headers[result.description_column]!r}, "
                f"amount={[frame.headers[a.index] for a in result.amount_columns]} "
                f"(confidence {result.confidence:.2f})"
            )
        else:
            logger.info(f"Format detection failed: {'; '.join(result.errors)}")

        return result

    def _assign_roles(
        self, analysis: list[ColumnClassification], hints: ColumnHints
    ) -> FormatDetectionResult:
        """Pick one column per required role, hints first."""
        floor = self.csv_config.confidence_floor
        errors: list[str] = []
        assigned: dict[ColumnRole, list[AmountColumn]] = {}
        confidences: dict[ColumnRole, float] = {}
        used: set[int] = set()
        hinted_roles: set[ColumnRole] = set()

        # Hints take precedence over content scores
        for role in REQUIRED_ROLES:
            hint = hints.for_role(role)
            if not hint:
                continue
            hinted_roles.add(role)
            index = find_column(analysis, hint)
            if index is None:
                errors.append(f"Hinted {role.value} column '{hint}' not found in header")
                continue
            assigned[role] = [AmountColumn(index)]
            confidences[role] = 1.0
            used.add(index)
            self._mark(analysis[index], role, 1.0)

        for role in REQUIRED_ROLES:
            if role in hinted_roles:
                continue

            if role == ColumnRole.AMOUNT:
                pair = self._debit_credit_pair(analysis, used)
                if pair:
                    assigned[role] = pair
                    confidences[role] = min(analysis[a.index].scores[role] for a in pair)
                    for amount_column in pair:
                        used.add(amount_column.index)
                        self._mark(analysis[amount_column.index], role)
                    continue

            candidates = [
                c for c in analysis if c.index not in used and c.scores.get(role, 0.0) >= floor
            ]
            if not candidates:
                continue

            best = min(
                candidates,
                key=lambda c: (
                    -c.ranks[role],
                    -c.average_length if role == ColumnRole.DESCRIPTION else 0.0,
                    c.index,
                ),
            )
            assigned[role] = [AmountColumn(best.index)]
            confidences[role] = best.scores[role]
            used.add(best.index)
            self._mark(best, role)

        missing = [role.value for role in REQUIRED_ROLES if role not in assigned]
        if missing:
            errors.append(
                f"Could not identify required columns ({', '.join(missing)}); "
                f"only {len(assigned)} of 3 roles classified"
            )

        if errors:
            return FormatDetectionResult(success=False, column_analysis=analysis, errors=errors)

        return FormatDetectionResult(
            success=True,
            column_analysis=analysis,
            date_column=assigned[ColumnRole.DATE][0].index,
            description_column=assigned[ColumnRole.DESCRIPTION][0].index,
            amount_columns=assigned[ColumnRole.AMOUNT],
            confidence=sum(confidences.values()) / len(confidences),
        )

    def _debit_credit_pair(
        self, analysis: list[ColumnClassification], used: set[int]
    ) -> Optional[list[AmountColumn]]:
        """
        Find separate money-out / money-in columns to combine into one amount.

        Headers such as "Debit Amount" / "Credit Amount" still form a pair;
        a plain signed amount column ("Amount") alongside them wins instead.
        """
        floor = self.csv_config.confidence_floor
        amount_like = [
            c for c in analysis if c.index not in used and c.scores[ColumnRole.AMOUNT] >= floor
        ]

        debit = next(
            (c for c in amount_like if header_matches(c.column_name, self.csv_config.debit_keywords)),
            None,
        )
        credit = next(
            (
                c
                for c in amount_like
                if header_matches(c.column_name, self.csv_config.credit_keywords)
                and (debit is None or c.index != debit.index)
            ),
            None,
        )
        if debit is None or credit is None:
            return None

        amount_keywords = self.csv_config.header_keywords.get(ColumnRole.AMOUNT.value, [])
        signed_amount = any(
            header_matches(c.column_name, amount_keywords)
            and c.index not in (debit.index, credit.index)
            for c in amount_like
        )
        if signed_amount:
            return None

        return [AmountColumn(credit.index, "credit"), AmountColumn(debit.index, "debit")]

    @staticmethod
    def _mark(column: ColumnClassification, role: ColumnRole, confidence: Optional[float] = None) -> None:
        column.role = role
        column.confidence = confidence if confidence is not None else column.scores.get(role, 0.0)
        column.assigned = True
