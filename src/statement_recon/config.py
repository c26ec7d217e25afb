"""Configuration loader and validation for reconciliation settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CsvInputConfig(BaseModel):
    """Configuration for statement CSV detection and parsing."""

    encoding: str = "utf-8"
    delimiter: str = ","
    sample_rows: int = Field(default=10, ge=1)
    confidence_floor: float = Field(default=0.7, ge=0.0, le=1.0)
    description_min_length: int = Field(default=4, ge=1)
    date_formats: list[str] = Field(
        default_factory=lambda: [
            "%m/%d/%Y",
            "%m/%d/%y",
            "%Y-%m-%d",
            "%Y/%m/%d",
            "%m-%d-%Y",
            "%d %b %Y",
            "%d %B %Y",
            "%b %d, %Y",
            "%B %d, %Y",
            "%b %d %Y",
            "%d-%b-%Y",
        ]
    )
    header_keywords: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "date": ["date", "posted", "posting"],
            "description": ["description", "payee", "memo", "merchant", "narrative", "name"],
            "amount": ["amount", "amt"],
        }
    )
    header_bonus: float = 0.25
    date_priority_keywords: list[str] = Field(default_factory=lambda: ["post", "date"])
    balance_keywords: list[str] = Field(default_factory=lambda: ["balance", "running"])
    debit_keywords: list[str] = Field(
        default_factory=lambda: ["debit", "withdrawal", "withdrawals", "outflow", "money out", "paid out"]
    )
    credit_keywords: list[str] = Field(
        default_factory=lambda: ["credit", "deposit", "deposits", "inflow", "money in", "paid in"]
    )


class InputConfig(BaseModel):
    """Configuration for input parsing."""

    csv: CsvInputConfig = Field(default_factory=CsvInputConfig)


class KeywordsConfig(BaseModel):
    """Tables used to reduce descriptions to keyword sets."""

    min_token_length: int = Field(default=2, ge=1)
    min_reference_digits: int = Field(default=4, ge=1)
    stoplist: list[str] = Field(
        default_factory=lambda: [
            "web", "id", "ach", "ppd", "trn", "tel", "ccd", "pos", "atm",
            "payment", "pmt", "transfer", "xfer", "transaction", "auto", "pay",
            "credit", "debit", "fee", "withdrawal", "deposit", "online",
            "electronic", "wire", "check", "chk", "card", "td", "amt", "ref",
            "conf", "auth", "app", "mobile", "digital", "inc", "corp", "llc",
            "ltd", "co", "company", "bank", "financial", "com", "www", "tn",
            "from", "to", "the", "and", "of", "purchase",
        ]
    )
    aliases: dict[str, str] = Field(
        default_factory=lambda: {
            "gsbank": "apple",
            "applecard": "apple",
            "pwp": "privacy",
            "privacycom": "privacy",
            "mercuryach": "mercury",
            "wells": "wellsfargo",
            "fargo": "wellsfargo",
            "bankamerica": "bankofamerica",
            "bofa": "bankofamerica",
            "amzn": "amazon",
            "sbux": "starbucks",
            "wmt": "walmart",
            "mcdonalds": "mcdonald",
            "hylandvillage": "hyland",
        }
    )
    compounds: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "mcdonaldmazda": ["mcdonald", "mazda"],
            "smirnovlabs": ["smirnov", "labs"],
            "hylandvillage": ["hyland", "village"],
            "ctoblueprint": ["cto", "blueprint"],
            "alpenglownexus": ["alpenglow", "nexus"],
        }
    )


class ScoringConfig(BaseModel):
    """Description similarity scoring settings."""

    important_merchants: list[str] = Field(
        default_factory=lambda: [
            "apple", "amazon", "google", "microsoft", "target", "walmart",
            "starbucks", "mcdonald", "mazda", "hyland", "smirnov", "privacy",
            "venmo", "paypal", "discover", "chase", "wellsfargo", "schwab",
            "bankofamerica", "mercury", "netflix", "spotify", "costco", "uber",
        ]
    )
    important_merchant_boost: float = Field(default=0.4, ge=0.0, le=1.0)


class MatchingWeights(BaseModel):
    """Weights of the combined fuzzy score components."""

    amount: float = Field(default=0.4, ge=0.0)
    date: float = Field(default=0.3, ge=0.0)
    description: float = Field(default=0.3, ge=0.0)


class MatchingConfig(BaseModel):
    """Configuration for the two-pass matcher."""

    amount_tolerance: float = Field(default=0.01, ge=0.0)
    date_window_days: int = Field(default=3, ge=0)
    min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    weights: MatchingWeights = Field(default_factory=MatchingWeights)


class ReportConfig(BaseModel):
    """Configuration for report building."""

    lookback_margin_days: int = Field(default=3, ge=0)
    review_max_discrepancies: int = 2
    review_max_difference: float = 10.0
    low_confidence_threshold: float = 0.8
    sample_matches: int = 10


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "reconciliation_{account}_{date}.xlsx"


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    matched: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Matched"))
    missing_from_ledger: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Missing From Ledger")
    )
    not_on_statement: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Not On Statement")
    )
    warnings: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Row Warnings"))


class OutputConfig(BaseModel):
    """Configuration for output."""

    format: str = "markdown"
    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None


class ReconConfig(BaseModel):
    """Main configuration model for reconciliation."""

    input: InputConfig = Field(default_factory=InputConfig)
    keywords: KeywordsConfig = Field(default_factory=KeywordsConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return ReconConfig().model_dump(mode="json", exclude={"config_file_path"})


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Statement-to-ledger reconciliation configuration
# keywords.aliases maps bank merchant codes to the payee keyword used in the ledger.
# Heuristic thresholds under matching/scoring are tunable defaults.

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
