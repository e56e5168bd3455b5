"""
Payload Validation Utilities
=============================
Schema checks for the record lists returned by the sales API.

Design Principles:
- Never silently fail - always log issues
- Return structured validation results instead of raising
- Missing required fields are errors; dirty values are warnings
"""

import pandas as pd
from typing import Dict, List, Any
from dataclasses import dataclass, field

from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """
    Structured result of a validation operation.

    Attributes
    ----------
    is_valid : bool
        Overall validation status
    errors : List[str]
        Critical issues that prevent processing
    warnings : List[str]
        Non-critical issues to be aware of
    info : Dict[str, Any]
        Additional validation metadata
    """
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: Dict[str, Any] = field(default_factory=dict)

    def add_error(self, message: str) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_valid": self.is_valid,
            "errors": self.errors,
            "warnings": self.warnings,
            "info": self.info
        }


class SchemaValidator:
    """
    Validates raw API frames against the payload schemas in utils.constants.

    Usage
    -----
    validator = SchemaValidator()
    result = validator.validate(raw_orders, ORDER_SCHEMA)

    if not result.is_valid:
        print(f"Validation failed: {result.errors}")
    """

    def validate(self, df: pd.DataFrame, schema: Dict[str, Any]) -> ValidationResult:
        """
        Validate a raw (uncoerced) DataFrame against a schema.

        Parameters
        ----------
        df : pd.DataFrame
            Frame built directly from the API records
        schema : dict
            Schema definition with required / optional / typed columns

        Returns
        -------
        ValidationResult
            Structured validation result with errors/warnings
        """
        name = schema.get("name", "payload")
        result = ValidationResult()
        result.info["name"] = name
        result.info["row_count"] = len(df)

        # An empty list is a valid answer from the API
        if len(df) == 0:
            return result

        missing = [col for col in schema.get("required_columns", []) if col not in df.columns]
        if missing:
            result.add_error(f"Missing required fields in {name}: {missing}")

        present = [col for col in schema.get("optional_columns", []) if col in df.columns]
        result.info["optional_columns_present"] = present

        for col in schema.get("timestamp_columns", []):
            if col in df.columns:
                self._validate_timestamps(df, col, name, result)

        for col in schema.get("numeric_columns", []):
            if col in df.columns:
                self._validate_numeric(df, col, name, result)

        if "id" in df.columns:
            id_dup_count = int(df["id"].dropna().duplicated().sum())
            result.info["duplicate_ids"] = id_dup_count
            if id_dup_count > 0:
                result.add_warning(f"{name} has {id_dup_count} duplicate IDs")

        if result.is_valid:
            logger.debug(f"Validation PASSED for {name}")
        else:
            logger.error(f"Validation FAILED for {name}: {result.errors}")

        for warning in result.warnings:
            logger.warning(warning)

        return result

    def _validate_timestamps(
        self,
        df: pd.DataFrame,
        column: str,
        name: str,
        result: ValidationResult
    ) -> None:
        """Flag dates that cannot be parsed."""
        sample = df[column].dropna()
        missing_count = len(df) - len(sample)
        if missing_count:
            result.add_warning(f"{name}: {missing_count} records have no '{column}'")
        if len(sample) == 0:
            return

        parsed = pd.to_datetime(sample, errors='coerce', utc=True, format='ISO8601')
        invalid_count = int(parsed.isna().sum())
        if invalid_count:
            result.add_warning(f"{name}: {invalid_count} unparseable values in '{column}'")

        if parsed.notna().any():
            result.info[f"{column}_range"] = {
                "min": str(parsed.min()),
                "max": str(parsed.max())
            }

    def _validate_numeric(
        self,
        df: pd.DataFrame,
        column: str,
        name: str,
        result: ValidationResult
    ) -> None:
        """Flag non-numeric and negative amounts."""
        sample = df[column].dropna()
        if len(sample) == 0:
            return

        numeric = pd.to_numeric(sample, errors='coerce')
        invalid_count = int(numeric.isna().sum())
        if invalid_count:
            result.add_warning(f"{name}: {invalid_count} non-numeric values in '{column}'")

        neg_count = int((numeric < 0).sum())
        if neg_count:
            result.add_warning(f"{name}: {neg_count} negative values in '{column}'")
