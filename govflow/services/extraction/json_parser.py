"""Tolerant JSON parsing for extraction adapter output."""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Optional

from govflow.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Outcome of parsing adapter output without raising."""

    data: dict[str, Any] = field(default_factory=dict)
    success: bool = False
    error: Optional[str] = None
    strategy: Optional[str] = None


class RobustJSONParser:
    """Parser for potentially malformed JSON returned by LLM adapters."""

    @staticmethod
    def clean_json_string(text: str) -> str:
        """
        Clean common JSON formatting issues from LLM responses.

        Args:
            text: Raw text that might contain JSON

        Returns:
            Cleaned JSON string
        """
        # Remove markdown code fences
        text = re.sub(r"```(?:json)?\s*", "", text, flags=re.IGNORECASE)
        text = text.strip()

        # Remove trailing commas
        text = re.sub(r",\s*}", "}", text)
        text = re.sub(r",\s*]", "]", text)
        return text

    @staticmethod
    def extract_json_object(text: str) -> Optional[str]:
        """
        Extract the first balanced JSON object from text.

        Args:
            text: Text containing JSON

        Returns:
            Extracted JSON string, or None when no object starts in the text
        """
        start_idx = text.find("{")
        if start_idx == -1:
            return None

        depth = 0
        in_string = False
        escape_next = False

        for i in range(start_idx, len(text)):
            char = text[i]

            if escape_next:
                escape_next = False
                continue
            if char == "\\":
                escape_next = True
                continue
            if char == '"':
                in_string = not in_string
                continue

            if not in_string:
                if char == "{":
                    depth += 1
                elif char == "}":
                    depth -= 1
                    if depth == 0:
                        return text[start_idx : i + 1]

        # Truncated output: close what is still open
        if depth > 0:
            return text[start_idx:] + "}" * depth
        return None

    @classmethod
    def parse(cls, text: Any) -> ParseResult:
        """
        Parse adapter output with several fallback strategies.

        Only JSON objects count as success; arrays and scalars are rejected.
        """
        if not isinstance(text, str) or not text.strip():
            return ParseResult(error="Empty extraction output")

        strategies = (
            ("direct", lambda t: t),
            ("cleaned", cls.clean_json_string),
            ("extracted", lambda t: cls.extract_json_object(cls.clean_json_string(t))),
        )
        last_error = "No JSON object found"
        for name, prepare in strategies:
            candidate = prepare(text)
            if not candidate:
                continue
            try:
                data = json.loads(candidate)
            except json.JSONDecodeError as e:
                last_error = f"Invalid JSON: {e.msg}"
                continue
            if isinstance(data, dict):
                return ParseResult(data=data, success=True, strategy=name)
            last_error = "Extraction output is not a JSON object"

        logger.warning("JSON parsing failed after all strategies: %s", last_error)
        return ParseResult(error=last_error)


def parse_ai_json(text: Any) -> dict[str, Any]:
    """
    Parse adapter output into a dict.

    Raises:
        ExtractionError: If no JSON object can be recovered
    """
    result = RobustJSONParser.parse(text)
    if not result.success:
        raise ExtractionError(result.error or "Failed to parse extraction output")
    return result.data


def parse_ai_json_safe(text: Any) -> ParseResult:
    """Parse adapter output, reporting failure in the result instead of raising."""
    return RobustJSONParser.parse(text)
