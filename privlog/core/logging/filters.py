"""PII (Personally Identifiable Information) redaction for log records.

This module masks sensitive data in both structured payloads and free-text
messages before they reach any sink:

- Field-name masking: a map key found in ``SENSITIVE_FIELDS`` has its whole
  value replaced with ``MASK_TOKEN`` without looking inside it.
- Content scrubbing: every string leaf is run through ``DEFAULT_PATTERNS``
  in order, each rule operating on the output of the previous one.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from re import Pattern
from typing import Any, TypeAlias

# str | int | float | bool | None | list[DataTree] | dict[str, DataTree]
DataTree: TypeAlias = Any

MASK_TOKEN = "***"
CYCLE_MARKER = "[CIRCULAR]"
DEPTH_MARKER = "[TOO_DEEP]"
MAX_DEPTH = 64

# Processor keys structlog formats itself; they hold no user payload
_PASSTHROUGH_KEYS = frozenset({"exc_info", "stack_info"})

SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        # Authentication
        "password",
        "token",
        "secret",
        "apiKey",
        "accessToken",
        "refreshToken",
        "sessionToken",
        # Personal data
        "email",
        "phone",
        "phoneNumber",
        "name",
        "surname",
        "fullName",
        # Identifiers
        "userId",
        "uid",
        "sessionId",
        "deviceId",
        # Financial
        "creditCard",
        "cardNumber",
        "cvv",
        "iban",
        # Health
        "patientId",
        "medicalRecord",
        "diagnosis",
        "personalHealthInfo",
    }
)


@dataclass(frozen=True)
class RedactionPattern:
    """A content-based redaction rule applied to string values."""

    name: str
    pattern: Pattern[str]
    replacement: str = "[REDACTED]"
    description: str = ""

    def apply(self, text: str) -> str:
        """Replace every non-overlapping match in ``text``."""
        return self.pattern.sub(self.replacement, text)


# Order matters: each rule sees the output of the rules before it.
DEFAULT_PATTERNS: tuple[RedactionPattern, ...] = (
    RedactionPattern(
        name="email",
        pattern=re.compile(
            r"\b[A-Za-z0-9._%+-]+@(?P<domain>[A-Za-z0-9.-]+\.[A-Za-z]{2,})\b"
        ),
        replacement=r"***@\g<domain>",
        description="Email addresses (domain is kept)",
    ),
    RedactionPattern(
        name="phone_national",
        pattern=re.compile(
            r"(?<![\w+])"  # Not glued to a word or a longer number
            r"(?:(?:\+39|0039)\s?)?"  # Optional country prefix
            r"(?:\d{2,3}\s?\d{6,7}|\d{3}\s?\d{7})"
            r"(?!\d)"
        ),
        replacement="[PHONE_REDACTED]",
        description="National phone numbers",
    ),
    RedactionPattern(
        name="phone_intl",
        pattern=re.compile(r"\+[1-9]\d{1,14}(?!\d)"),
        replacement="[PHONE_REDACTED]",
        description="International E.164 phone numbers",
    ),
    RedactionPattern(
        name="credit_card",
        pattern=re.compile(
            r"\b(?:4[0-9]{12}(?:[0-9]{3})?|"  # Visa
            r"5[1-5][0-9]{14}|"  # Mastercard
            r"3[47][0-9]{13}|"  # American Express
            r"3(?:0[0-5]|[68][0-9])[0-9]{11}|"  # Diners Club
            r"6(?:011|5[0-9]{2})[0-9]{12})\b"  # Discover
        ),
        replacement="[CARD_REDACTED]",
        description="Credit card numbers",
    ),
    RedactionPattern(
        name="tax_id",
        pattern=re.compile(r"\b[A-Z]{6}[0-9]{2}[ABCDEHLMPRST][0-9]{2}[A-Z][0-9]{3}[A-Z]\b"),
        replacement="[CF_REDACTED]",
        description="National tax identifiers (codice fiscale)",
    ),
    RedactionPattern(
        name="iban",
        pattern=re.compile(r"\b[A-Z]{2}[0-9]{2}[A-Z0-9]{11,30}\b"),
        replacement="[IBAN_REDACTED]",
        description="IBAN account numbers",
    ),
    RedactionPattern(
        name="bearer_token",
        pattern=re.compile(r"eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_\-.+/=]*"),
        replacement="[TOKEN_REDACTED]",
        description="JWT bearer tokens",
    ),
)


class Redactor:
    """Masks sensitive fields and scrubs sensitive content from data trees.

    ``sanitize`` is pure: it builds a new tree and never mutates its input.
    The instance is also usable as a structlog processor.
    """

    def __init__(
        self,
        sensitive_fields: Iterable[str] | None = None,
        patterns: Iterable[RedactionPattern] | None = None,
        custom_patterns: Iterable[RedactionPattern] | None = None,
        mask: str = MASK_TOKEN,
    ) -> None:
        """Initialize the redactor.

        Args:
        ----
            sensitive_fields: Field names masked wholesale (case-sensitive)
            patterns: Content rules replacing ``DEFAULT_PATTERNS``
            custom_patterns: Extra rules applied after the base rules
            mask: Token written in place of masked values

        """
        self.sensitive_fields = frozenset(
            SENSITIVE_FIELDS if sensitive_fields is None else sensitive_fields
        )
        self.patterns: tuple[RedactionPattern, ...] = tuple(
            DEFAULT_PATTERNS if patterns is None else patterns
        )
        if custom_patterns:
            self.patterns += tuple(custom_patterns)
        self.mask = mask

    def redact_string(self, text: str) -> str:
        """Apply every pattern to ``text`` in order."""
        for rule in self.patterns:
            text = rule.apply(text)
        return text

    def sanitize(self, value: DataTree) -> DataTree:
        """Return a redacted copy of ``value``."""
        return self._sanitize(value, set())

    def _sanitize(self, value: DataTree, path: set[int]) -> DataTree:
        if isinstance(value, str):
            return self.redact_string(value)

        if isinstance(value, Mapping | list | tuple):
            if id(value) in path:
                return CYCLE_MARKER
            # Containers nested deeper than MAX_DEPTH are replaced, not walked
            if len(path) >= MAX_DEPTH:
                return DEPTH_MARKER
            path.add(id(value))
            try:
                if isinstance(value, Mapping):
                    return {
                        key: (
                            self.mask
                            if key in self.sensitive_fields
                            else self._sanitize(item, path)
                        )
                        for key, item in value.items()
                    }
                items = [self._sanitize(item, path) for item in value]
                return tuple(items) if isinstance(value, tuple) else items
            finally:
                path.discard(id(value))

        # Numbers, booleans, None and other scalars pass through
        return value

    def is_sensitive_field(self, key: Any) -> bool:
        """Check whether a map key is masked wholesale."""
        return key in self.sensitive_fields

    def __call__(
        self, logger: Any, name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        """Process log event dict for structlog integration.

        This method allows the redactor to be used as a structlog processor.
        ``exc_info`` and ``stack_info`` are left for structlog's own formatters.
        """
        passthrough = {
            key: event_dict[key] for key in _PASSTHROUGH_KEYS if key in event_dict
        }
        redacted = self.sanitize(
            {key: value for key, value in event_dict.items() if key not in passthrough}
        )
        redacted.update(passthrough)
        return redacted


_default_redactor = Redactor()


def sanitize(value: DataTree) -> DataTree:
    """Redact ``value`` with the default field set and pattern table."""
    return _default_redactor.sanitize(value)


def create_redactor(**kwargs: Any) -> Redactor:
    """Create a redactor.

    Args:
    ----
        **kwargs: Arguments to pass to Redactor

    Returns:
    -------
        Configured Redactor instance

    """
    return Redactor(**kwargs)
