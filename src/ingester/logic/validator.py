"""
Declarative document validation.

Rules are data: the default set checks identity fields and rejects
nested composites; deployments add length limits through configuration.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

from search_lib.constants import Sites
from search_lib.models.event_model import Document

from ingester.logic.exceptions import FieldViolation


@dataclass(frozen=True)
class FieldRule:
    """
    A single validation rule.

    Attributes:
        field: Field path reported on violation.
        check: Returns True when the document satisfies the rule.
        message: Violation message.
    """

    field: str
    check: Callable[[Document], bool]
    message: str


def required(field: str) -> FieldRule:
    """Rule: the field must be a non-empty string."""
    return FieldRule(
        field=field,
        check=lambda doc: bool((getattr(doc, field) or "").strip()),
        message="must not be empty",
    )


def max_length(field: str, limit: int) -> FieldRule:
    """Rule: a string field must not exceed ``limit`` characters."""
    return FieldRule(
        field=field,
        check=lambda doc: len(getattr(doc, field, None) or "") <= limit,
        message=f"must be at most {limit} characters",
    )


def not_nested_composite(composite_site: str = Sites.DATAHUB) -> FieldRule:
    """Rule: a composite document cannot itself be a child resource."""
    return FieldRule(
        field="parent_id",
        check=lambda doc: not (doc.site == composite_site and doc.parent_id),
        message=f"a '{composite_site}' document cannot itself be a resource",
    )


def default_rules(
    composite_site: str = Sites.DATAHUB,
    max_field_lengths: Mapping[str, int] | None = None,
) -> list[FieldRule]:
    """
    Build the standard rule set.

    Args:
        composite_site: Site tag marking composite documents.
        max_field_lengths: Optional field -> maximum length limits.

    Returns:
        Ordered list of rules.
    """
    rules = [
        required("id"),
        required("site"),
        not_nested_composite(composite_site),
    ]
    for field, limit in (max_field_lengths or {}).items():
        rules.append(max_length(field, limit))
    return rules


class DocumentValidator:
    """Evaluates every rule and reports all violations."""

    def __init__(self, rules: Iterable[FieldRule] | None = None) -> None:
        self._rules = list(rules) if rules is not None else default_rules()

    def validate(self, document: Document | None) -> list[FieldViolation]:
        """
        Check a document against the full rule set.

        Args:
            document: Document to check.

        Returns:
            Violations in rule order; empty when the document is valid.
        """
        if document is None:
            return [FieldViolation("document", "must be present")]
        return [
            FieldViolation(rule.field, rule.message)
            for rule in self._rules
            if not rule.check(document)
        ]

    def validate_for_delete(self, document: Document | None) -> list[FieldViolation]:
        """
        Check what a delete needs: the id, and the site that decides
        whether child resources are removed too.

        Args:
            document: Document named by a delete event.

        Returns:
            Violations; empty when id and site are present.
        """
        if document is None:
            return [FieldViolation("document", "must be present")]
        return [
            FieldViolation(rule.field, rule.message)
            for rule in (required("id"), required("site"))
            if not rule.check(document)
        ]
