"""Unit tests for DocumentValidator."""

from search_lib.models.event_model import Document

from ingester.logic.exceptions import FieldViolation
from ingester.logic.validator import (
    DocumentValidator,
    FieldRule,
    default_rules,
    max_length,
)


class TestDocumentValidator:
    """Tests for DocumentValidator with default rules."""

    def setup_method(self) -> None:
        """Create validator for each test."""
        self.validator = DocumentValidator()

    def test_valid_document_has_no_violations(self, article: Document) -> None:
        """Test a complete document passes."""
        assert self.validator.validate(article) == []

    def test_reports_every_violation(self) -> None:
        """Test missing id and site are both reported."""
        violations = self.validator.validate(Document(title="untitled"))

        assert [v.field for v in violations] == ["id", "site"]

    def test_blank_strings_are_missing(self) -> None:
        """Test whitespace-only values fail the required rule."""
        violations = self.validator.validate(Document(id="  ", site="s"))

        assert violations == [FieldViolation("id", "must not be empty")]

    def test_missing_document(self) -> None:
        """Test an absent document is a violation."""
        assert self.validator.validate(None) == [FieldViolation("document", "must be present")]

    def test_nested_composite_rejected(self) -> None:
        """Test a composite document that is itself a resource is rejected."""
        doc = Document(id="1", site="datahub", parent_id="other")

        violations = self.validator.validate(doc)

        assert [v.field for v in violations] == ["parent_id"]

    def test_resource_of_plain_site_allowed(self) -> None:
        """Test parent_id is fine on non-composite documents."""
        assert self.validator.validate(Document(id="1", site="web", parent_id="p")) == []

    def test_validate_for_delete_needs_id_and_site(self) -> None:
        """Test delete validation checks id and site only."""
        assert self.validator.validate_for_delete(Document(id="1", site="s")) == []
        assert self.validator.validate_for_delete(Document(site="s")) == [
            FieldViolation("id", "must not be empty"),
        ]

    def test_validate_for_delete_without_site(self) -> None:
        """Test a delete lacking site is rejected."""
        assert self.validator.validate_for_delete(Document(id="dh-1")) == [
            FieldViolation("site", "must not be empty"),
        ]

    def test_validate_for_delete_ignores_other_rules(self) -> None:
        """Test length rules do not block a delete."""
        validator = DocumentValidator(default_rules(max_field_lengths={"title": 1}))

        assert validator.validate_for_delete(Document(id="1", site="s", title="long")) == []


class TestConfiguredRules:
    """Tests for rule configuration."""

    def test_max_field_lengths_add_rules(self) -> None:
        """Test configured length limits become rules."""
        validator = DocumentValidator(default_rules(max_field_lengths={"title": 5}))

        violations = validator.validate(Document(id="1", site="s", title="too long"))

        assert violations == [FieldViolation("title", "must be at most 5 characters")]

    def test_custom_composite_site(self) -> None:
        """Test nested composite rule follows the configured site tag."""
        validator = DocumentValidator(default_rules(composite_site="hub"))

        assert validator.validate(Document(id="1", site="datahub", parent_id="p")) == []
        assert len(validator.validate(Document(id="1", site="hub", parent_id="p"))) == 1

    def test_custom_rule_set(self) -> None:
        """Test arbitrary rules can be supplied."""
        rule = FieldRule("url", lambda d: bool(d.url), "is required here")
        validator = DocumentValidator([rule, max_length("id", 2)])

        violations = validator.validate(Document(id="abc"))

        assert [str(v) for v in violations] == [
            "url: is required here",
            "id: must be at most 2 characters",
        ]
