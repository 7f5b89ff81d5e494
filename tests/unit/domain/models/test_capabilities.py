# tests/unit/domain/models/test_capabilities.py
import pytest

from domain.models.capabilities import (
    ALL_CAPABILITIES,
    COMPLETION_ESTIMATES,
    DEFAULT_COMPLETION_ESTIMATE,
    KEYWORD_TRIGGERS,
    Capability,
    completion_time_minutes,
    estimate_completion_time,
    is_known_capability,
    parse_capability,
)

class TestCapabilityVocabulary:
    """Test the closed capability vocabulary"""

    def test_vocabulary_is_closed_set_of_fifteen(self):
        values = {c.value for c in ALL_CAPABILITIES}

        assert len(values) == 15
        assert "logo-design" in values
        assert "3d-modeling" in values
        assert "consulting" in values

    def test_parse_known_capability(self):
        assert parse_capability("logo-design") == Capability.LOGO_DESIGN
        assert parse_capability(" Copywriting ") == Capability.COPYWRITING
        assert parse_capability(Capability.TRANSLATION) == Capability.TRANSLATION

    @pytest.mark.parametrize("value", ["blockchain-magic", "", "logo design", None, 42])
    def test_parse_rejects_values_outside_vocabulary(self, value):
        assert parse_capability(value) is None
        assert not is_known_capability(value)

    def test_keyword_table_only_uses_vocabulary(self):
        for capability, terms in KEYWORD_TRIGGERS.items():
            assert capability in ALL_CAPABILITIES
            assert terms

    def test_bare_design_is_not_a_trigger(self):
        all_terms = [term for terms in KEYWORD_TRIGGERS.values() for term in terms]
        assert "design" not in all_terms

class TestCompletionEstimates:
    """Test capability completion-time lookups"""

    def test_known_estimate(self):
        assert estimate_completion_time("logo-design") == "1-2 hours"
        assert estimate_completion_time(Capability.WEB_DEVELOPMENT) == "1-3 days"

    def test_unlisted_capability_uses_default(self):
        assert Capability.CONSULTING not in COMPLETION_ESTIMATES
        assert estimate_completion_time("consulting") == DEFAULT_COMPLETION_ESTIMATE
        assert estimate_completion_time("not-a-capability") == DEFAULT_COMPLETION_ESTIMATE

    @pytest.mark.parametrize("estimate,minutes", [
        ("30 minutes - 1 hour", 30),
        ("1-2 hours", 60),
        ("4-8 hours", 240),
        ("1-3 days", 1440),
    ])
    def test_completion_time_lower_bound(self, estimate, minutes):
        assert completion_time_minutes(estimate) == minutes

    def test_unparseable_estimate_sorts_last(self):
        assert completion_time_minutes(None) == float("inf")
        assert completion_time_minutes("soon") == float("inf")
