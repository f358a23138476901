"""
Unit tests for the Scoring Registry skill.

Tests cover:
- Version resolution and the default version
- Base vs enhanced variants (trend modifier, level re-derivation)
- Unknown and duplicate versions
- Additive extension

Author: SentinelZero Team
"""

from datetime import date

import pytest
from hypothesis import given, settings, strategies as st

from risk_skills.risk_score_calculator import ContractProfile
from risk_skills.risk_taxonomy import SeverityTier
from risk_skills.scoring_registry import (
    AlgorithmVersion,
    DuplicateAlgorithmVersionError,
    ScoringVariant,
    TrendModifierPolicy,
    UnknownAlgorithmVersionError,
    apply_trend_modifier,
    build_default_registry,
    calculate_trend_modifier,
)


@pytest.fixture
def bridge_profile(sample_profile):
    """Trending bridge exploit on a bridge protocol; base score 75."""
    return sample_profile.model_copy(
        update={"vulnerabilities": ("cross_chain_bridge",), "protocol_type": "bridge"}
    )


class TestResolution:
    """Tests for version lookup."""

    def test_default_is_enhanced(self, registry):
        entry = registry.resolve()
        assert entry.version == "v1.1.0"
        assert entry.variant == ScoringVariant.ENHANCED

    def test_builtin_versions_in_publication_order(self, registry):
        assert [v.version for v in registry.list_versions()] == ["v1.0.0", "v1.1.0"]

    def test_unknown_version_raises(self, registry, sample_profile):
        with pytest.raises(UnknownAlgorithmVersionError) as exc_info:
            registry.score(sample_profile, "v9.9.9")

        assert exc_info.value.version == "v9.9.9"
        assert exc_info.value.available == ["v1.0.0", "v1.1.0"]

    def test_versions_mapping_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry.versions["v2.0.0"] = registry.resolve("v1.0.0")

    def test_unknown_default_version_rejected(self, calculator):
        with pytest.raises(UnknownAlgorithmVersionError):
            build_default_registry(calculator=calculator, default_version="v0.0.1")


class TestVariants:
    """Tests for base and enhanced scoring."""

    def test_base_variant_is_raw_formula(self, registry, sample_profile):
        result = registry.score(sample_profile, "v1.0.0")

        assert result.score == 76
        assert result.trend_modifier == 1.0
        assert result.scoring_version == "v1.0.0"
        assert result.scoring_algorithm == "Base Risk Scoring"

    def test_enhanced_without_trending_tags_matches_base(self, registry, sample_profile):
        result = registry.score(sample_profile, "v1.1.0")

        assert result.score == 76
        assert result.base_score == 76
        assert result.scoring_algorithm == "Enhanced Risk Scoring with Historical Data"

    def test_enhanced_caps_trending_bridge_at_100(self, registry, bridge_profile):
        result = registry.score(bridge_profile, "v1.1.0")

        assert result.base_score == 75
        assert result.trend_modifier == pytest.approx(1.15 * 1.20)
        assert result.score == 100
        assert result.level == SeverityTier.CRITICAL

    def test_enhanced_level_follows_adjusted_score(self, registry, sample_profile):
        """76 * 0.90 (nft) = 68.4 -> 68, which is MEDIUM."""
        nft = sample_profile.model_copy(update={"protocol_type": "nft"})
        result = registry.score(nft, "v1.1.0")

        assert result.score == 68
        assert result.level == SeverityTier.MEDIUM
        assert result.breakdown.total == 76

    def test_base_variant_ignores_protocol_type(self, registry, sample_profile):
        nft = sample_profile.model_copy(update={"protocol_type": "nft"})
        assert registry.score(nft, "v1.0.0").score == 76

    def test_same_inputs_give_identical_results(self, registry, bridge_profile):
        assert registry.score(bridge_profile, "v1.1.0") == registry.score(bridge_profile, "v1.1.0")


class TestTrendModifier:
    """Tests for the enhanced variant's multiplier."""

    def test_unknown_protocol_type_is_neutral(self):
        profile = ContractProfile(protocol_type="perpetuals")
        assert calculate_trend_modifier(profile, TrendModifierPolicy()) == 1.0

    def test_missing_protocol_type_uses_defi(self):
        assert calculate_trend_modifier(ContractProfile(), TrendModifierPolicy()) == 1.0

    def test_trending_multiplier_applied_once(self):
        profile = ContractProfile(
            vulnerabilities=["cross_chain_bridge", "price_oracle_manipulation"],
            protocol_type="lending",
        )
        assert calculate_trend_modifier(profile, TrendModifierPolicy()) == pytest.approx(1.15 * 1.10)

    def test_configured_trending_set(self):
        policy = TrendModifierPolicy(trending_vulnerabilities=["reentrancy"])
        profile = ContractProfile(vulnerabilities=["reentrancy"])
        assert calculate_trend_modifier(profile, policy) == pytest.approx(1.15)

    def test_apply_caps_at_100(self):
        assert apply_trend_modifier(95, 1.38) == 100
        assert apply_trend_modifier(60, 1.15) == 69

    @settings(max_examples=200, deadline=None)
    @given(
        base=st.integers(min_value=0, max_value=100),
        modifier=st.floats(min_value=1.0, max_value=2.0, allow_nan=False),
    )
    def test_escalating_modifier_never_lowers_score(self, base, modifier):
        adjusted = apply_trend_modifier(base, modifier)
        assert base <= adjusted <= 100


class TestExtension:
    """Tests for publishing new versions."""

    def test_extend_returns_new_registry(self, registry, sample_profile):
        v2 = AlgorithmVersion(
            version="v2.0.0",
            name="Base Risk Scoring v2",
            release_date=date(2026, 6, 1),
            variant=ScoringVariant.BASE,
        )
        extended = registry.extend(v2)

        assert "v2.0.0" in extended.versions
        assert "v2.0.0" not in registry.versions
        assert extended.score(sample_profile, "v1.0.0") == registry.score(sample_profile, "v1.0.0")

    def test_republishing_a_version_rejected(self, registry):
        duplicate = AlgorithmVersion(
            version="v1.0.0",
            name="Shadow",
            release_date=date(2026, 6, 1),
            variant=ScoringVariant.BASE,
        )
        with pytest.raises(DuplicateAlgorithmVersionError):
            registry.extend(duplicate)

    def test_new_trending_set_leaves_published_version_unchanged(self, registry, sample_profile):
        before = registry.score(sample_profile, "v1.1.0")
        reentrancy_trending = AlgorithmVersion(
            version="v1.2.0",
            name="Enhanced Risk Scoring (reentrancy trending)",
            release_date=date(2026, 6, 1),
            variant=ScoringVariant.ENHANCED,
            trend_policy=TrendModifierPolicy(trending_vulnerabilities=["reentrancy"]),
        )
        extended = registry.extend(reentrancy_trending)

        assert extended.score(sample_profile, "v1.1.0") == before
        assert before.score == 76
        assert before.trend_modifier == 1.0

        adjusted = extended.score(sample_profile, "v1.2.0")
        assert adjusted.score == 87
        assert adjusted.trend_modifier == pytest.approx(1.15)
        assert adjusted.scoring_version == "v1.2.0"

    def test_enhanced_version_must_pin_trend_policy(self):
        with pytest.raises(ValueError):
            AlgorithmVersion(
                version="v2.0.0",
                name="Unpinned",
                release_date=date(2026, 6, 1),
                variant=ScoringVariant.ENHANCED,
            )

    def test_builtin_enhanced_policy_is_pinned(self, registry):
        policy = registry.resolve("v1.1.0").trend_policy
        assert policy.trending_vulnerabilities == (
            "cross_chain_bridge",
            "price_oracle_manipulation",
        )

    def test_version_string_format_enforced(self):
        with pytest.raises(ValueError):
            AlgorithmVersion(
                version="latest",
                name="Bad",
                release_date=date(2026, 6, 1),
                variant=ScoringVariant.BASE,
            )
