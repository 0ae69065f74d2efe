"""Tests for the known-effects registry."""

import pytest

from stack_efficacy.analysis.registry import DEFAULT_REGISTRY, EffectRegistry, KnownEffect, canonical_key


class TestCanonicalKey:
    """Test identifier normalization."""

    def test_normalizes_case_and_separators(self):
        """Whitespace and underscores collapse to single hyphens."""
        assert canonical_key("Magnesium  Glycinate") == "magnesium-glycinate"
        assert canonical_key(" fish_oil ") == "fish-oil"
        assert canonical_key("omega-3") == "omega-3"


class TestEffectRegistry:
    """Test lookups against the default registry."""

    def setup_method(self):
        """Use the default registry."""
        self.registry = DEFAULT_REGISTRY

    def test_default_order(self):
        """Registry iteration order is fixed."""
        assert [e.key for e in self.registry] == [
            'magnesium', 'magnesium-glycinate', 'omega-3', 'vitamin-d3', 'ashwagandha',
            'creatine', 'l-theanine', 'glycine', 'zinc', 'b-complex',
        ]
        assert len(self.registry) == 10

    def test_resolve_exact_and_alias(self):
        """Canonical keys and aliases resolve; substrings do not."""
        assert self.registry.resolve('Magnesium').key == 'magnesium'
        assert self.registry.resolve('Magnesium Citrate').key == 'magnesium'
        assert self.registry.resolve('magnesium_glycinate').key == 'magnesium-glycinate'
        assert self.registry.resolve('Fish Oil').key == 'omega-3'
        assert self.registry.resolve('magnesium-glycinate-extra') is None
        assert self.registry.resolve('zincum') is None

    def test_covers(self):
        """covers returns the keys of every entry hit by at least one identifier."""
        covered = self.registry.covers(['theanine', 'vitamin d', 'coffee'])
        assert covered == {'l-theanine', 'vitamin-d3'}

    def test_get_and_for_metric(self):
        """Lookup by key and by expected metric."""
        assert self.registry.get('zinc').lag_days == 7
        assert self.registry.get('unknown') is None
        assert [e.key for e in self.registry.for_metric('stressLevel')] == ['ashwagandha', 'l-theanine']

    def test_to_dict(self):
        """Entries serialize with their display name."""
        data = self.registry.get('omega-3').to_dict()
        assert data['name'] == 'Omega-3'
        assert data['expected_metrics'] == ['hrvAverage', 'recoveryScore']
        assert data['aliases'] == ['fish-oil']

    def test_name_fallback(self):
        """Entries without a display name derive one from the key."""
        assert KnownEffect('tart-cherry', ('sleepScore',)).name == 'tart cherry'

    def test_conflicting_aliases_rejected(self):
        """Two entries cannot claim the same identifier."""
        with pytest.raises(ValueError):
            EffectRegistry([
                KnownEffect('magnesium', ('sleepScore',), aliases=('mag',)),
                KnownEffect('manganese', ('sleepScore',), aliases=('mag',)),
            ])
