"""Known intervention effects and intervention identifier normalization.

The registry is static configuration. Lookups go through ``canonical_key``
and match a canonical key or one of an entry's declared aliases exactly, so
unrelated identifiers that merely share a substring never collide.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple


_SEPARATORS = re.compile(r"[\s_]+")


def canonical_key(identifier: str) -> str:
    """Normalize an intervention identifier: 'Magnesium  Glycinate' -> 'magnesium-glycinate'."""
    return _SEPARATORS.sub("-", identifier.strip().lower())


@dataclass(frozen=True)
class KnownEffect:
    """Expected effect of an intervention family on wearable metrics."""
    key: str
    expected_metrics: Tuple[str, ...]
    expected_direction: str = "positive"  # 'positive' = improves the metric
    lag_days: int = 0  # days until the effect becomes visible
    aliases: Tuple[str, ...] = ()
    display_name: Optional[str] = None

    @property
    def name(self) -> str:
        return self.display_name or self.key.replace("-", " ")

    @property
    def match_keys(self) -> Set[str]:
        return {canonical_key(self.key)} | {canonical_key(a) for a in self.aliases}

    def to_dict(self) -> dict:
        return {
            'key': self.key,
            'name': self.name,
            'expected_metrics': list(self.expected_metrics),
            'expected_direction': self.expected_direction,
            'lag_days': self.lag_days,
            'aliases': list(self.aliases),
        }


class EffectRegistry:
    """Ordered, read-only collection of known effects."""

    def __init__(self, effects: Iterable[KnownEffect]):
        self._effects: Tuple[KnownEffect, ...] = tuple(effects)
        self._lookup: Dict[str, KnownEffect] = {}
        for effect in self._effects:
            for key in effect.match_keys:
                if key in self._lookup and self._lookup[key].key != effect.key:
                    raise ValueError(
                        f"Identifier '{key}' maps to both '{self._lookup[key].key}' and '{effect.key}'"
                    )
                self._lookup[key] = effect

    def __iter__(self) -> Iterator[KnownEffect]:
        return iter(self._effects)

    def __len__(self) -> int:
        return len(self._effects)

    def get(self, key: str) -> Optional[KnownEffect]:
        for effect in self._effects:
            if effect.key == key:
                return effect
        return None

    def resolve(self, identifier: str) -> Optional[KnownEffect]:
        """Registry entry an intervention identifier belongs to, if any."""
        return self._lookup.get(canonical_key(identifier))

    def covers(self, identifiers: Iterable[str]) -> Set[str]:
        """Keys of every entry resolved by at least one identifier."""
        covered = set()
        for identifier in identifiers:
            effect = self.resolve(identifier)
            if effect is not None:
                covered.add(effect.key)
        return covered

    def for_metric(self, metric: str) -> List[KnownEffect]:
        return [e for e in self._effects if metric in e.expected_metrics]


DEFAULT_REGISTRY = EffectRegistry([
    KnownEffect(
        'magnesium', ('sleepScore', 'deepSleepMinutes', 'hrvAverage'), lag_days=0,
        aliases=('magnesium-citrate', 'magnesium-threonate', 'magnesium-bisglycinate'),
        display_name='Magnesium',
    ),
    KnownEffect('magnesium-glycinate', ('sleepScore', 'deepSleepMinutes', 'hrvAverage'), lag_days=0,
                display_name='Magnesium glycinate'),
    KnownEffect('omega-3', ('hrvAverage', 'recoveryScore'), lag_days=7, aliases=('fish-oil',), display_name='Omega-3'),
    KnownEffect('vitamin-d3', ('recoveryScore', 'sleepScore'), lag_days=14, aliases=('vitamin-d',), display_name='Vitamin D3'),
    # Improves sleep and recovery, lowers stress
    KnownEffect('ashwagandha', ('stressLevel', 'sleepScore', 'recoveryScore'), lag_days=7,
                display_name='Ashwagandha'),
    KnownEffect('creatine', ('activeMinutes', 'steps'), lag_days=7, display_name='Creatine'),
    KnownEffect('l-theanine', ('stressLevel', 'sleepScore'), lag_days=0, aliases=('theanine',), display_name='L-Theanine'),
    KnownEffect('glycine', ('sleepScore', 'deepSleepMinutes'), lag_days=0, display_name='Glycine'),
    KnownEffect('zinc', ('recoveryScore', 'sleepScore'), lag_days=7, display_name='Zinc'),
    KnownEffect('b-complex', ('recoveryScore',), lag_days=3, aliases=('vitamin-b-complex',), display_name='B-Complex'),
])
