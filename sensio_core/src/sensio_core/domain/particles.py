"""
Particle class aggregation.

A class tree is a nested mapping whose leaves are counts, e.g.
``{"mold": {"aspergillus": 3, "penicillium": 2}, "pollen": 5}``.
Flattening joins the keys on the way down with ``/``.
"""

from numbers import Real
from typing import Dict, List, Mapping, Union

from sensio_core.domain.models import ParticleClass

ParticleTree = Mapping[str, Union[float, "ParticleTree"]]


def _is_count(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def aggregate_classes(tree: ParticleTree, accumulator: Dict[str, float], prefix: str = "") -> None:
    """Add every leaf of ``tree`` into ``accumulator`` keyed by its path."""
    for key, value in tree.items():
        path = f"{prefix}/{key}" if prefix else key
        if _is_count(value):
            accumulator[path] = accumulator.get(path, 0) + value
        elif isinstance(value, Mapping):
            aggregate_classes(value, accumulator, path)
        # anything else (null, labels) carries no count


def top_k(accumulator: Mapping[str, float], k: int) -> List[ParticleClass]:
    ranked = sorted(accumulator.items(), key=lambda item: item[1], reverse=True)
    return [ParticleClass(name=name, count=count) for name, count in ranked[:k]]
