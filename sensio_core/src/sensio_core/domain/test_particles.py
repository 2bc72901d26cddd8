from sensio_core.domain.models import ParticleClass
from sensio_core.domain.particles import aggregate_classes, top_k


def test_aggregate_flattens_nested_paths():
    counts = {}
    aggregate_classes({"mold": {"aspergillus": 3, "penicillium": 2}, "pollen": 5}, counts)
    assert counts == {"mold/aspergillus": 3, "mold/penicillium": 2, "pollen": 5}


def test_aggregate_sums_across_calls():
    counts = {}
    aggregate_classes({"pollen": {"birch": 1}}, counts)
    aggregate_classes({"pollen": {"birch": 4, "grass": 2}}, counts)
    assert counts == {"pollen/birch": 5, "pollen/grass": 2}


def test_aggregate_ignores_non_numeric_leaves():
    counts = {}
    aggregate_classes({"label": "x", "missing": None, "flag": True, "deep": {"a": {"b": 1.5}}}, counts)
    assert counts == {"deep/a/b": 1.5}


def test_aggregate_with_prefix():
    counts = {}
    aggregate_classes({"birch": 2}, counts, prefix="pollen")
    assert counts == {"pollen/birch": 2}


def test_top_k_orders_by_count_descending():
    counts = {}
    aggregate_classes({"mold": {"aspergillus": 3, "penicillium": 2}, "pollen": 5}, counts)
    assert top_k(counts, 2) == [ParticleClass("pollen", 5), ParticleClass("mold/aspergillus", 3)]


def test_top_k_ties_keep_first_insertion_order():
    counts = {"b": 1, "a": 1, "c": 2}
    assert [c.name for c in top_k(counts, 3)] == ["c", "b", "a"]


def test_particle_class_serializes_with_class_key():
    assert ParticleClass("dust", 4).to_dict() == {"class": "dust", "count": 4}
