"""
validations/product_ids.py -- Definition and reference checks for product and group IDs.

Covers 6.1.1 - 6.1.5 and 6.2.1.
"""

from collections import defaultdict

from advisory.categories import CSAF_INFORMATIONAL_ADVISORY
from advisory.products import (
    defined_group_ids,
    defined_product_ids,
    gather_product_group_references,
    gather_product_references,
    visit_all_products,
)
from advisory.traits import CsafTrait
from core.models import ValidationError


def test_6_1_01_missing_definition_of_product_id(doc: CsafTrait) -> list[ValidationError]:
    defined = defined_product_ids(doc)
    return [
        ValidationError(f"Missing definition of product_id: {product_id}", path)
        for product_id, path in gather_product_references(doc)
        if product_id not in defined
    ]


def test_6_1_02_multiple_definition_of_product_id(doc: CsafTrait) -> list[ValidationError]:
    paths_by_id: dict[str, list[str]] = defaultdict(list)
    for product, path in visit_all_products(doc):
        paths_by_id[product.get_product_id()].append(path)

    errors = []
    for product_id, paths in paths_by_id.items():
        if len(paths) > 1:
            errors += [
                ValidationError(f"Duplicate definition for product ID {product_id}", f"{path}/product_id")
                for path in paths
            ]
    return errors


# ---------------------------------------------------------------------------
# 6.1.3 Circular definition
# ---------------------------------------------------------------------------

# product_id -> [(referenced product_id, relationship index)]
_Graph = dict[str, list[tuple[str, int]]]


def _relationship_graph(doc: CsafTrait) -> tuple[_Graph, list[ValidationError]]:
    graph: _Graph = {}
    errors = []
    tree = doc.get_product_tree()
    if tree is None:
        return graph, errors

    for i, rel in enumerate(tree.get_relationships()):
        defined = rel.get_full_product_name().get_product_id()
        targets = graph.setdefault(defined, [])
        if rel.get_product_reference() == defined:
            errors.append(
                ValidationError(
                    "Relationship references itself via product_reference",
                    f"/product_tree/relationships/{i}/product_reference",
                )
            )
        else:
            targets.append((rel.get_product_reference(), i))
        if rel.get_relates_to_product_reference() == defined:
            errors.append(
                ValidationError(
                    "Relationship references itself via relates_to_product_reference",
                    f"/product_tree/relationships/{i}/relates_to_product_reference",
                )
            )
        else:
            targets.append((rel.get_relates_to_product_reference(), i))
    return graph, errors


def find_cycles(graph: _Graph) -> list[tuple[list[str], int]]:
    """Depth-first search in insertion order; one entry per back edge.

    Each cycle is returned as the list of product ids (first id repeated at
    the end) and the index of the relationship defining its first id.
    """
    on_path, done = 1, 2
    state: dict[str, int] = {}
    cycles: list[tuple[list[str], int]] = []

    for start in graph:
        if start in state:
            continue
        path = [start]
        via: list[int] = []
        pending = [iter(graph.get(start, []))]
        state[start] = on_path
        while pending:
            for target, rel_index in pending[-1]:
                if state.get(target) == on_path:
                    pos = path.index(target)
                    cycles.append((path[pos:] + [target], (via[pos:] + [rel_index])[0]))
                elif target not in state:
                    state[target] = on_path
                    path.append(target)
                    via.append(rel_index)
                    pending.append(iter(graph.get(target, [])))
                    break
            else:
                state[path.pop()] = done
                pending.pop()
                if via:
                    via.pop()
    return cycles


def test_6_1_03_circular_definition_of_product_id(doc: CsafTrait) -> list[ValidationError]:
    graph, errors = _relationship_graph(doc)
    for cycle, rel_index in find_cycles(graph):
        errors.append(
            ValidationError(
                f"Found product relationship cycle: {' -> '.join(cycle)}",
                f"/product_tree/relationships/{rel_index}",
            )
        )
    return errors


# ---------------------------------------------------------------------------
# Product groups
# ---------------------------------------------------------------------------


def test_6_1_04_missing_definition_of_product_group_id(doc: CsafTrait) -> list[ValidationError]:
    if doc.get_product_tree() is None:
        return []
    defined = defined_group_ids(doc)
    return [
        ValidationError(f"Missing definition of product_group_id: {group_id}", path)
        for group_id, path in gather_product_group_references(doc)
        if group_id not in defined
    ]


def test_6_1_05_multiple_definition_of_product_group_id(doc: CsafTrait) -> list[ValidationError]:
    tree = doc.get_product_tree()
    if tree is None:
        return []
    paths_by_id: dict[str, list[str]] = defaultdict(list)
    for i, group in enumerate(tree.get_product_groups()):
        paths_by_id[group.get_group_id()].append(f"/product_tree/product_groups/{i}/group_id")

    errors = []
    for group_id, paths in paths_by_id.items():
        if len(paths) > 1:
            errors += [ValidationError(f"Duplicate definition for product group ID {group_id}", p) for p in paths]
    return errors


# ---------------------------------------------------------------------------
# Optional
# ---------------------------------------------------------------------------


def test_6_2_01_unused_definition_of_product_id(doc: CsafTrait) -> list[ValidationError]:
    if doc.get_document().get_category() == CSAF_INFORMATIONAL_ADVISORY:
        return []
    referenced = {product_id for product_id, _ in gather_product_references(doc)}
    return [
        ValidationError(
            f"Product ID '{product.get_product_id()}' is defined but not referenced in the document",
            f"{path}/product_id",
        )
        for product, path in visit_all_products(doc)
        if product.get_product_id() not in referenced
    ]
