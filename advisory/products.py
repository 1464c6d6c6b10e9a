"""
advisory/products.py -- Product tree traversal and product/group reference lookup.

Every referential rule works off the same two inventories:

  definitions  -- each product in the tree with its JSON path
                  (branches depth-first, then full_product_names, then
                  relationships[].full_product_name)
  references   -- each product_id / group_id used elsewhere, paired with
                  the JSON path of the referencing field

Branch trees are walked with an explicit stack so arbitrarily deep input
cannot exhaust the interpreter's recursion limit.
"""

from typing import Iterable, Iterator, Optional

from .traits import (
    BranchTrait,
    CsafTrait,
    ProductStatusGroup,
    ProductStatusTrait,
    ProductTrait,
    VulnerabilityTrait,
)

# (product_id or group_id, instance path)
Reference = tuple[str, str]

# Every product_status list, in schema order.
PRODUCT_STATUS_LISTS = (
    "first_affected",
    "first_fixed",
    "fixed",
    "known_affected",
    "known_not_affected",
    "last_affected",
    "recommended",
    "under_investigation",
    "unknown",
)

STATUS_GROUP_OF = {
    "first_affected": ProductStatusGroup.affected,
    "known_affected": ProductStatusGroup.affected,
    "last_affected": ProductStatusGroup.affected,
    "known_not_affected": ProductStatusGroup.not_affected,
    "first_fixed": ProductStatusGroup.fixed,
    "fixed": ProductStatusGroup.fixed,
    "under_investigation": ProductStatusGroup.under_investigation,
    "unknown": ProductStatusGroup.unknown,
}


# ---------------------------------------------------------------------------
# Tree traversal
# ---------------------------------------------------------------------------


def visit_all_branches(doc: CsafTrait) -> Iterator[tuple[BranchTrait, str]]:
    """Yield (branch, path) depth-first in document order."""
    tree = doc.get_product_tree()
    if tree is None or not tree.get_branches():
        return
    stack = [(b, f"/product_tree/branches/{i}") for i, b in enumerate(tree.get_branches())]
    stack.reverse()
    while stack:
        branch, path = stack.pop()
        yield branch, path
        children = branch.get_branches() or []
        for i in range(len(children) - 1, -1, -1):
            stack.append((children[i], f"{path}/branches/{i}"))


def visit_all_products(doc: CsafTrait) -> Iterator[tuple[ProductTrait, str]]:
    """Yield (product, path) for every product defined in the product tree."""
    tree = doc.get_product_tree()
    if tree is None:
        return
    for branch, path in visit_all_branches(doc):
        product = branch.get_product()
        if product is not None:
            yield product, f"{path}/product"
    for i, fpn in enumerate(tree.get_full_product_names()):
        yield fpn, f"/product_tree/full_product_names/{i}"
    for i, rel in enumerate(tree.get_relationships()):
        yield rel.get_full_product_name(), f"/product_tree/relationships/{i}/full_product_name"


def defined_product_ids(doc: CsafTrait) -> set[str]:
    return {product.get_product_id() for product, _ in visit_all_products(doc)}


def defined_group_ids(doc: CsafTrait) -> set[str]:
    tree = doc.get_product_tree()
    if tree is None:
        return set()
    return {g.get_group_id() for g in tree.get_product_groups()}


def find_excessive_branch_depth(doc: CsafTrait, max_depth: int) -> Optional[str]:
    """Return the path of the first branch nested deeper than max_depth, if any."""
    for branch, path in visit_all_branches(doc):
        depth = path.count("/branches/")
        if depth == max_depth and branch.get_branches():
            return f"{path}/branches/0"
    return None


# ---------------------------------------------------------------------------
# Product status
# ---------------------------------------------------------------------------


def iter_product_status(status: ProductStatusTrait) -> Iterator[tuple[str, int, str]]:
    """Yield (list name, index, product_id) over every product_status list."""
    for name in PRODUCT_STATUS_LISTS:
        for i, product_id in enumerate(getattr(status, f"get_{name}")() or []):
            yield name, i, product_id


def product_status_groups(status: ProductStatusTrait) -> dict[ProductStatusGroup, list[str]]:
    """Group product ids by status group; 'recommended' belongs to no group."""
    groups: dict[ProductStatusGroup, list[str]] = {}
    for name, _, product_id in iter_product_status(status):
        group = STATUS_GROUP_OF.get(name)
        if group is None:
            continue
        members = groups.setdefault(group, [])
        if product_id not in members:
            members.append(product_id)
    return groups


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


def _id_refs(ids: Optional[Iterable[str]], path: str) -> list[Reference]:
    return [(pid, f"{path}/{i}") for i, pid in enumerate(ids or [])]


def _vulnerability_product_references(v_i: int, vuln: VulnerabilityTrait) -> list[Reference]:
    prefix = f"/vulnerabilities/{v_i}"
    refs: list[Reference] = []
    status = vuln.get_product_status()
    if status is not None:
        for name, i, product_id in iter_product_status(status):
            refs.append((product_id, f"{prefix}/product_status/{name}/{i}"))
    for r_i, remediation in enumerate(vuln.get_remediations()):
        refs += _id_refs(remediation.get_product_ids(), f"{prefix}/remediations/{r_i}/product_ids")
    for m_i, metric in enumerate(vuln.get_metrics() or []):
        refs += _id_refs(metric.get_products(), f"{metric.get_metric_json_path(v_i, m_i)}/products")
    for t_i, threat in enumerate(vuln.get_threats()):
        refs += _id_refs(threat.get_product_ids(), f"{prefix}/threats/{t_i}/product_ids")
    for f_i, flag in enumerate(vuln.get_flags() or []):
        refs += _id_refs(flag.get_product_ids(), f"{prefix}/flags/{f_i}/product_ids")
    for i_i, involvement in enumerate(vuln.get_involvements() or []):
        refs += _id_refs(involvement.get_product_ids(), f"{prefix}/involvements/{i_i}/product_ids")
    for n_i, note in enumerate(vuln.get_notes() or []):
        refs += _id_refs(note.get_product_ids(), f"{prefix}/notes/{n_i}/product_ids")
    return refs


def gather_product_references(doc: CsafTrait) -> list[Reference]:
    """Every product_id reference outside of product definitions, with its path."""
    refs: list[Reference] = []
    tree = doc.get_product_tree()
    if tree is not None:
        for g_i, group in enumerate(tree.get_product_groups()):
            refs += _id_refs(group.get_product_ids(), f"/product_tree/product_groups/{g_i}/product_ids")
        for r_i, rel in enumerate(tree.get_relationships()):
            refs.append((rel.get_product_reference(), f"/product_tree/relationships/{r_i}/product_reference"))
            refs.append(
                (
                    rel.get_relates_to_product_reference(),
                    f"/product_tree/relationships/{r_i}/relates_to_product_reference",
                )
            )
    for n_i, note in enumerate(doc.get_document().get_notes() or []):
        refs += _id_refs(note.get_product_ids(), f"/document/notes/{n_i}/product_ids")
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        refs += _vulnerability_product_references(v_i, vuln)
    return refs


def gather_product_group_references(doc: CsafTrait) -> list[Reference]:
    """Every group_id reference in the document, with its path."""
    refs: list[Reference] = []
    for n_i, note in enumerate(doc.get_document().get_notes() or []):
        refs += _id_refs(note.get_group_ids(), f"/document/notes/{n_i}/group_ids")
    for v_i, vuln in enumerate(doc.get_vulnerabilities()):
        prefix = f"/vulnerabilities/{v_i}"
        for f_i, flag in enumerate(vuln.get_flags() or []):
            refs += _id_refs(flag.get_group_ids(), f"{prefix}/flags/{f_i}/group_ids")
        for i_i, involvement in enumerate(vuln.get_involvements() or []):
            refs += _id_refs(involvement.get_group_ids(), f"{prefix}/involvements/{i_i}/group_ids")
        for n_i, note in enumerate(vuln.get_notes() or []):
            refs += _id_refs(note.get_group_ids(), f"{prefix}/notes/{n_i}/group_ids")
        for r_i, remediation in enumerate(vuln.get_remediations()):
            refs += _id_refs(remediation.get_group_ids(), f"{prefix}/remediations/{r_i}/group_ids")
        for t_i, threat in enumerate(vuln.get_threats()):
            refs += _id_refs(threat.get_group_ids(), f"{prefix}/threats/{t_i}/group_ids")
    return refs


# ---------------------------------------------------------------------------
# Group resolution
# ---------------------------------------------------------------------------


def resolve_product_groups(doc: CsafTrait) -> dict[str, list[str]]:
    """Map each group_id to its product_ids; the first definition of a group wins."""
    groups: dict[str, list[str]] = {}
    tree = doc.get_product_tree()
    if tree is None:
        return groups
    for group in tree.get_product_groups():
        groups.setdefault(group.get_group_id(), list(group.get_product_ids()))
    return groups


def resolve_product_ids(
    product_ids: Optional[Iterable[str]],
    group_ids: Optional[Iterable[str]],
    groups: dict[str, list[str]],
) -> list[str]:
    """Direct product ids followed by the members of each referenced group, deduplicated."""
    resolved: list[str] = []
    for pid in product_ids or []:
        if pid not in resolved:
            resolved.append(pid)
    for gid in group_ids or []:
        for pid in groups.get(gid, []):
            if pid not in resolved:
                resolved.append(pid)
    return resolved


# ---------------------------------------------------------------------------
# Identification helper strings
# ---------------------------------------------------------------------------


def count_unescaped_stars(value: str) -> int:
    """Count '*' characters not escaped by a preceding backslash."""
    count = 0
    escaped = False
    for char in value:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "*":
            count += 1
    return count
