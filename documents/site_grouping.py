"""
Site grouping for multi-site cost estimates.

A cost estimate for several billboards is stored as one flat list of line
items. Each site contributes one rental row (category contains
"Billboard Rental") and zero or more rows whose id embeds the rental row's
id, e.g. "<site>-production". These helpers rebuild the per-site view.
"""

import copy
import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

RENTAL_MARKER = "Billboard Rental"
SINGLE_SITE = "Single Site"


class SiteSelectionError(ValueError):
    """Raised when a page selection matches none of the estimate's sites."""


def is_rental_item(item: Dict[str, Any]) -> bool:
    return RENTAL_MARKER in (item.get('category') or '')


def group_line_items_by_site(line_items: List[Dict[str, Any]]) -> "OrderedDict[str, List[Dict]]":
    """
    Bucket line items by site, keyed by the rental row's description.

    Items that belong to no site (no id match) are shared costs and are
    copied into every bucket. When there are no rental rows at all, every
    item lands in a single "Single Site" bucket.
    """
    groups = OrderedDict()
    placed = set()

    for item in line_items:
        if not is_rental_item(item):
            continue

        site_name = item.get('description') or ''
        bucket = groups.setdefault(site_name, [])
        bucket.append(item)
        placed.add(id(item))

        site_id = str(item.get('id') or '')
        if not site_id:
            continue
        for related in line_items:
            if related is item:
                continue
            related_id = str(related.get('id') or '')
            if site_id in related_id and related_id != site_id:
                bucket.append(related)
                placed.add(id(related))

    if not groups:
        groups[SINGLE_SITE] = list(line_items)
        return groups

    orphans = [item for item in line_items if id(item) not in placed]
    if orphans:
        logger.debug(f"Copying {len(orphans)} shared line items into {len(groups)} sites")
        for bucket in groups.values():
            bucket.extend(copy.deepcopy(orphans))

    return groups


def _page_letter(index: int) -> str:
    # 0 -> A, 25 -> Z, 26 -> AA
    letters = ''
    index += 1
    while index:
        index, remainder = divmod(index - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


def split_cost_estimate_by_site(estimate: Dict[str, Any],
                                selected_pages: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
    """
    Build one estimate dict per site.

    With more than one site, each copy gets a letter suffix on its number
    (-A, -B, ...) by site position, and its title becomes the site name.
    Totals are recomputed from the site's own line items.

    Args:
        estimate: cost estimate dict (as returned by to_dict)
        selected_pages: optional site names to keep

    Raises:
        SiteSelectionError: if selected_pages matches no site
    """
    groups = group_line_items_by_site(estimate.get('line_items') or [])
    multiple = len(groups) > 1
    base_number = estimate.get('cost_estimate_number') or estimate.get('id')
    tax_rate = estimate.get('tax_rate')
    if tax_rate is None:
        tax_rate = 0.12

    selected = set(selected_pages) if selected_pages else None
    results = []

    for index, (site_name, items) in enumerate(groups.items()):
        if selected is not None and site_name not in selected:
            continue

        subtotal = sum(float(item.get('total') or 0) for item in items)
        tax_amount = subtotal * tax_rate

        site_estimate = dict(estimate)
        site_estimate.update({
            'site_name': site_name,
            'site_index': index,
            'line_items': items,
            'subtotal': subtotal,
            'tax_amount': tax_amount,
            'total_amount': subtotal + tax_amount,
        })
        if multiple:
            site_estimate['cost_estimate_number'] = f"{base_number}-{_page_letter(index)}"
            site_estimate['title'] = site_name
        else:
            site_estimate['cost_estimate_number'] = base_number
        results.append(site_estimate)

    if not results:
        raise SiteSelectionError("No sites selected for PDF generation")

    return results


def group_estimates_by_page(estimates: List[Dict[str, Any]]) -> "OrderedDict[str, List[Dict]]":
    """
    Group sibling documents by page_id (falling back to their own id),
    each group ordered by page_number (missing counts as 1).
    """
    groups = OrderedDict()
    for estimate in estimates:
        key = estimate.get('page_id') or estimate.get('id')
        groups.setdefault(key, []).append(estimate)

    for key, members in groups.items():
        groups[key] = sorted(members, key=lambda e: e.get('page_number') or 1)

    return groups
