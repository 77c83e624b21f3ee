"""
Per-category summary statistics over listing records.

Only records with both a price and an area count. Means are computed from
additive totals so shards can be merged before dividing; averaging per-shard
averages would weight small shards too heavily.
"""
import math
from collections import defaultdict
from typing import Dict, Iterable, List

from listing_stats.schemas import AggregateSummary, CategoryTotals, ListingRecord


def partial_totals(records: Iterable[ListingRecord]) -> Dict[str, CategoryTotals]:
    groups: Dict[str, List[ListingRecord]] = defaultdict(list)
    for r in records:
        if r.price > 0 and r.area > 0:
            groups[r.category].append(r)

    return {
        category: CategoryTotals(
            count=len(group),
            sum_price=math.fsum(r.price for r in group),
            sum_area=math.fsum(r.area for r in group),
            sum_price_per_area=math.fsum(r.price_per_area for r in group),
        )
        for category, group in groups.items()
    }


def merge_totals(*partials: Dict[str, CategoryTotals]) -> Dict[str, CategoryTotals]:
    keys = {k for p in partials for k in p}
    merged: Dict[str, CategoryTotals] = {}
    for k in keys:
        parts = [p[k] for p in partials if k in p]
        merged[k] = CategoryTotals(
            count=sum(t.count for t in parts),
            sum_price=math.fsum(t.sum_price for t in parts),
            sum_area=math.fsum(t.sum_area for t in parts),
            sum_price_per_area=math.fsum(t.sum_price_per_area for t in parts),
        )
    return merged


def summarize(totals: Dict[str, CategoryTotals]) -> Dict[str, AggregateSummary]:
    """Means per category, sorted by key; zero-count categories are dropped."""
    out: Dict[str, AggregateSummary] = {}
    for category in sorted(totals):
        t = totals[category]
        if t.count <= 0:
            continue
        out[category] = AggregateSummary(
            count=t.count,
            avg_price=t.sum_price / t.count,
            avg_area=t.sum_area / t.count,
            avg_price_per_area=t.sum_price_per_area / t.count,
        )
    return out


def aggregate(records: Iterable[ListingRecord]) -> Dict[str, AggregateSummary]:
    return summarize(partial_totals(records))
