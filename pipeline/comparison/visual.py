"""pipeline.comparison.visual

Pairwise page-by-page visual diff.

Every document is rendered once (``<visual-diff>/<backend>/page-N.png``);
each backend pair is then compared page by page and the difference images
go to ``<visual-diff>/diff/<a>-vs-<b>/``.

A page counts as differing when:
- more than :data:`PIXEL_THRESHOLD` pixels differ, or
- the comparison itself fails (e.g. different raster sizes), or
- the page only exists in one of the two documents.
"""

from __future__ import annotations

import logging
from itertools import combinations
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from tools.core_cmd import ToolFailure

from .model import PageDiff, PairVisualDiff, VisualDiffSummary

logger = logging.getLogger(__name__)

PIXEL_THRESHOLD = 100


def diff_pages(
    pages_a: List[Path],
    pages_b: List[Path],
    differ,
    diff_dir: Optional[Path] = None,
) -> VisualDiffSummary:
    per_page: List[PageDiff] = []
    total = max(len(pages_a), len(pages_b))
    for i in range(total):
        page = i + 1
        if i >= len(pages_a) or i >= len(pages_b):
            per_page.append(PageDiff(page, None, True, "page present in only one document"))
            continue
        out = diff_dir / f"diff-page-{page}.png" if diff_dir else None
        try:
            pixels = int(differ.diff(pages_a[i], pages_b[i], out))
        except (ToolFailure, OSError) as e:
            per_page.append(PageDiff(page, None, True, f"compare failed: {e}"))
            continue
        per_page.append(PageDiff(page, pixels, pixels > PIXEL_THRESHOLD))

    differing = sum(1 for p in per_page if p.differs)
    return VisualDiffSummary(pages_compared=total, pages_differing=differing, per_page=tuple(per_page))


class VisualComparer:
    def __init__(self, rasterizer, differ) -> None:
        self.rasterizer = rasterizer
        self.differ = differ

    def compare(self, documents: Mapping[str, Path], out_dir: Path) -> List[PairVisualDiff]:
        """Compare every pair of *documents* (backend -> path)."""
        keys = list(documents.keys())
        if len(keys) < 2:
            return []

        print("\n🖼️  Visual comparison...")
        out_dir = Path(out_dir)
        rendered: Dict[str, List[Path]] = {}
        render_errors: Dict[str, str] = {}
        for k in keys:
            try:
                rendered[k] = self.rasterizer.render(documents[k], out_dir / k)
            except (ToolFailure, OSError) as e:
                logger.warning("could not render %s for visual diff: %s", documents[k], e)
                render_errors[k] = str(e)

        pairs: List[PairVisualDiff] = []
        for a, b in combinations(keys, 2):
            failed = [k for k in (a, b) if k in render_errors]
            if failed:
                msg = "; ".join(f"{k}: {render_errors[k]}" for k in failed)
                print(f"   ⚠️  {a} vs {b}: visual comparison failed ({msg})")
                pairs.append(PairVisualDiff(a, b, VisualDiffSummary(0, 0, (), error=msg)))
                continue
            summary = diff_pages(rendered[a], rendered[b], self.differ, out_dir / "diff" / f"{a}-vs-{b}")
            for p in summary.per_page:
                if p.differs:
                    detail = f"{p.pixels} pixels differ" if p.pixels is not None else p.reason
                    print(f"   {a} vs {b} page {p.page}: {detail}")
            print(f"   {a} vs {b}: {summary.pages_differing}/{summary.pages_compared} pages with visible differences")
            pairs.append(PairVisualDiff(a, b, summary))
        return pairs
