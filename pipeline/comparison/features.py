"""pipeline.comparison.features

Side-by-side feature rows across any number of backends.

Each row holds one display value per backend and a verdict:

- ``same``: every backend agrees (within the row's tolerance)
- ``<backend>-better``: a "lower is better" row with a unique minimum
- ``different``: anything else

Backends whose document could not be inspected show ``N/A``.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional, Sequence

from press_compliance.domain import ComplianceProfile

from .model import VERDICT_DIFFERENT, VERDICT_SAME, FeatureRow, PdfInfo, better_verdict

NA = "N/A"

DIMENSION_EPSILON_IN = 0.01
TAC_SAME_POINTS = 5.0
SIZE_SAME_RELATIVE = 0.05


def _equal_verdict(values: Sequence[Optional[object]]) -> str:
    if not values or any(v is None for v in values):
        return VERDICT_DIFFERENT
    return VERDICT_SAME if len(set(values)) == 1 else VERDICT_DIFFERENT


def lower_is_better(
    numbers: Mapping[str, Optional[float]],
    same: Callable[[float, float], bool],
) -> str:
    """Verdict for a numeric row where the lowest value wins.

    ``same(lo, hi)`` decides whether the spread counts as no difference.
    A shared minimum (or any unknown value) gives ``different``.
    """
    if not numbers or any(v is None for v in numbers.values()):
        return VERDICT_DIFFERENT
    vals = list(numbers.values())
    lo, hi = min(vals), max(vals)
    if same(lo, hi):
        return VERDICT_SAME
    at_min = [k for k, v in numbers.items() if v == lo]
    if len(at_min) == 1:
        return better_verdict(at_min[0])
    return VERDICT_DIFFERENT


def _tac_same(lo: float, hi: float) -> bool:
    return hi - lo < TAC_SAME_POINTS


def _size_same(lo: float, hi: float) -> bool:
    if hi <= 0:
        return True
    return (hi - lo) / hi < SIZE_SAME_RELATIVE


def compare_features(infos: Mapping[str, Optional[PdfInfo]], profile: ComplianceProfile) -> List[FeatureRow]:
    backends = list(infos.keys())
    rows: List[FeatureRow] = []

    def values(fmt: Callable[[PdfInfo], str]) -> Dict[str, str]:
        return {b: (fmt(infos[b]) if infos[b] is not None else NA) for b in backends}

    present = [infos[b] for b in backends if infos[b] is not None]
    complete = len(present) == len(backends) and bool(backends)

    # Page dimensions
    dims_same = complete and all(
        abs(i.page_width - present[0].page_width) < DIMENSION_EPSILON_IN
        and abs(i.page_height - present[0].page_height) < DIMENSION_EPSILON_IN
        for i in present
    )
    rows.append(
        FeatureRow(
            "Page Dimensions",
            values(lambda i: f'{i.page_width:.3f}" × {i.page_height:.3f}"'),
            VERDICT_SAME if dims_same else VERDICT_DIFFERENT,
            f'Should match {profile.final_width:g}" × {profile.final_height:g}" '
            f'({profile.trim_width:g}×{profile.trim_height:g} trim + {profile.bleed:g}" bleed)',
        )
    )

    # Page count
    rows.append(
        FeatureRow(
            "Page Count",
            values(lambda i: str(i.page_count)),
            _equal_verdict([infos[b].page_count if infos[b] else None for b in backends]),
            "All renderers should produce the same number of pages",
        )
    )

    # Color space
    rows.append(
        FeatureRow(
            "Color Space",
            values(lambda i: i.color_space),
            _equal_verdict([infos[b].color_space if infos[b] else None for b in backends]),
            "Should be CMYK after PDF/X conversion",
        )
    )

    # Fonts
    all_embedded = complete and all(i.embedded_fonts == len(i.fonts) for i in present)
    rows.append(
        FeatureRow(
            "Fonts Embedded",
            values(lambda i: f"{i.embedded_fonts}/{len(i.fonts)}"),
            VERDICT_SAME if all_embedded else VERDICT_DIFFERENT,
            "All fonts should be embedded",
        )
    )

    # Max ink
    rows.append(
        FeatureRow(
            "Max Ink (TAC)",
            values(lambda i: f"{i.max_tac:.1f}%" if i.max_tac is not None else NA),
            lower_is_better({b: (infos[b].max_tac if infos[b] else None) for b in backends}, _tac_same),
            f"Should be ≤{profile.tac_fail:g}%",
        )
    )

    # File size
    rows.append(
        FeatureRow(
            "File Size",
            values(lambda i: f"{i.file_size / 1024:.1f} KB"),
            lower_is_better(
                {b: (float(infos[b].file_size) if infos[b] else None) for b in backends}, _size_same
            ),
            "Smaller is generally better for upload",
        )
    )

    # PDF version
    rows.append(
        FeatureRow(
            "PDF Version",
            values(lambda i: i.pdf_version),
            _equal_verdict([infos[b].pdf_version if infos[b] else None for b in backends]),
            f"Should be {' or '.join(profile.pdf_versions)} for PDF/X-1a compatibility",
        )
    )

    return rows
