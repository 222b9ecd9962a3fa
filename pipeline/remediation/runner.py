"""pipeline.remediation.runner

Page-parallel TAC remediation.

Flow for one document::

    preflight (all collaborators present?)      -> PipelineUnavailable
    measure before                              (unknown is allowed)
    device-link for ceiling (cached)
    per page, on a bounded thread pool:
        rasterize -> remap (fallback: unmodified raster) -> wrap
    join, then merge fragments in source page order
    measure after; over ceiling + 1%             -> ToleranceNotMet warning

The merge is the only strict join point. Workers may finish in any order;
fragments are placed by page index, never by completion order.

A failed *remap* degrades one page. A failed *rasterize* or *wrap* leaves a
hole in the document, so the whole pass fails with ``RemediationFailed``
and the input document is left as it was.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import time
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Dict, List, Optional

from press_compliance.domain import (
    MeasurementUnavailable,
    PageTransformFailure,
    PipelineUnavailable,
    RemediationFailed,
    ToleranceNotMet,
)
from tools.core_cmd import ToolFailure

from .model import PageOutcome, RemediationResult
from .profile_cache import DEFAULT_PROFILE_CACHE, RemediationProfileCache
from .toolchain import RemediationToolchain

logger = logging.getLogger(__name__)

TOLERANCE_PCT = 1.0


def default_output_path(document: Path, ceiling: float) -> Path:
    document = Path(document)
    return document.with_name(f"{document.stem}-tac{float(ceiling):g}.pdf")


def default_workers() -> int:
    return max(1, os.cpu_count() or 1)


class RemediationPipeline:
    def __init__(
        self,
        toolchain: RemediationToolchain,
        measurer,
        *,
        profile_cache: RemediationProfileCache = DEFAULT_PROFILE_CACHE,
        max_workers: Optional[int] = None,
        work_root: Optional[Path] = None,
    ) -> None:
        self.toolchain = toolchain
        self.measurer = measurer
        self.profile_cache = profile_cache
        self.max_workers = max_workers or default_workers()
        self.work_root = Path(work_root) if work_root else None

    # -------------------------
    # public entrypoint
    # -------------------------

    def remediate(
        self,
        document: Path,
        output: Optional[Path] = None,
        *,
        ceiling: float = 240,
        dpi: int = 300,
        verify: bool = True,
        keep_temp: bool = False,
    ) -> RemediationResult:
        t0 = time.time()
        document = Path(document)
        output = Path(output) if output else default_output_path(document, ceiling)

        if not document.exists():
            raise RemediationFailed(f"Input file not found: {document}")

        missing = self.toolchain.missing()
        if missing:
            raise PipelineUnavailable(missing)

        print(f"\n🔧 Limiting TAC to {ceiling:g}%...")
        print(f"   Input:  {document}")
        print(f"   Output: {output}")
        print(f"   DPI:    {dpi}")

        before = self._measure(document) if verify else None
        if before is not None:
            print(f"   Before: Max TAC = {before.max_tac:.1f}%")

        page_count = self._page_count(document, before)
        if page_count <= 0:
            raise RemediationFailed(f"Could not determine page count for {document}")

        artifact = self.profile_cache.get(ceiling, self._build_profile)

        if self.work_root is not None:
            self.work_root.mkdir(parents=True, exist_ok=True)
        work = Path(tempfile.mkdtemp(prefix="tac-", dir=str(self.work_root) if self.work_root else None))
        try:
            outcomes = self._process_pages(document, page_count, dpi, artifact, work, keep_temp)

            fragments = [outcomes[p].fragment for p in range(1, page_count + 1)]
            print("   Merging pages...")
            try:
                self.toolchain.merger.concat(fragments, output)
            except (ToolFailure, OSError) as e:
                raise RemediationFailed(f"merge failed: {e}") from e
        finally:
            if keep_temp:
                logger.info("keeping remediation work dir %s", work)
            else:
                shutil.rmtree(work, ignore_errors=True)

        warnings: List[str] = []
        fallback_pages = tuple(p for p in range(1, page_count + 1) if not outcomes[p].remapped)
        for p in fallback_pages:
            warnings.append(str(PageTransformFailure(p, outcomes[p].fallback_reason or "unknown")))

        after = None
        if verify:
            print("   Measuring TAC after conversion...")
            after = self._measure(output)
            if after is None:
                warnings.append(f"Could not measure TAC of remediated output {output.name}")
            elif after.max_tac <= ceiling + TOLERANCE_PCT:
                print(f"   ✅ TAC successfully limited to {after.max_tac:.1f}%")
            else:
                msg = str(ToleranceNotMet(after.max_tac, ceiling, TOLERANCE_PCT))
                print(f"   ⚠️  {msg}")
                warnings.append(msg)

        elapsed = time.time() - t0
        print(f"   ⏱️  Duration: {elapsed:.2f}s")
        return RemediationResult(
            input_path=document,
            output_path=output,
            ceiling=ceiling,
            dpi=dpi,
            page_count=page_count,
            before=before,
            after=after,
            fallback_pages=fallback_pages,
            warnings=tuple(warnings),
            elapsed_seconds=elapsed,
        )

    # -------------------------
    # stages
    # -------------------------

    def _build_profile(self, ceiling: float) -> Path:
        try:
            return self.toolchain.remapper.build(ceiling)
        except (ToolFailure, OSError) as e:
            raise RemediationFailed(f"could not build TAC profile: {e}") from e

    def _measure(self, document: Path):
        try:
            return self.measurer.measure(document)
        except MeasurementUnavailable as e:
            logger.warning("%s", e)
            return None

    def _page_count(self, document: Path, before) -> int:
        inspector = self.toolchain.inspector
        if inspector is not None:
            try:
                n = int(inspector.page_count(document))
                if n > 0:
                    return n
            except (ToolFailure, OSError, ValueError) as e:
                logger.warning("page count via inspector failed for %s: %s", document, e)
        return before.page_count if before is not None else 0

    def _process_pages(
        self,
        document: Path,
        page_count: int,
        dpi: int,
        artifact: Path,
        work: Path,
        keep_temp: bool,
    ) -> Dict[int, PageOutcome]:
        workers = max(1, min(self.max_workers, page_count))
        print(f"   Processing {page_count} pages ({workers} worker(s))...")

        outcomes: Dict[int, PageOutcome] = {}
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tac-page") as pool:
            futures = {
                pool.submit(self._process_page, document, page, dpi, artifact, work, keep_temp): page
                for page in range(1, page_count + 1)
            }
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            # Pages already running finish before the pool exits; queued ones are dropped.
            for f in pending:
                f.cancel()
            for f in done:
                # Re-raises the first page failure.
                outcome = f.result()
                outcomes[outcome.page] = outcome

        fallbacks = sum(1 for o in outcomes.values() if not o.remapped)
        print(f"   Processed {len(outcomes)} pages ({fallbacks} using unmodified raster)")
        return outcomes

    def _process_page(
        self,
        document: Path,
        page: int,
        dpi: int,
        artifact: Path,
        work: Path,
        keep_temp: bool,
    ) -> PageOutcome:
        tag = f"page-{page:04d}"
        raster = work / "tiff" / f"{tag}.tif"
        remapped = work / "tac" / f"{tag}.tif"
        fragment = work / "pdf" / f"{tag}.pdf"
        for d in (raster.parent, remapped.parent, fragment.parent):
            d.mkdir(parents=True, exist_ok=True)

        try:
            self.toolchain.rasterizer.to_raster(document, page, dpi, raster)
        except (ToolFailure, OSError) as e:
            raise RemediationFailed(f"rasterize failed: {e}", page=page) from e

        fallback_reason = None
        try:
            self.toolchain.remapper.apply(artifact, raster, remapped)
        except (ToolFailure, OSError) as e:
            logger.warning("color remap failed for page %d, using original raster: %s", page, e)
            fallback_reason = str(e)
            try:
                shutil.copyfile(raster, remapped)
            except OSError as copy_err:
                raise RemediationFailed(f"raster fallback copy failed: {copy_err}", page=page) from copy_err

        try:
            self.toolchain.wrapper.wrap(remapped, fragment)
        except (ToolFailure, OSError) as e:
            raise RemediationFailed(f"raster-to-PDF failed: {e}", page=page) from e

        if not keep_temp:
            raster.unlink(missing_ok=True)
            remapped.unlink(missing_ok=True)

        return PageOutcome(page=page, fragment=fragment, fallback_reason=fallback_reason)
