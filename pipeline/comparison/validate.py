"""pipeline.comparison.validate

Marketplace upload checks for one document.

Seven checks, in report order:

=======================  ======================================  ========
Check                    Passes when                             Severity
=======================  ======================================  ========
Page Dimensions          trim + bleed, within tolerance          error
Color Space              CMYK                                    error
Max Ink Coverage (TAC)   max TAC <= fail limit                   warning
Fonts Embedded           every font embedded                     error
PDF Version              one of the accepted versions            warning
Encryption               not encrypted                           error
Page Count               at least one page                       error
=======================  ======================================  ========

A failed check with severity ``error`` makes the document invalid. A passed
check is reported with severity ``info``.
"""

from __future__ import annotations

from pathlib import Path
from typing import List

from press_compliance.domain import ComplianceProfile

from .model import (
    SEVERITY_ERROR,
    SEVERITY_INFO,
    SEVERITY_WARNING,
    PdfInfo,
    ValidationCheck,
    ValidationResult,
)


def _check(name: str, passed: bool, expected: str, actual: str, severity: str) -> ValidationCheck:
    return ValidationCheck(name, passed, expected, actual, SEVERITY_INFO if passed else severity)


def run_checks(info: PdfInfo, profile: ComplianceProfile) -> ValidationResult:
    checks: List[ValidationCheck] = []
    errors: List[str] = []
    warnings: List[str] = []

    # Page dimensions
    w, h = info.page_width, info.page_height
    ew, eh = profile.final_width, profile.final_height
    tol = profile.dimension_tolerance_pct / 100.0
    dims_ok = abs(w - ew) <= ew * tol and abs(h - eh) <= eh * tol
    checks.append(
        _check(
            "Page Dimensions",
            dims_ok,
            f'{ew:g}" × {eh:g}" (±{profile.dimension_tolerance_pct:g}%)',
            f'{w:.3f}" × {h:.3f}"',
            SEVERITY_ERROR,
        )
    )
    if not dims_ok:
        errors.append(f'Page dimensions ({w:.2f}" × {h:.2f}") don\'t match expected ({ew:g}" × {eh:g}")')

    # Color space
    cmyk = info.color_space == "CMYK"
    checks.append(_check("Color Space", cmyk, "CMYK", info.color_space, SEVERITY_ERROR))
    if not cmyk:
        errors.append(f"Color space is {info.color_space}, expected CMYK")

    # Ink coverage. An unmeasured document cannot pass.
    ink = info.ink
    if ink is None:
        checks.append(
            _check("Max Ink Coverage (TAC)", False, f"≤ {profile.tac_fail:g}%", "unknown", SEVERITY_WARNING)
        )
        warnings.append("Ink coverage could not be measured")
    else:
        tac_ok = ink.max_tac <= profile.tac_fail
        checks.append(
            _check(
                "Max Ink Coverage (TAC)",
                tac_ok,
                f"≤ {profile.tac_fail:g}%",
                f"{ink.max_tac:.1f}% (page {ink.max_tac_page or 0})",
                SEVERITY_WARNING,
            )
        )
        if not tac_ok:
            warnings.append(
                f"Max ink coverage ({ink.max_tac:.1f}%) exceeds {profile.tac_fail:g}% on page {ink.max_tac_page}"
            )

    # Fonts
    unembedded = info.unembedded_fonts
    checks.append(
        _check(
            "Fonts Embedded",
            not unembedded,
            "All fonts embedded",
            f"All {len(info.fonts)} fonts embedded" if not unembedded else f"{len(unembedded)} fonts not embedded",
            SEVERITY_ERROR,
        )
    )
    if unembedded:
        errors.append(f"Fonts not embedded: {', '.join(unembedded)}")

    # PDF version
    versions = profile.pdf_versions
    checks.append(
        _check(
            "PDF Version",
            info.pdf_version in versions,
            f"{' or '.join(versions)} (PDF/X-1a compatible)",
            info.pdf_version,
            SEVERITY_WARNING,
        )
    )

    # Encryption
    checks.append(
        _check(
            "Encryption",
            not info.encrypted,
            "Not encrypted",
            "Encrypted" if info.encrypted else "Not encrypted",
            SEVERITY_ERROR,
        )
    )
    if info.encrypted:
        errors.append("PDF is encrypted; print marketplaces require unencrypted PDFs")

    # Page count
    checks.append(
        _check("Page Count", info.page_count > 0, "> 0 pages", f"{info.page_count} pages", SEVERITY_ERROR)
    )
    if info.page_count <= 0:
        errors.append("Document has no pages")

    return ValidationResult(
        filename=info.filename,
        filepath=info.filepath,
        valid=not errors,
        info=info,
        checks=tuple(checks),
        errors=tuple(errors),
        warnings=tuple(warnings),
    )


def missing_file_result(document: Path) -> ValidationResult:
    document = Path(document)
    return ValidationResult(
        filename=document.name,
        filepath=document,
        valid=False,
        info=None,
        errors=(f"File not found: {document}",),
    )


def validate_document(pdf_inspector, document: Path, profile: ComplianceProfile) -> ValidationResult:
    """Inspect and check *document*; print a short summary block."""
    document = Path(document)
    print(f"\n🔍 Validating: {document.name}")
    if not document.exists():
        print("   ❌ File not found")
        return missing_file_result(document)

    info = pdf_inspector.inspect(document)
    result = run_checks(info, profile)

    tac = f"{info.max_tac:.1f}%" if info.max_tac is not None else "unknown"
    print(f"   📊 Pages: {info.page_count}")
    print(f'   📐 Size: {info.page_width:.2f}" × {info.page_height:.2f}"')
    print(f"   🎨 Color: {info.color_space}")
    print(f"   📝 Fonts: {len(info.fonts)} ({info.embedded_fonts} embedded)")
    print(f"   🖨️  Max TAC: {tac}")
    print(f"   {'✅ VALID' if result.valid else '❌ INVALID'}")
    return result
