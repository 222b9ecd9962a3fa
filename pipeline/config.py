"""pipeline.config

Run configuration: defaults, environment, optional YAML file, CLI flags.

Precedence (highest first)::

    CLI flags  >  YAML file  >  environment  >  built-in defaults

YAML shape (every key optional)::

    profile:            # ComplianceProfile overrides
      tac_fail: 240
      trim_width: 6
    backends: [pagedjs, vivliostyle, weasyprint]
    skip: [vivliostyle]
    remediation:
      ceiling: 240
      dpi: 150
      workers: 4
      keep_temp: false
      verify: true
    strict: false
    tool_timeout_seconds: 120

Unknown keys are rejected; a typo must not silently fall back to a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from press_compliance.domain import DEFAULT_PROFILE, ComplianceProfile
from pipeline.backends import DEFAULT_BACKENDS, SUPPORTED_BACKENDS

DEFAULT_CEILING = 240.0
# Remediation DPI used by orchestrated runs (fast); limit-tac defaults to 300.
DEFAULT_RUN_DPI = 150
DEFAULT_TOOL_TIMEOUT_SECONDS = 120.0

TOP_LEVEL_KEYS = {"profile", "backends", "skip", "remediation", "strict", "tool_timeout_seconds"}
REMEDIATION_KEYS = {"ceiling", "dpi", "workers", "keep_temp", "verify"}


@dataclass(frozen=True)
class RunConfig:
    profile: ComplianceProfile = DEFAULT_PROFILE
    backends: Tuple[str, ...] = tuple(DEFAULT_BACKENDS)
    skip: Tuple[str, ...] = ()
    ceiling: float = DEFAULT_CEILING
    dpi: int = DEFAULT_RUN_DPI
    workers: Optional[int] = None
    keep_temp: bool = False
    verify: bool = True
    strict: bool = False
    tool_timeout_seconds: float = DEFAULT_TOOL_TIMEOUT_SECONDS
    cmyk_profile: Optional[Path] = None
    input_dir: Path = field(default_factory=lambda: Path("input"))
    output_dir: Path = field(default_factory=lambda: Path("output"))
    log_level: str = "WARNING"

    def to_dict(self) -> Dict[str, Any]:
        """The YAML-representable subset (what :func:`dump_run_config` writes)."""
        return {
            "profile": self.profile.to_dict(),
            "backends": list(self.backends),
            "skip": list(self.skip),
            "remediation": {
                "ceiling": self.ceiling,
                "dpi": self.dpi,
                "workers": self.workers,
                "keep_temp": self.keep_temp,
                "verify": self.verify,
            },
            "strict": self.strict,
            "tool_timeout_seconds": self.tool_timeout_seconds,
        }


# ----------------------------
# Environment
# ----------------------------


def _default_input_dir() -> Path:
    container = Path("/input")
    return container if container.is_dir() else Path.cwd() / "input"


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    env = os.environ if environ is None else environ
    out: Dict[str, Any] = {}

    def _get(name: str) -> Optional[str]:
        v = env.get(name)
        return v.strip() if v and v.strip() else None

    if _get("INPUT_DIR"):
        out["input_dir"] = Path(_get("INPUT_DIR"))
    if _get("OUTPUT_DIR"):
        out["output_dir"] = Path(_get("OUTPUT_DIR"))
    if _get("PRESS_LOG_LEVEL"):
        out["log_level"] = _get("PRESS_LOG_LEVEL").upper()
    if _get("PRESS_TOOL_TIMEOUT"):
        try:
            out["tool_timeout_seconds"] = float(_get("PRESS_TOOL_TIMEOUT"))
        except ValueError as e:
            raise ValueError(f"PRESS_TOOL_TIMEOUT must be a number of seconds: {e}") from e
    if _get("PRESS_CMYK_PROFILE"):
        out["cmyk_profile"] = Path(_get("PRESS_CMYK_PROFILE"))
    return out


# ----------------------------
# YAML IO
# ----------------------------


def _backend_list(raw: Any, key: str) -> Tuple[str, ...]:
    if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
        raise ValueError(f"'{key}' must be a list of backend names")
    keys = tuple(x.strip().lower() for x in raw)
    unknown = [k for k in keys if k not in SUPPORTED_BACKENDS]
    if unknown:
        raise ValueError(f"Unknown backend(s) in '{key}': {', '.join(unknown)}")
    return keys


def load_run_config(path: str | Path) -> Dict[str, Any]:
    """Load a YAML run configuration into RunConfig field overrides."""
    p = Path(path).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(f"Run configuration not found: {p}")
    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Run configuration must be a mapping at top level: {p}")

    unknown = sorted(set(raw) - TOP_LEVEL_KEYS)
    if unknown:
        raise ValueError(f"Unknown configuration keys in {p.name}: {', '.join(unknown)}")

    out: Dict[str, Any] = {}
    if "profile" in raw:
        if not isinstance(raw["profile"], dict):
            raise ValueError("'profile' must be a mapping")
        out["profile"] = ComplianceProfile.from_dict(raw["profile"])
    if "backends" in raw:
        out["backends"] = _backend_list(raw["backends"], "backends")
    if "skip" in raw:
        out["skip"] = _backend_list(raw["skip"], "skip")

    rem = raw.get("remediation") or {}
    if not isinstance(rem, dict):
        raise ValueError("'remediation' must be a mapping")
    bad = sorted(set(rem) - REMEDIATION_KEYS)
    if bad:
        raise ValueError(f"Unknown remediation keys: {', '.join(bad)}")
    if "ceiling" in rem:
        out["ceiling"] = float(rem["ceiling"])
    if "dpi" in rem:
        out["dpi"] = int(rem["dpi"])
    if rem.get("workers") is not None:
        out["workers"] = int(rem["workers"])
    if "keep_temp" in rem:
        out["keep_temp"] = bool(rem["keep_temp"])
    if "verify" in rem:
        out["verify"] = bool(rem["verify"])

    if "strict" in raw:
        out["strict"] = bool(raw["strict"])
    if "tool_timeout_seconds" in raw:
        out["tool_timeout_seconds"] = float(raw["tool_timeout_seconds"])
    return out


def dump_run_config(path: str | Path, cfg: RunConfig) -> Path:
    """Write a run configuration YAML to the given path."""
    p = Path(path).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    text = yaml.safe_dump(cfg.to_dict(), sort_keys=False, default_flow_style=False, width=120)
    p.write_text(text, encoding="utf-8")
    return p


# ----------------------------
# Resolution
# ----------------------------


def resolve_config(
    cli: Optional[Mapping[str, Any]] = None,
    *,
    config_path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfig:
    """Merge defaults, environment, YAML and CLI overrides (in that order).

    ``cli`` values that are ``None`` mean "flag not given" and are ignored.
    """
    cfg = RunConfig(input_dir=_default_input_dir(), output_dir=Path.cwd() / "output")
    cfg = replace(cfg, **env_overrides(environ))
    if config_path:
        cfg = replace(cfg, **load_run_config(config_path))
    given = {k: v for k, v in (cli or {}).items() if v is not None}
    if given:
        cfg = replace(cfg, **given)

    if cfg.ceiling <= 0:
        raise ValueError(f"ceiling must be positive, got {cfg.ceiling:g}")
    if cfg.dpi <= 0:
        raise ValueError(f"dpi must be positive, got {cfg.dpi}")
    if cfg.workers is not None and cfg.workers <= 0:
        raise ValueError(f"workers must be positive, got {cfg.workers}")
    return cfg
