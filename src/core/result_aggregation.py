"""Completion summary computation for flat and multi-phase results."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from src.models.batch_result import BatchResult, PhasedResults

RESULT_KIND_FLAT = "flat"
RESULT_KIND_MULTI_PHASE = "multi_phase"
RESULT_KIND_AMBIGUOUS = "ambiguous"

# Keys a phase mapping may hold. 'deleted' entries count as successes.
PHASE_SUCCESS_KEYS = ("successful", "deleted")
PHASE_FAILURE_KEYS = ("failed",)
FLAT_KEYS = (
    "success",
    "successes",
    "failures",
    "total_processed",
    "total_succeeded",
    "total_failed",
)


def _is_phase(value: Any) -> bool:
    return isinstance(value, Mapping) and any(
        key in value for key in PHASE_SUCCESS_KEYS + PHASE_FAILURE_KEYS
    )


def _count(value: Any) -> int:
    if isinstance(value, (list, tuple, set, Mapping)):
        return len(value)
    return 0


def detect_result_kind(results: Any) -> str:
    """Return the shape of a completion payload.

    Tagged payloads (BatchResult, PhasedResults, or a mapping with a
    'result_kind' key) are taken at their word. Untagged mappings are
    inspected: nested phase mappings mean multi-phase, top-level counters or
    lists mean flat, and both at once is ambiguous.
    """
    if isinstance(results, BatchResult):
        return RESULT_KIND_FLAT
    if isinstance(results, PhasedResults):
        return RESULT_KIND_MULTI_PHASE
    if not isinstance(results, Mapping):
        return RESULT_KIND_FLAT

    tagged = results.get("result_kind")
    if tagged in (RESULT_KIND_FLAT, RESULT_KIND_MULTI_PHASE):
        return str(tagged)

    has_phases = any(_is_phase(value) for value in results.values())
    has_flat = any(key in results for key in FLAT_KEYS)
    if has_phases and has_flat:
        return RESULT_KIND_AMBIGUOUS
    if has_phases:
        return RESULT_KIND_MULTI_PHASE
    return RESULT_KIND_FLAT


def _summarize_phases(phases: Mapping[str, Any]) -> dict[str, int]:
    successful = 0
    failed = 0
    for phase in phases.values():
        if not isinstance(phase, Mapping):
            continue
        successful += sum(_count(phase.get(key)) for key in PHASE_SUCCESS_KEYS)
        failed += sum(_count(phase.get(key)) for key in PHASE_FAILURE_KEYS)
    return {
        "total_successful": successful,
        "total_failed": failed,
        "total_processed": successful + failed,
    }


def _summarize_flat(results: Mapping[str, Any]) -> dict[str, int]:
    successes = results.get("successes", results.get("success"))
    failures = results.get("failures", results.get("failed"))
    successful = int(results.get("total_succeeded", _count(successes)))
    failed = int(results.get("total_failed", _count(failures)))
    processed = int(results.get("total_processed", successful + failed))
    return {
        "total_successful": successful,
        "total_failed": failed,
        "total_processed": processed,
    }


def summarize_results(results: Any, kind: str | None = None) -> dict[str, int] | None:
    """Compute {total_successful, total_failed, total_processed}.

    Returns None when the payload is neither a result model nor a mapping.
    Ambiguous payloads are summarized as flat.
    """
    kind = kind or detect_result_kind(results)

    if isinstance(results, BatchResult):
        return {
            "total_successful": results.total_succeeded,
            "total_failed": results.total_failed,
            "total_processed": results.total_processed,
        }
    if isinstance(results, PhasedResults):
        return {
            "total_successful": results.total_successful,
            "total_failed": results.total_failed,
            "total_processed": results.total_successful + results.total_failed,
        }
    if not isinstance(results, Mapping):
        return None

    if kind == RESULT_KIND_MULTI_PHASE:
        phases = results.get("phases", results)
        return _summarize_phases(phases if isinstance(phases, Mapping) else {})
    return _summarize_flat(results)


def completion_message(summary: dict[str, int] | None) -> str:
    """Terminal message for a completion snapshot."""
    failed = (summary or {}).get("total_failed", 0)
    if failed > 0:
        return f"Operation completed with {failed} error(s)"
    return "Operation completed successfully!"


def format_batch_summary(summary: dict[str, int], errors: list[str] | None = None) -> str:
    """Format batch statistics as a human-readable summary string."""
    lines = [
        f"[SUMMARY] Processed: {summary.get('total_processed', 0)}",
        f"  Successful: {summary.get('total_successful', 0)}",
        f"  Failed: {summary.get('total_failed', 0)}",
    ]

    errors = errors or []
    if errors:
        lines.append(f"  Errors ({len(errors)}):")
        for error in errors[:10]:
            lines.append(f"    - {error}")
        if len(errors) > 10:
            lines.append(f"    ... and {len(errors) - 10} more")

    return "\n".join(lines)
