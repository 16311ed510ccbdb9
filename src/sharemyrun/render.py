from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sharemyrun.sharing import SharedWorkout

KIND_WIDTH = 10


def render_text(shared: SharedWorkout) -> str:
    """Plain-text version of the share page."""
    w = shared.workout
    lines = [w.name, w.sport]
    if w.description:
        lines += ["", w.description]

    if w.steps:
        lines.append("")
        for step in w.steps:
            parts = [step.kind.upper().ljust(KIND_WIDTH)]
            if step.duration_display:
                parts.append(step.duration_display)
            if step.target_display:
                parts.append(step.target_display)
            lines.append("  ".join(parts).rstrip())

    fmt = shared.artifact.format
    lines += ["", f"Download .{fmt.upper()} file: {shared.download_filename}", ""]
    lines.append("How to import into Garmin Connect:")
    lines += [f"  {i}. {text}" for i, text in enumerate(shared.import_instructions, 1)]
    return "\n".join(lines)
