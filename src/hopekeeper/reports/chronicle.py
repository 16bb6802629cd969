from typing import Dict

from ..core.log import AuditLog


def summarize_log(log: AuditLog) -> Dict[str, int]:
    """Counts audit entries per type."""
    counts: Dict[str, int] = {}
    for entry in log.entries:
        counts[entry.type] = counts.get(entry.type, 0) + 1
    return counts


def generate_chronicle(log: AuditLog, year: int, month: int) -> str:
    """
    Generates a concise chronicle of one month from an AuditLog.
    """
    lines = [f"== Year {year} Month {month} =="]
    for entry in log.entries:
        reason = entry.reason or ""
        if reason:
            lines.append(f"[{entry.type}] {reason}")
        else:
            lines.append(f"[{entry.type}]")
    if not log.entries:
        lines.append("Nothing happened.")
    return "\n".join(lines) + "\n"
