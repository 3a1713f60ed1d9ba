"""Human-readable chat message for a dispatch outcome."""

from __future__ import annotations

from autopilot.models.action import ActionResult, AnalysisSummary, ErrorCategory


def format_outcome(analysis: AnalysisSummary, result: ActionResult) -> str:
    if not result.success:
        message = f"**Error:** {result.error}\n\n"
        if result.error_category == ErrorCategory.NOT_CONNECTED:
            message += (
                f"**Tip:** Go to the Credentials page to connect your {analysis.tool} account."
            )
        return message.rstrip()

    lines = [
        "**Success!**",
        "",
        f"**Action:** {analysis.intent}",
        "",
        f"**Tool:** {analysis.tool} → {analysis.action}",
        "",
        result.message or "Automation completed successfully.",
    ]

    if result.emails:
        lines += ["", "**Recent Emails:**"]
        lines += [f"- **{e.get('subject')}** from {e.get('from')}" for e in result.emails]

    if result.channels:
        lines += ["", "**Channels:**"]
        lines += [f"- #{c.get('name')} ({c.get('memberCount')} members)" for c in result.channels]

    return "\n".join(lines)
