"""
Report rendering for email actions.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from herald.core import TriggerResult, to_text
from herald.paths import extract_value

if TYPE_CHECKING:
    from herald.actions.smtp import SmtpAction

# Label of the system whose alerts are being reported
PRODUCT_NAME = "Elasticsearch"


@dataclass(frozen=True)
class RenderedReport:
    """Subject and plain-text body of one notification."""
    subject: str
    body: str


def render_report(
    action: "SmtpAction",
    alert_name: str,
    result: TriggerResult,
    product_name: str = PRODUCT_NAME
) -> RenderedReport:
    """
    Render the notification for a fired alert.

    The body starts with a summary of the trigger and the query, followed
    either by one line per hit (showing the action's display field) or by
    the whole action response when no display field is configured.

    Args:
        action: The email action being performed
        alert_name: Name of the alert that fired
        result: The alert's trigger result
        product_name: Label used in the subject line

    Returns:
        RenderedReport with subject and body
    """
    subject = f"{product_name} Alert {alert_name} triggered"

    lines = [
        f"The following query triggered because {result.trigger}",
        "The total number of hits returned : "
        f"{to_text(extract_value('hits.total', result.trigger_response))}",
        f"For query : {result.action_request}",
        "Indices : " + "".join(f"{index}/" for index in result.action_request.indices),
        "",
    ]

    if action.display_field is not None:
        lines.extend(_hit_lines(action.display_field, result))
        body = "\n".join(lines) + "\n"
    else:
        body = "\n".join(lines) + "\n" + to_text(result.action_response)

    return RenderedReport(subject=subject, body=body)


def _hit_lines(display_field: str, result: TriggerResult) -> list[str]:
    """One line per hit: the display field if the hit has it, else its whole source."""
    hits = extract_value("hits.hits", result.action_response)
    if not isinstance(hits, list):
        return []

    lines = []
    for hit in hits:
        source = hit.get("_source", {}) if isinstance(hit, dict) else {}
        if isinstance(source, dict) and display_field in source:
            lines.append(to_text(source[display_field]))
        else:
            lines.append(to_text(source))
    return lines
