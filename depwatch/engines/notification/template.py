"""Email template rendering for outdated-dependency reports."""

from __future__ import annotations

from html import escape

from depwatch.engines.dependency_resolver.models import ResolutionReport
from depwatch.models.subscription import Subscription

_ECOSYSTEM_LABELS: dict[str, str] = {
    "npm_or_yarn": "npm / yarn",
    "composer": "Composer",
}


def render_report(subscription: Subscription, report: ResolutionReport) -> tuple[str, str]:
    """Return (subject, html_body) for an outdated-dependency report email."""
    repo = report.repository.full_name
    count = len(report.outdated)
    noun = "dependency" if count == 1 else "dependencies"
    subject = f"[depwatch] {count} outdated {noun} in {repo}"

    ecosystem = _ECOSYSTEM_LABELS.get(report.kind.value, report.kind.value)
    td = 'style="padding: 6px 12px; border-bottom: 1px solid #e0e0e0;"'
    th = 'style="padding: 6px 12px; text-align: left; border-bottom: 2px solid #9e9e9e;"'
    body_style = (
        "font-family: -apple-system, BlinkMacSystemFont,"
        " 'Segoe UI', Roboto, sans-serif;"
        " color: #212121; max-width: 640px; margin: 0 auto;"
    )

    rows = "\n".join(
        f"  <tr><td {td}><code>{escape(dep.name)}</code></td>"
        f"<td {td}>{escape(dep.version)}</td>"
        f"<td {td}><strong>{escape(dep.latest_version)}</strong></td></tr>"
        for dep in report.outdated
    )

    failed_note = ""
    if report.failed:
        names = ", ".join(escape(name) for name in report.failed)
        failed_note = (
            f'<p style="color: #f57c00;">Could not check {len(report.failed)} '
            f"package(s) this time: {names}</p>"
        )

    html_body = f"""\
<html>
<body style="{body_style}">
<h2>Outdated dependencies in {escape(repo)}</h2>
<p>Repository: <a href="{escape(subscription.repository_url)}">{escape(subscription.repository_url)}</a><br>
Package manager: {escape(ecosystem)}<br>
Checked {report.checked} declared {("dependency" if report.checked == 1 else "dependencies")}.</p>
<table style="border-collapse: collapse; width: 100%; margin-bottom: 16px;">
  <tr><th {th}>Package</th><th {th}>Declared</th><th {th}>Latest</th></tr>
{rows}
</table>
{failed_note}
<hr style="border: none; border-top: 1px solid #e0e0e0; margin: 24px 0;">
<p style="color: #757575; font-size: 12px;">This is an automated report from depwatch.</p>
</body>
</html>"""

    return subject, html_body
