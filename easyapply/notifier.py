"""
Email notification — sends a summary after each run via Gmail SMTP.
"""

import logging
import smtplib
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

from easyapply.config import Settings
from easyapply.history import CsvApplicationHistory
from easyapply.runner import RunSummary

log = logging.getLogger(__name__)

SMTP_HOST = "smtp.gmail.com"
SMTP_PORT = 465


def build_summary_message(
    settings: Settings,
    summary: RunSummary,
    history: Optional[CsvApplicationHistory] = None,
) -> MIMEMultipart:
    """Plain-text + HTML summary of one run, plus today's totals when a history is given."""
    stats = summary.stats
    now = datetime.now(timezone.utc)
    date = now.date().isoformat()
    today = None
    if history is not None:
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        today = history.stats(since=midnight)
    subject = (
        f"Easy Apply Report — {date} | "
        f"{stats.successful} applied, {stats.failed} failed"
    )

    lines = [
        "Easy Apply Bot — Run Summary",
        "=" * 50,
        f"Run:         {summary.run_id}",
        f"Date:        {date}",
        f"Collected:   {summary.collected}",
        f"Applied:     {stats.successful}",
        f"Skipped:     {stats.skipped}  (already applied)",
        f"Failed:      {stats.failed}",
        f"Success:     {stats.success_rate:.0f}%",
    ]
    if today is not None:
        lines.append(
            f"Today:       {today.successful} applied, {today.failed} failed, "
            f"{today.skipped} skipped (all runs)"
        )
    lines += [
        "",
        "Applications submitted:",
        "-" * 40,
    ]
    for i, job in enumerate(summary.applied, 1):
        lines.append(f"  {i}. {job.company} — {job.title}")
    if not summary.applied:
        lines.append("  (none)")
    failures = [(job, outcome) for job, outcome in summary.results if outcome.status == "failed"]
    if failures:
        lines += ["", "Not completed:", "-" * 40]
        for job, outcome in failures:
            lines.append(f"  - {job.company} — {job.title}: {outcome}")
    body = "\n".join(lines)

    rows_html = "".join(
        f"<tr><td>{i}</td><td>{escape(job.company)} — {escape(job.title)}</td></tr>\n"
        for i, job in enumerate(summary.applied, 1)
    )
    today_html = (
        f"<tr><td><b>Today</b></td><td>{today.successful} applied, {today.failed} failed, "
        f"{today.skipped} skipped</td></tr>"
        if today is not None else ""
    )
    html = f"""
    <html><body>
    <h2>Easy Apply Bot — Run Summary</h2>
    <table border="0" cellpadding="4">
      <tr><td><b>Date</b></td><td>{date}</td></tr>
      <tr><td><b>Applied</b></td><td>{stats.successful}</td></tr>
      <tr><td><b>Skipped</b></td><td>{stats.skipped}</td></tr>
      <tr><td><b>Failed</b></td><td>{stats.failed}</td></tr>
      {today_html}
    </table>
    <h3>Applications Submitted</h3>
    <table border="1" cellpadding="4" cellspacing="0">
      <tr><th>#</th><th>Company — Role</th></tr>
      {rows_html}
    </table>
    </body></html>
    """

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.smtp_email
    msg["To"] = settings.notify_email
    msg.attach(MIMEText(body, "plain"))
    msg.attach(MIMEText(html, "html"))
    return msg


def send_run_summary(
    settings: Settings,
    summary: RunSummary,
    history: Optional[CsvApplicationHistory] = None,
) -> bool:
    """Send an email summarising this run's results. Returns True if sent."""
    if not settings.email_configured:
        log.warning("Email credentials not configured — skipping notification.")
        return False

    stats = summary.stats
    if stats.successful == 0 and stats.failed == 0:
        log.info("Nothing to report — skipping email.")
        return False

    msg = build_summary_message(settings, summary, history)
    try:
        with smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT) as server:
            server.login(settings.smtp_email, settings.smtp_password)
            server.sendmail(settings.smtp_email, settings.notify_email, msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        log.error(f"Failed to send email: {e}")
        return False
    log.info(f"Summary email sent to {settings.notify_email}")
    return True
