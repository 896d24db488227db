"""Morning attendance package.

Local-first attendance engine for a fixed student roster: every swipe is
saved to a local JSON store and mirrored best-effort to a Google Apps Script
spreadsheet. Reads merge both sides, then feed the daily/weekly statistics
and the missing-swipe backfill policy.

Organized by feature modules (records, remote, sync, stats, backfill, ...)
with a thin Flask controller layer over the service layer.
"""

from .container import AppConfig, Container, build_container

__all__ = ["AppConfig", "Container", "build_container"]
