"""Audit checks over the clock entry log.

Reporting code never raises on bad data; instead the auditor collects what
a manager should look at into a ValidationReport:

- ERROR: entries with no employee reference (they belong to no session)
- WARNING: clock-outs with no matching clock-in (orphan sessions)
- WARNING: entries recorded outside the site's geofence
- INFO: entries at a site missing from the site directory
- INFO: sessions that are still open

Overlapping shifts of one employee at different sites are summed by the
aggregators and are deliberately not reported here.
"""

import logging
from typing import Iterable, List, Optional

from shiftledger.calculators.geo import distance_feet
from shiftledger.calculators.session_builder import build_sessions
from shiftledger.calculators.time_utils import from_epoch_ms, minutes_to_hhmm
from shiftledger.models.entry import Entry
from shiftledger.models.session import Session
from shiftledger.models.site import BusinessSettings, SiteIndex
from shiftledger.validators.validation_report import ValidationReport

logger = logging.getLogger(__name__)


def _entry_context(entry: Entry) -> dict:
    context = {"entry_id": entry.id}
    if entry.employee:
        context["employee"] = entry.employee
    return context


class EntryLogAuditor:
    """Runs every entry-log check and merges the findings.

    Example:
        >>> report = EntryLogAuditor.audit(entries, settings)
        >>> print(report.summary())
        1 warning(s), 2 info message(s)
    """

    @staticmethod
    def check_employee_references(
        entries: Iterable[Entry], report: ValidationReport
    ) -> None:
        """Flag entries that carry neither an employee id nor a name."""
        for entry in entries:
            if not entry.employee_key:
                report.add_error(
                    "employee",
                    "Entry has no employee reference and cannot be paired",
                    entry.employee_id or entry.employee,
                    {"entry_id": entry.id},
                )

    @staticmethod
    def check_orphans(sessions: Iterable[Session], report: ValidationReport) -> None:
        """Flag clock-outs that had no open clock-in to close."""
        for session in sessions:
            if not session.is_orphan or session.out_entry is None:
                continue
            out = session.out_entry
            report.add_warning(
                "action",
                f"Clock-out at {from_epoch_ms(out.ts).isoformat()} "
                f"has no matching clock-in",
                out.action,
                _entry_context(out),
            )

    @staticmethod
    def check_unknown_sites(
        entries: Iterable[Entry], index: SiteIndex, report: ValidationReport
    ) -> None:
        """Note entries whose site is not in the site directory."""
        if not len(index):
            return
        for entry in entries:
            if entry.site and index.get_by_name(entry.site) is None:
                report.add_info(
                    "site",
                    f"Site '{entry.site}' is not in the site directory",
                    entry.site,
                    _entry_context(entry),
                )

    @staticmethod
    def check_geofence(
        entries: Iterable[Entry],
        index: SiteIndex,
        default_radius_feet: float,
        report: ValidationReport,
    ) -> None:
        """Flag entries recorded farther from the site than its geofence.

        Only entries and sites with both coordinates known are checked.
        """
        for entry in entries:
            if not entry.has_location:
                continue
            site = index.get_by_name(entry.site)
            if site is None or site.lat is None or site.lng is None:
                continue
            radius = site.geofence_radius_feet or default_radius_feet
            distance = distance_feet(entry.lat, entry.lng, site.lat, site.lng)
            if distance > radius:
                report.add_warning(
                    "location",
                    f"Clock-{entry.action} recorded {distance:.0f} ft from "
                    f"{site.name} (geofence {radius:.0f} ft)",
                    round(distance),
                    _entry_context(entry),
                )

    @staticmethod
    def check_active_sessions(
        sessions: Iterable[Session],
        report: ValidationReport,
        now: Optional[int] = None,
    ) -> None:
        """Note sessions that are still open, with their running time."""
        for session in sessions:
            if not session.active:
                continue
            report.add_info(
                "session",
                f"Still clocked in at {session.site or 'no site'} "
                f"for {minutes_to_hhmm(session.duration_minutes(now))}",
                session.employee or session.employee_id,
                _entry_context(session.in_entry),
            )

    @classmethod
    def audit(
        cls,
        entries: Iterable[Entry],
        settings: BusinessSettings,
        sessions: Optional[List[Session]] = None,
        now: Optional[int] = None,
    ) -> ValidationReport:
        """Run all checks over an entry log.

        Args:
            entries: Clock entries
            settings: Business settings with the site directory and the
                default geofence radius
            sessions: Sessions already built from ``entries`` (built here
                when omitted)
            now: Reference time in epoch ms for active sessions

        Returns:
            ValidationReport with every finding
        """
        entry_list = list(entries)
        session_list = sessions if sessions is not None else build_sessions(entry_list)
        index = settings.site_index()

        report = ValidationReport()
        cls.check_employee_references(entry_list, report)
        cls.check_orphans(session_list, report)
        cls.check_unknown_sites(entry_list, index, report)
        cls.check_geofence(entry_list, index, settings.geofence_radius, report)
        cls.check_active_sessions(session_list, report, now)

        logger.info(f"Audited {len(entry_list)} entries: {report.summary()}")
        return report
