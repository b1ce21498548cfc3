"""Session reconstruction from the raw clock entry log.

This module pairs "in" entries with "out" entries per employee and site:

1. Entries are sorted by timestamp (the log may arrive out of order from
   concurrent writers).
2. Open sessions are indexed by (employee, site) and, as a fallback, by
   employee alone.
3. An "out" closes the open session with the same (employee, site). If none
   exists and the employee has exactly one open session at any site, that
   one is closed instead (site renamed or omitted between in and out).
4. An "out" with nothing to close becomes a zero-minute orphan session so
   the logging gap stays visible to managers.

Every entry with an employee reference ends up in exactly one session.
"""

import logging
from collections.abc import Mapping
from typing import Dict, Iterable, List, Optional, Set, Tuple, Union

from pydantic import ValidationError

from shiftledger.models.entry import Entry
from shiftledger.models.session import Session

logger = logging.getLogger(__name__)

EntryLike = Union[Entry, Mapping]


def coerce_entries(entries: Iterable[EntryLike]) -> List[Entry]:
    """Validate mapping records into Entry models; Entry objects pass through.

    Records that are not valid entries (for example an unreadable ``ts``)
    are logged and skipped rather than raised.
    """
    result = []
    for item in entries:
        if isinstance(item, Entry):
            result.append(item)
            continue
        try:
            result.append(Entry.model_validate(dict(item)))
        except ValidationError as e:
            logger.warning(
                f"Skipping malformed entry {item.get('id', '?')}: "
                f"{e.error_count()} validation error(s)"
            )
    return result


def build_sessions(entries: Iterable[EntryLike]) -> List[Session]:
    """Reconstruct sessions from an unordered entry log.

    Args:
        entries: Clock entries (Entry models or entry documents)

    Returns:
        Sessions ordered by their starting timestamp. Sessions still open at
        the end of the log are ``active`` and measure their duration
        against the current time whenever it is read.

    Example:
        >>> sessions = build_sessions([
        ...     {"id": "1", "employeeId": "a", "action": "in", "ts": 0, "site": "X"},
        ...     {"id": "2", "employeeId": "a", "action": "out", "ts": 5400000,
        ...      "site": "X"},
        ... ])
        >>> sessions[0].duration_minutes()
        90.0
    """
    ordered = sorted(coerce_entries(entries), key=lambda e: (e.ts, e.id))

    sessions: List[Session] = []
    open_by_key: Dict[Tuple[str, str], Session] = {}
    open_by_employee: Dict[str, Set[int]] = {}
    open_sessions: Dict[int, Session] = {}
    orphan_count = 0

    for entry in ordered:
        employee_key = entry.employee_key
        if not employee_key:
            logger.warning(
                f"Skipping entry {entry.id}: no employee reference",
                extra={"entry_id": entry.id},
            )
            continue

        key = (employee_key, entry.site_key)

        if entry.action == "in":
            session = Session(
                employee=entry.employee,
                employee_id=entry.employee_id,
                in_entry=entry,
                out_entry=None,
                active=True,
            )
            sessions.append(session)
            open_by_key[key] = session
            open_sessions[id(session)] = session
            open_by_employee.setdefault(employee_key, set()).add(id(session))
            continue

        session = open_by_key.get(key)
        if session is None:
            session = _sole_open_session(open_by_employee, open_sessions, employee_key)

        if session is not None:
            session.out_entry = entry
            session.active = False

            in_key = (employee_key, session.in_entry.site_key)
            if open_by_key.get(in_key) is session:
                del open_by_key[in_key]
            if open_by_key.get(key) is session:
                del open_by_key[key]
            candidates = open_by_employee.get(employee_key, set())
            candidates.discard(id(session))
            if not candidates:
                open_by_employee.pop(employee_key, None)
            open_sessions.pop(id(session), None)
        else:
            orphan_count += 1
            logger.warning(
                f"Orphan clock-out {entry.id} for {entry.employee or employee_key}",
                extra={"entry_id": entry.id},
            )
            sessions.append(
                Session(
                    employee=entry.employee,
                    employee_id=entry.employee_id,
                    in_entry=None,
                    out_entry=entry,
                    active=False,
                )
            )

    sessions.sort(key=lambda s: s.start_ts)

    active_count = sum(1 for s in sessions if s.active)
    logger.info(
        f"Built {len(sessions)} sessions from {len(ordered)} entries "
        f"({active_count} active, {orphan_count} orphan clock-outs)"
    )
    return sessions


def _sole_open_session(
    open_by_employee: Dict[str, Set[int]],
    open_sessions: Dict[int, Session],
    employee_key: str,
) -> Optional[Session]:
    """The employee's only open session, or None when zero or ambiguous."""
    candidates = open_by_employee.get(employee_key)
    if candidates and len(candidates) == 1:
        return open_sessions[next(iter(candidates))]
    return None


def sessions_for_employee(
    sessions: Iterable[Session],
    employee_id: Optional[str] = None,
    employee_name: Optional[str] = None,
) -> List[Session]:
    """Sessions belonging to one employee, matched by id then by name."""
    result = []
    for session in sessions:
        if employee_id and session.employee_id:
            if session.employee_id == employee_id:
                result.append(session)
        elif employee_name and session.employee == employee_name:
            result.append(session)
    return result


def active_sessions(sessions: Iterable[Session]) -> List[Session]:
    return [s for s in sessions if s.active]


def is_clocked_in(
    sessions: Iterable[Session], employee_id: str, site_name: Optional[str] = None
) -> bool:
    """Whether an employee has an open session (optionally at one site)."""
    wanted = (site_name or "").strip().lower()
    for session in sessions:
        if not session.active or session.employee_id != employee_id:
            continue
        if not wanted or (session.site or "").strip().lower() == wanted:
            return True
    return False
