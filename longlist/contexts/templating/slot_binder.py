"""
Pagination and Slot Binding

Splits candidate records into pages of fixed capacity and builds one Binding per
page. Slots are numbered from 1; every key of every slot is present in every
Binding, so a short page leaves its trailing slots bound to "" / [] and their
conditional blocks disappear on render.
"""

import math
from typing import Dict, List, Optional, Sequence

from longlist.contexts.templating.candidate_data_structure import CandidateRecord
from longlist.contexts.templating.config_resolver import DeckConfig
from longlist.contexts.templating.defaults import (
    EDUCATION_ITEM_KEYS,
    SLOT_KEYS,
    WORK_HISTORY_ITEM_KEYS,
)
from longlist.contexts.templating.exceptions import BindingError
from longlist.contexts.templating.placeholder_grammar import Binding
from longlist.utils.escaping import LINE_BREAK


def slot_key(field: str, slot: int) -> str:
    """Placeholder key of a slot field (e.g., slot_key("name", 2) -> "NAME_2")."""
    return SLOT_KEYS[field].format(slot=slot)


def slot_keys(slot: int) -> List[str]:
    """All placeholder keys belonging to one slot."""
    return [slot_key(field, slot) for field in SLOT_KEYS]


def paginate(records: Sequence[CandidateRecord], capacity: int) -> List[List[CandidateRecord]]:
    """
    Split records into consecutive pages of at most ``capacity`` records.

    Args:
        records: Records in presentation order
        capacity: Slots per page (K >= 1)

    Returns:
        ceil(N / K) pages; order is preserved and the last page holds the remainder

    Example:
        >>> [len(page) for page in paginate(records_of_length_5, 4)]
        [4, 1]
    """
    if capacity < 1:
        raise BindingError(f"Page capacity must be at least 1, got {capacity}")

    page_count = math.ceil(len(records) / capacity)
    return [list(records[i * capacity : (i + 1) * capacity]) for i in range(page_count)]


def truncate_records(records: Sequence[CandidateRecord], max_records: int) -> List[CandidateRecord]:
    """Keep the first ``max_records`` records."""
    return list(records[:max_records])


def _cap(entries: Sequence, cap: Optional[int]) -> list:
    return list(entries) if cap is None else list(entries[:cap])


def work_history_text(record: CandidateRecord, cap: Optional[int] = None) -> str:
    """One line per job: "{company} - {job_title}" followed by " {dates}" when present."""
    return LINE_BREAK.join(job.to_line() for job in _cap(record.work_history, cap))


def education_text(record: CandidateRecord, cap: Optional[int] = None) -> str:
    """Two lines per entry: institution (with dates when present), then degree."""
    lines = []
    for edu in _cap(record.education, cap):
        lines.extend(edu.to_lines())
    return LINE_BREAK.join(lines)


def bind_slot(binding: Binding, slot: int, record: CandidateRecord, config: DeckConfig) -> None:
    """
    Bind one record into a slot of a page Binding.

    The name is upper-cased. Work history is truncated to ``work_history_cap``
    (order as received); education is truncated only when ``education_cap`` is set.

    Args:
        binding: Page Binding being built (modified in place)
        slot: 1-based slot index
        record: Record to bind
        config: DeckConfig providing the caps
    """
    jobs = _cap(record.work_history, config.work_history_cap)
    schools = _cap(record.education, config.education_cap)

    binding[slot_key("name", slot)] = record.name.upper()
    binding[slot_key("work_history", slot)] = [
        dict(zip(WORK_HISTORY_ITEM_KEYS, (job.job_title, job.company, job.dates)))
        for job in jobs
    ]
    binding[slot_key("work_history_text", slot)] = work_history_text(record, config.work_history_cap)
    binding[slot_key("education", slot)] = [
        dict(zip(EDUCATION_ITEM_KEYS, (edu.institution, edu.degree, edu.dates)))
        for edu in schools
    ]
    binding[slot_key("education_text", slot)] = education_text(record, config.education_cap)


def bind_empty_slot(binding: Binding, slot: int) -> None:
    """Bind every key of an unused slot to "" (scalars) or [] (loops)."""
    binding[slot_key("name", slot)] = ""
    binding[slot_key("work_history", slot)] = []
    binding[slot_key("work_history_text", slot)] = ""
    binding[slot_key("education", slot)] = []
    binding[slot_key("education_text", slot)] = ""


def empty_binding(capacity: int) -> Binding:
    """Binding with every slot empty, used for templated parts past the last page."""
    binding: Binding = {}
    for slot in range(1, capacity + 1):
        bind_empty_slot(binding, slot)
    return binding


def _check_complete(binding: Binding, capacity: int) -> None:
    missing = [key for slot in range(1, capacity + 1) for key in slot_keys(slot) if key not in binding]
    if missing:
        raise BindingError(f"Binding is missing slot keys: {missing}")


def bind_page(records: Sequence[CandidateRecord], config: DeckConfig) -> Binding:
    """
    Build the Binding of one page.

    Args:
        records: Records on this page (at most page_capacity)
        config: DeckConfig

    Returns:
        Binding covering slots 1..page_capacity

    Raises:
        BindingError: If the page holds more records than slots
    """
    capacity = config.page_capacity
    if len(records) > capacity:
        raise BindingError(f"Page holds {len(records)} records but only {capacity} slots")

    binding: Binding = {}
    for slot in range(1, capacity + 1):
        if slot <= len(records):
            bind_slot(binding, slot, records[slot - 1], config)
        else:
            bind_empty_slot(binding, slot)

    _check_complete(binding, capacity)
    return binding


def bind_pages(records: Sequence[CandidateRecord], config: DeckConfig) -> List[Binding]:
    """Paginate records and bind every page."""
    return [bind_page(page, config) for page in paginate(records, config.page_capacity)]


def describe_binding(binding: Binding) -> Dict[str, int]:
    """Count filled slots and list entries, for debug logging."""
    names = [key for key in binding if key.startswith("NAME_") and binding[key]]
    entries = sum(len(value) for value in binding.values() if isinstance(value, list))
    return {"filled_slots": len(names), "list_entries": entries}
