"""
Candidate intake pipeline.

Turns the text chunks of a CV bundle into CandidateRecords through an injected
extractor. The splitter and extractor are supplied by the caller on every run;
this module never holds client state of its own.

A chunk whose extraction fails is recorded and skipped, so one unreadable CV does
not abort the batch.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from longlist.contexts.intake.logger import (
    _log_debug,
    _log_info,
    _log_warning,
    log_extraction_summary,
    setup_intake_logger,
)
from longlist.contexts.templating.candidate_data_structure import CandidateRecord
from longlist.contexts.templating.defaults import EXCLUDED_ROLE_KEYWORD
from longlist.utils.event_logging import log_pipeline_event


class ExtractionError(Exception):
    """Raised by a RecordExtractor when a CV's text cannot be turned into a record."""

    pass


# Yields one text blob per CV, in bundle order
PdfSplitter = Callable[[Any], Iterable[str]]

# Maps one CV's text to a record (or a mapping accepted by CandidateRecord.from_dict)
RecordExtractor = Callable[[str], Union[CandidateRecord, Mapping[str, Any]]]


@dataclass(frozen=True)
class ExtractionFailure:
    """
    A CV that could not be extracted.

    Attributes:
        index: 1-based position of the CV in the bundle
        error: Human-readable reason
    """

    index: int
    error: str


@dataclass
class ExtractionReport:
    """Records extracted from a bundle and the CVs that failed."""

    records: List[CandidateRecord] = field(default_factory=list)
    failures: List[ExtractionFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records) + len(self.failures)

    @property
    def all_failed(self) -> bool:
        """True when there was at least one CV and none was extracted."""
        return self.total > 0 and not self.records


def collect_records(
    chunks: Iterable[str],
    extractor: RecordExtractor,
    excluded_role: str = EXCLUDED_ROLE_KEYWORD,
) -> ExtractionReport:
    """
    Extract one record per text chunk.

    Work history entries whose job title contains ``excluded_role`` are dropped
    (case-insensitive). ExtractionError from the extractor is recorded as a
    failure for that chunk; any other exception propagates.

    Args:
        chunks: CV texts in bundle order
        extractor: RecordExtractor
        excluded_role: Job title keyword to filter out (empty string keeps all)

    Returns:
        ExtractionReport
    """
    report = ExtractionReport()

    for index, text in enumerate(chunks, start=1):
        try:
            extracted = extractor(text)
        except ExtractionError as e:
            _log_warning(f"Failed to process CV #{index}: {e}")
            error = str(e) or "Unknown extraction error."
            report.failures.append(ExtractionFailure(index=index, error=error))
            continue

        if isinstance(extracted, CandidateRecord):
            record = extracted
        else:
            record = CandidateRecord.from_dict(extracted)
        if excluded_role:
            filtered = record.without_roles(excluded_role)
            dropped = len(record.work_history) - len(filtered.work_history)
            if dropped:
                _log_debug(f"CV #{index}: dropped {dropped} '{excluded_role}' roles")
            record = filtered

        _log_debug(f"CV #{index}: extracted {record.name or '(unnamed)'}")
        report.records.append(record)

    log_extraction_summary(report)
    return report


def run_intake(
    source: Any,
    splitter: PdfSplitter,
    extractor: RecordExtractor,
    bundle_name: str = "longlist",
    log_dir: Optional[Path] = None,
) -> ExtractionReport:
    """
    Split a CV bundle and extract every CV, logging a pipeline event.

    Args:
        source: Whatever the splitter accepts (e.g., a PDF path)
        splitter: PdfSplitter
        extractor: RecordExtractor
        bundle_name: Identifier for the pipeline event
        log_dir: Directory for an intake log file (current handlers are kept when None)

    Returns:
        ExtractionReport
    """
    if log_dir is not None:
        setup_intake_logger(log_dir, source=str(source))
    _log_info(f"Starting intake of {bundle_name}")

    report = collect_records(splitter(source), extractor)

    log_pipeline_event(
        event_type="intake_failed" if report.all_failed else "intake_completed",
        deck_name=bundle_name,
        source="intake",
        total=report.total,
        extracted=len(report.records),
        failed=[failure.index for failure in report.failures],
    )
    return report
