"""
Markdown Summary

Formats candidate records as markdown for the manual output path, where the
longlist is copied into a deck by hand instead of rendered from a template.
"""

from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from longlist.contexts.templating.candidate_data_structure import CandidateRecord
from longlist.contexts.templating.defaults import DEFAULT_DECK_CONFIG

TEMPLATES_PATH = Path(__file__).parent / "templates"
SUMMARY_TEMPLATE = "candidate_summary.md.jinja"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_PATH)),
    # Catches silent failures
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


def format_candidates_markdown(
    records: Sequence[CandidateRecord],
    failures: Optional[Sequence] = None,
    work_history_cap: Optional[int] = DEFAULT_DECK_CONFIG["work_history_cap"],
    title: str = "Candidate Longlist",
) -> str:
    """
    Format candidate records as a markdown document.

    Each candidate gets a numbered ## header (name upper-cased, as on the slides)
    followed by work history and education lists. Extraction failures, when
    given, are listed at the end.

    Args:
        records: Candidate records in presentation order
        failures: ExtractionFailure entries (index, error) to report
        work_history_cap: Maximum jobs listed per candidate (None = all)
        title: Document heading

    Returns:
        Markdown text
    """
    template = _env.get_template(SUMMARY_TEMPLATE)
    return template.render(
        title=title,
        candidates=list(records),
        failures=list(failures or []),
        work_history_cap=work_history_cap,
    )
