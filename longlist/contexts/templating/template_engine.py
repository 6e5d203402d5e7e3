"""
Deck Template Engine

Renders a fixed-slide presentation template against candidate records.

Pipeline (one RenderStage per step):
    LOADED      open the package and find the templated parts
    BOUND       truncate, paginate, and build one Binding per page
    EXPANDED    expand loops/conditionals and resolve scalars per part
    CLEANED     delete residual placeholders, inject values, validate XML
    SERIALIZED  write changed parts back and serialize the package

Pages map 1:1 onto templated parts in order. When there are more pages than
templated parts, the last templated part is copied into new slides; templated
parts past the last page are rendered with every slot empty.

This module exports:
- render_part: Render one part text against one Binding
- TemplateEngine / DeckRenderResult: In-memory rendering
- generate_deck / DeckGenerationResult: Orchestration with logging and output
"""

import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from dotenv import load_dotenv

from longlist.contexts.rendering.archive_store import PackageArchive
from longlist.contexts.rendering.logger import log_archive_loaded
from longlist.contexts.rendering.slide_package import duplicate_slide, list_slide_parts, slide_number
from longlist.contexts.rendering.validator import check_parts
from longlist.contexts.templating.candidate_data_structure import CandidateRecord
from longlist.contexts.templating.config_resolver import DeckConfig
from longlist.contexts.templating.exceptions import (
    BindingError,
    DeckGenerationError,
    NoContentError,
    SerializationError,
    TemplateLoadError,
)
from longlist.contexts.templating.logger import (
    _log_debug,
    _log_info,
    log_render_result,
    log_render_start,
    log_stage,
    setup_templating_logger,
)
from longlist.contexts.templating.placeholder_grammar import Binding, expand_part, has_placeholders
from longlist.contexts.templating.run_injector import (
    InjectionMode,
    InjectionOutcome,
    fill_value_slots,
    merge_split_runs,
)
from longlist.contexts.templating.slot_binder import (
    bind_pages,
    describe_binding,
    empty_binding,
    truncate_records,
)
from longlist.utils.event_logging import log_pipeline_event
from longlist.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
DECK_OUTPUT_PATH = Path(os.getenv("DECK_OUTPUT_PATH", "outs/decks"))

# Receives the serialized package on success
Sink = Callable[[bytes], None]


class RenderStage:
    """Enum-like class for engine pipeline stages"""

    LOADED = "loaded"
    BOUND = "bound"
    EXPANDED = "expanded"
    CLEANED = "cleaned"
    SERIALIZED = "serialized"


@dataclass
class RenderedPart:
    """
    One part after rendering.

    Attributes:
        name: Part name
        text: Final part text
        residuals_removed: Unresolved placeholder tokens deleted by cleanup
        outcomes: One InjectionOutcome per injected value
    """

    name: str
    text: str
    residuals_removed: int = 0
    outcomes: List[InjectionOutcome] = field(default_factory=list)

    @property
    def fallbacks(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.mode == InjectionMode.FALLBACK)


@dataclass
class DeckRenderResult:
    """
    Output of TemplateEngine.render().

    Attributes:
        data: Serialized package bytes
        pages: Number of pages (slides filled with records)
        records_rendered: Records placed into slots
        records_truncated: Records dropped by max_records
        injection_fallbacks: Multi-line values written without run formatting
        residuals_removed: Placeholder tokens deleted by cleanup across all parts
        parts_written: Parts rewritten or added, in write order
        added_parts: Slide parts created for pages beyond the template
    """

    data: bytes
    pages: int
    records_rendered: int
    records_truncated: int = 0
    injection_fallbacks: int = 0
    residuals_removed: int = 0
    parts_written: List[str] = field(default_factory=list)
    added_parts: List[str] = field(default_factory=list)


@dataclass
class DeckGenerationResult:
    """Result from generate_deck() orchestration function."""

    success: bool
    template_path: Optional[Path] = None
    output_path: Optional[Path] = None
    error: Optional[str] = None
    time_s: float = 0.0
    log_dir: Optional[Path] = None
    # Render summary
    pages: int = 0
    records_rendered: int = 0
    records_truncated: int = 0
    injection_fallbacks: int = 0
    residuals_removed: int = 0
    parts_written: List[str] = field(default_factory=list)
    size: int = 0


def render_part(text: str, binding: Binding, part_name: Optional[str] = None) -> RenderedPart:
    """
    Render one template part against one Binding.

    Joins runs that split a placeholder, expands the part (loops, conditionals,
    scalar value slots), deletes residual placeholders, then writes each value
    into its slot with run-preserving injection.

    Args:
        text: Template part text
        binding: Page Binding
        part_name: Part name for log messages

    Returns:
        RenderedPart
    """
    merged, _ = merge_split_runs(text, part_name=part_name)
    expanded = expand_part(merged, binding)
    xml, outcomes = fill_value_slots(expanded, part_name=part_name)
    if expanded.residuals_removed:
        _log_debug(f"{part_name or 'part'}: removed {expanded.residuals_removed} unresolved placeholders")
    return RenderedPart(
        name=part_name or "",
        text=xml,
        residuals_removed=expanded.residuals_removed,
        outcomes=outcomes,
    )


@dataclass
class _PartJob:
    """A part to render: its source text, its Binding, and whether it is a new slide."""

    name: str
    source: str
    binding: Binding
    page: Optional[int] = None
    is_new: bool = False


class TemplateEngine:
    """
    Renders candidate records into a presentation package.

    Each engine owns its archive; render() may be called once.

    Example:
        engine = TemplateEngine.from_path(Path("template.pptx"), config)
        result = engine.render(records)
        Path("deck.pptx").write_bytes(result.data)
    """

    def __init__(self, archive: PackageArchive, config: Optional[DeckConfig] = None):
        self.archive = archive
        self.config = config or DeckConfig()
        self.template_parts = self._find_template_parts()
        # Original text of every templated part, before any rewrite
        self.sources: Dict[str, str] = {name: archive.read_text(name) for name in self.template_parts}
        log_archive_loaded(archive.source, len(archive.names()), len(list_slide_parts(archive)))
        self.stage = RenderStage.LOADED
        log_stage(self.stage, f"{len(self.template_parts)} templated parts: {self.template_parts}")

    @classmethod
    def from_path(cls, path: Path, config: Optional[DeckConfig] = None) -> "TemplateEngine":
        return cls(PackageArchive.from_path(path), config)

    @classmethod
    def from_bytes(cls, data: bytes, config: Optional[DeckConfig] = None) -> "TemplateEngine":
        return cls(PackageArchive.from_bytes(data), config)

    def _find_template_parts(self) -> List[str]:
        """
        Templated parts in page order.

        Uses config.template_parts when set; otherwise every slide part containing
        a placeholder token, ordered by slide number.

        Raises:
            TemplateLoadError: If a configured part is missing or no part is templated
        """
        if self.config.template_parts:
            for name in self.config.template_parts:
                if not self.archive.has(name):
                    raise TemplateLoadError("Configured template part not found", part_name=name)
            return list(self.config.template_parts)

        parts = [
            name
            for name in list_slide_parts(self.archive)
            if has_placeholders(merge_split_runs(self.archive.read_text(name))[0])
        ]
        if not parts:
            raise TemplateLoadError(f"No slide in {self.archive.source} contains placeholders")
        return parts

    def _plan(self, bindings: List[Binding]) -> List[_PartJob]:
        jobs = []
        last = self.template_parts[-1]

        for page, binding in enumerate(bindings):
            if page < len(self.template_parts):
                name = self.template_parts[page]
                jobs.append(_PartJob(name, self.sources[name], binding, page=page))
            else:
                jobs.append(
                    _PartJob(f"{last}#page{page + 1}", self.sources[last], binding, page=page, is_new=True)
                )

        for name in self.template_parts[len(bindings) :]:
            jobs.append(_PartJob(name, self.sources[name], empty_binding(self.config.page_capacity)))

        if any(job.is_new for job in jobs):
            try:
                slide_number(last)
            except ValueError:
                raise BindingError(
                    f"{len(bindings)} pages needed but only {len(self.template_parts)} templated "
                    f"parts, and {last} is not a slide that can be copied"
                )
        return jobs

    def _render_jobs(self, jobs: List[_PartJob]) -> List[RenderedPart]:
        if self.config.workers <= 1 or len(jobs) <= 1:
            return [render_part(job.source, job.binding, job.name) for job in jobs]

        rendered: List[Optional[RenderedPart]] = [None] * len(jobs)
        with ThreadPoolExecutor(max_workers=min(self.config.workers, len(jobs))) as executor:
            futures = {
                executor.submit(render_part, job.source, job.binding, job.name): index
                for index, job in enumerate(jobs)
            }
            for future in as_completed(futures):
                rendered[futures[future]] = future.result()
        return rendered

    def render(self, records: Sequence[CandidateRecord]) -> DeckRenderResult:
        """
        Render records into the package and serialize it.

        Args:
            records: Candidate records in presentation order

        Returns:
            DeckRenderResult with the output bytes and summary counts

        Raises:
            NoContentError: If there are zero records (nothing is serialized)
            BindingError: If pages cannot be mapped onto the template
            PartValidationError: If a rendered part is not well-formed XML
            SerializationError: If the package cannot be written
        """
        kept = truncate_records(records, self.config.max_records)
        truncated = len(records) - len(kept)
        if truncated:
            _log_info(f"Rendering the first {len(kept)} of {len(records)} records (max_records)")
        if not kept:
            raise NoContentError("No candidate records to render")

        bindings = bind_pages(kept, self.config)
        self.stage = RenderStage.BOUND
        log_stage(self.stage, f"{len(kept)} records on {len(bindings)} pages")
        for page, binding in enumerate(bindings, start=1):
            _log_debug(f"Page {page}: {describe_binding(binding)}")

        jobs = self._plan(bindings)
        rendered = self._render_jobs(jobs)
        self.stage = RenderStage.EXPANDED
        log_stage(self.stage, f"{len(rendered)} parts")

        checked = check_parts(
            (job.name, part.text) for job, part in zip(jobs, rendered) if part.text != job.source
        )
        self.stage = RenderStage.CLEANED
        log_stage(self.stage, f"{checked} changed parts validated")

        added_parts = []
        previous = None
        for job, part in zip(jobs, rendered):
            if job.is_new:
                previous = duplicate_slide(
                    self.archive, self.template_parts[-1], after_part=previous, text=part.text
                )
                added_parts.append(previous)
                continue
            if job.page is not None:
                previous = job.name
            if part.text != job.source:
                self.archive.write_text(job.name, part.text)

        data = self.archive.to_bytes()
        self.stage = RenderStage.SERIALIZED
        log_stage(self.stage, f"{len(data)} bytes")

        return DeckRenderResult(
            data=data,
            pages=len(bindings),
            records_rendered=len(kept),
            records_truncated=truncated,
            injection_fallbacks=sum(part.fallbacks for part in rendered),
            residuals_removed=sum(part.residuals_removed for part in rendered),
            parts_written=self.archive.modified_parts,
            added_parts=added_parts,
        )


def generate_deck(
    template_path: Path,
    records: Sequence[CandidateRecord],
    output_path: Optional[Path] = None,
    sink: Optional[Sink] = None,
    config: Optional[DeckConfig] = None,
    deck_name: Optional[str] = None,
) -> DeckGenerationResult:
    """
    Render a deck with logging, timing, and pipeline event tracking.

    Output is delivered only on success: to ``sink`` when given, otherwise to
    ``output_path`` (default: DECK_OUTPUT_PATH / config.output_filename).

    Args:
        template_path: Presentation template with placeholders
        records: Candidate records in presentation order
        output_path: Destination file (ignored when sink is given)
        sink: Callable receiving the serialized bytes
        config: DeckConfig (defaults when None)
        deck_name: Identifier for logs and events (default: output file stem)

    Returns:
        DeckGenerationResult with success status, summary counts, and timing
    """
    config = config or DeckConfig()
    if sink is None and output_path is None:
        output_path = DECK_OUTPUT_PATH / config.output_filename
    deck_name = deck_name or Path(output_path or config.output_filename).stem

    start_time = time.time()

    # Setup logging
    log_dir = LOGS_PATH / f"render_{now()}"
    log_file = setup_templating_logger(log_dir, template_path=template_path)
    log_render_start(deck_name, template_path, len(records), log_file)

    result = DeckGenerationResult(success=False, template_path=template_path, log_dir=log_dir)
    try:
        engine = TemplateEngine.from_path(template_path, config)
        render_result = engine.render(records)

        if sink is not None:
            try:
                sink(render_result.data)
            except Exception as e:
                raise SerializationError("Output sink failed", original_error=e)
        else:
            engine.archive.save(output_path, data=render_result.data)
            result.output_path = output_path

        result.success = True
        result.pages = render_result.pages
        result.records_rendered = render_result.records_rendered
        result.records_truncated = render_result.records_truncated
        result.injection_fallbacks = render_result.injection_fallbacks
        result.residuals_removed = render_result.residuals_removed
        result.parts_written = render_result.parts_written
        result.size = len(render_result.data)
    except DeckGenerationError as e:
        result.error = str(e)

    result.time_s = time.time() - start_time

    if result.success:
        log_pipeline_event(
            event_type="render_completed",
            deck_name=deck_name,
            source="templating",
            time_s=result.time_s,
            output_path=str(result.output_path) if result.output_path else None,
            pages=result.pages,
            records_rendered=result.records_rendered,
            records_truncated=result.records_truncated,
            injection_fallbacks=result.injection_fallbacks,
        )
    else:
        log_pipeline_event(
            event_type="render_failed",
            deck_name=deck_name,
            source="templating",
            time_s=result.time_s,
            error=result.error,
        )

    log_render_result(deck_name, result, result.time_s)
    return result
