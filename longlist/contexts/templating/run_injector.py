"""
Run-Preserving Text Injector

Writes scalar values into template markup without losing run formatting.

A single-line value replaces its placeholder in place. A multi-line value cannot
simply go into one text element (renderers ignore hard line terminators there), so
the enclosing run is rebuilt: one run per line, each carrying a verbatim copy of
the original run properties, with a break element between consecutive lines.
Paragraph properties and sibling runs are never touched.

PowerPoint and Word often split a placeholder over several runs (at a spell-check
or edit boundary). merge_split_runs joins such runs back into one before the
part is scanned.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from longlist.contexts.templating.exceptions import InjectionError
from longlist.contexts.templating.logger import _log_debug, _log_warning
from longlist.contexts.templating.placeholder_grammar import ExpandedPart
from longlist.contexts.templating.placeholder_patterns import (
    RUN_DIALECTS,
    TOKEN_PATTERN,
    RunMarkup,
    scalar_token,
)
from longlist.utils.escaping import (
    escape_literal_for_match,
    escape_markup_text,
    has_line_break,
    split_lines,
)


class InjectionMode:
    """Enum-like class for how a value was written"""

    PLAIN = "plain"
    RUNS = "runs"
    FALLBACK = "fallback"
    MISSING = "missing"


@dataclass
class InjectionOutcome:
    """
    Record of one scalar injection.

    Attributes:
        token: Placeholder that was replaced (e.g., "{{NAME_1}}"; the raw search text
            when no label was given)
        mode: InjectionMode value
        occurrences: Number of placeholder occurrences replaced
        line_count: Number of lines in the value
        breaks_emitted: Number of break elements written (line_count - 1 per run rewrite)
        dialect: Run dialect used for run surgery (None for plain/fallback)
    """

    token: str
    mode: str
    occurrences: int = 0
    line_count: int = 1
    breaks_emitted: int = 0
    dialect: Optional[str] = None


@dataclass(frozen=True)
class RunLocation:
    """
    Position of the run enclosing a placeholder, and the pieces needed to rebuild it.

    Offsets index into the part text. ``props`` is the run-properties element
    exactly as written in the template (empty when the run has none).
    """

    dialect: RunMarkup
    run_start: int
    run_end: int
    run_open_tag: str
    props: str
    head: str
    text_open_tag: str
    text_before: str
    text_after: str
    tail: str


def _last_match(pattern: str, text: str, flags: int = 0) -> Optional[re.Match]:
    match = None
    for match in re.finditer(pattern, text, flags):
        pass
    return match


def locate_run(xml: str, token_start: int, token_end: int, dialect: RunMarkup) -> RunLocation:
    """
    Find the smallest run of ``dialect`` that encloses the token at the given offsets.

    Args:
        xml: Part text
        token_start: Offset of the placeholder
        token_end: Offset after the placeholder
        dialect: Run vocabulary to look for

    Returns:
        RunLocation describing the run

    Raises:
        InjectionError: If the token is not inside a run's text element
    """
    run_close_tag = dialect.close_tag(dialect.run_tag)
    text_close_tag = dialect.close_tag(dialect.text_tag)
    run_open_pattern = dialect.open_pattern(dialect.run_tag)

    run_open = _last_match(run_open_pattern, xml[:token_start])
    if run_open is None or run_close_tag in xml[run_open.end() : token_start]:
        raise InjectionError(f"No enclosing {dialect.run_tag} element")

    run_close_start = xml.find(run_close_tag, token_end)
    if run_close_start == -1 or re.search(run_open_pattern, xml[token_end:run_close_start]):
        raise InjectionError(f"Unterminated {dialect.run_tag} element")

    run_body_start = run_open.end()
    text_open = _last_match(
        dialect.open_pattern(dialect.text_tag), xml[run_body_start:token_start]
    )
    if text_open is None:
        raise InjectionError(f"No enclosing {dialect.text_tag} element")

    text_open_start = run_body_start + text_open.start()
    text_open_end = run_body_start + text_open.end()
    if text_close_tag in xml[text_open_end:token_start]:
        raise InjectionError(f"Placeholder sits outside {dialect.text_tag}")

    text_close_start = xml.find(text_close_tag, token_end, run_close_start)
    if text_close_start == -1:
        raise InjectionError(f"Unterminated {dialect.text_tag} element")
    text_close_end = text_close_start + len(text_close_tag)

    run_prefix = xml[run_body_start:text_open_start]
    props_match = re.search(dialect.props_pattern(), run_prefix, re.DOTALL)
    if props_match:
        props = props_match.group(0)
        head = run_prefix[: props_match.start()] + run_prefix[props_match.end() :]
    else:
        props = ""
        head = run_prefix

    return RunLocation(
        dialect=dialect,
        run_start=run_open.start(),
        run_end=run_close_start + len(run_close_tag),
        run_open_tag=run_open.group(0),
        props=props,
        head=head,
        text_open_tag=text_open.group(0),
        text_before=xml[text_open_end:token_start],
        text_after=xml[token_end:text_close_start],
        tail=xml[text_close_end:run_close_start],
    )


def build_line_runs(location: RunLocation, lines: List[str]) -> str:
    """
    Generate one run per line, separated by break markup.

    Each run is ``<run>P<text>line</text></run>`` where P is the original run
    properties. Template text before/after the placeholder stays on the first/last
    line.

    Args:
        location: Enclosing run of the placeholder
        lines: Raw (unescaped) lines of the value

    Returns:
        Replacement markup for the whole run
    """
    dialect = location.dialect
    run_close = dialect.close_tag(dialect.run_tag)
    text_close = dialect.close_tag(dialect.text_tag)
    last = len(lines) - 1

    pieces = []
    for index, line in enumerate(lines):
        text = escape_markup_text(line)
        if index == 0:
            text = location.text_before + text
        if index == last:
            text = text + location.text_after

        pieces.append(
            location.run_open_tag
            + location.props
            + (location.head if index == 0 else "")
            + location.text_open_tag
            + text
            + text_close
            + (location.tail if index == last else "")
            + run_close
        )
        if index < last:
            pieces.append(dialect.render_break(location.props))

    return "".join(pieces)


def _inject_runs(
    xml: str, match: re.Match, lines: List[str], label: Optional[str] = None
) -> Tuple[str, RunLocation, int]:
    """
    Rewrite the run enclosing ``match``.

    Returns the new text, the located run, and the offset where the template text
    following the placeholder resumes. Raises InjectionError when no dialect finds
    an enclosing run.
    """
    errors = []
    for dialect in RUN_DIALECTS:
        try:
            location = locate_run(xml, match.start(), match.end(), dialect)
        except InjectionError as e:
            errors.append(e.message)
            continue
        replacement = build_line_runs(location, lines)
        # Template text after the placeholder sits at the end of the last generated run
        trailing = (
            location.text_after
            + dialect.close_tag(dialect.text_tag)
            + location.tail
            + dialect.close_tag(dialect.run_tag)
        )
        resume_at = location.run_start + len(replacement) - len(trailing)
        return xml[: location.run_start] + replacement + xml[location.run_end :], location, resume_at

    snippet = xml[max(0, match.start() - 120) : match.end() + 120]
    raise InjectionError("; ".join(errors), token=label or match.group(0), xml_snippet=snippet)


def inject_scalar(
    xml: str,
    token: str,
    value: str,
    part_name: Optional[str] = None,
    label: Optional[str] = None,
) -> Tuple[str, InjectionOutcome]:
    """
    Replace every occurrence of a literal placeholder with a value.

    Values without a line break use plain text replacement. Multi-line values go
    through run surgery; when the surrounding markup has no recognizable run, that
    occurrence falls back to plain replacement (formatting of the extra lines is
    then up to the renderer) and a warning is logged.

    Args:
        xml: Part text
        token: Literal placeholder text (e.g., "{{NAME_1}}" or a value slot)
        value: Raw (unescaped) value
        part_name: Part name for log messages
        label: Placeholder reported in the outcome and in warnings (defaults to token)

    Returns:
        (new_xml, InjectionOutcome)
    """
    pattern = re.compile(escape_literal_for_match(token))
    outcome = InjectionOutcome(token=label or token, mode=InjectionMode.MISSING)

    if not has_line_break(value):
        escaped = escape_markup_text(value)
        xml, count = pattern.subn(lambda _: escaped, xml)
        if count:
            outcome.mode = InjectionMode.PLAIN
            outcome.occurrences = count
        return xml, outcome

    lines = split_lines(value)
    outcome.line_count = len(lines)

    # Resume searching after each rewrite so a value quoting its own token is left alone
    match = pattern.search(xml)
    while match:
        try:
            xml, location, resume_at = _inject_runs(xml, match, lines, label=outcome.token)
            outcome.breaks_emitted += len(lines) - 1
            outcome.dialect = location.dialect.name
            if outcome.mode != InjectionMode.FALLBACK:
                outcome.mode = InjectionMode.RUNS
        except InjectionError as e:
            where = f" in {part_name}" if part_name else ""
            _log_warning(f"Formatting not preserved for {outcome.token}{where}: {e.message}")
            escaped = escape_markup_text(value)
            xml = xml[: match.start()] + escaped + xml[match.end() :]
            resume_at = match.start() + len(escaped)
            outcome.mode = InjectionMode.FALLBACK
        outcome.occurrences += 1
        match = pattern.search(xml, resume_at)

    if outcome.mode == InjectionMode.RUNS:
        _log_debug(
            f"Split value into {outcome.line_count} {outcome.dialect} runs "
            f"({outcome.breaks_emitted} breaks)"
        )
    return xml, outcome


def fill_value_slots(
    expanded: ExpandedPart, part_name: Optional[str] = None
) -> Tuple[str, List[InjectionOutcome]]:
    """
    Write every resolved value of an expanded part into its slot.

    Args:
        expanded: Output of expand_part()
        part_name: Part name for log messages

    Returns:
        (final_xml, outcomes in slot order)
    """
    xml = expanded.text
    outcomes = []
    for index, value in enumerate(expanded.values):
        key = expanded.key(index)
        label = scalar_token(key) if key else None
        xml, outcome = inject_scalar(xml, expanded.slot(index), value, part_name=part_name, label=label)
        outcomes.append(outcome)
    return xml, outcomes


def _text_run_pattern(dialect: RunMarkup) -> re.Pattern:
    """Run holding only optional properties and one text element."""
    run_tag = re.escape(dialect.run_tag)
    props_tag = re.escape(dialect.props_tag)
    text_tag = re.escape(dialect.text_tag)
    # Property children may not reach past the end of the run
    props = (
        rf"<{props_tag}(?:\s[^>]*)?/>"
        rf"|{dialect.open_pattern(dialect.props_tag)}(?:(?!</{run_tag}>).)*?</{props_tag}>"
    )
    return re.compile(
        rf"{dialect.open_pattern(dialect.run_tag)}\s*(?:{props})?\s*"
        rf"{dialect.open_pattern(dialect.text_tag)}(?P<text>[^<]*)</{text_tag}>\s*</{run_tag}>",
        re.DOTALL,
    )


def _adjacent_groups(xml: str, runs: List[re.Match]) -> List[List[re.Match]]:
    """Group runs separated by nothing but whitespace."""
    groups: List[List[re.Match]] = []
    for run in runs:
        if groups and not xml[groups[-1][-1].end() : run.start()].strip():
            groups[-1].append(run)
        else:
            groups.append([run])
    return groups


def _spanning_ranges(texts: List[str]) -> List[Tuple[int, int]]:
    """
    Index ranges of runs that placeholders span.

    Returns (first, last) run indices, merged where they overlap, for every token
    of the joined text that starts and ends in different runs.
    """
    owners = [index for index, text in enumerate(texts) for _ in text]
    ranges: List[Tuple[int, int]] = []
    for match in TOKEN_PATTERN.finditer("".join(texts)):
        first, last = owners[match.start()], owners[match.end() - 1]
        if first == last:
            continue
        if ranges and first <= ranges[-1][1]:
            ranges[-1] = (ranges[-1][0], max(last, ranges[-1][1]))
        else:
            ranges.append((first, last))
    return ranges


def merge_split_runs(xml: str, part_name: Optional[str] = None) -> Tuple[str, int]:
    """
    Join adjacent runs whose text together forms a placeholder.

    Only runs made of properties plus one text element are considered, and only
    when nothing but whitespace separates them. The merged run keeps the first
    run's properties and text element; the text of the following runs is
    appended to it and those runs are removed.

    Args:
        xml: Part text
        part_name: Part name for log messages

    Returns:
        (new_xml, number_of_runs_removed)

    Example:
        >>> merge_split_runs("<a:r><a:t>{{NAME_</a:t></a:r><a:r><a:t>1}}</a:t></a:r>")
        ('<a:r><a:t>{{NAME_1}}</a:t></a:r>', 1)
    """
    removed = 0
    for dialect in RUN_DIALECTS:
        runs = list(_text_run_pattern(dialect).finditer(xml))
        edits = []
        for group in _adjacent_groups(xml, runs):
            if len(group) < 2:
                continue
            texts = [run.group("text") for run in group]
            for first, last in _spanning_ranges(texts):
                head = group[first]
                joined = "".join(texts[first : last + 1])
                merged = xml[head.start() : head.start("text")] + joined + xml[head.end("text") : head.end()]
                edits.append((head.start(), group[last].end(), merged))
                removed += last - first

        for start, end, merged in reversed(edits):
            xml = xml[:start] + merged + xml[end:]

    if removed:
        where = f" in {part_name}" if part_name else ""
        _log_debug(f"Merged {removed} runs that split placeholders{where}")
    return xml, removed
