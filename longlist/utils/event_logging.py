"""
Pipeline event logging utilities for LONGLIST (Tier 2 logging).

Provides uniform interfaces for logging pipeline events to deck_pipeline_events.log.
This is for cross-context coordination via JSON Lines event log.

For detailed within-context logging (Tier 1), use longlist.utils.logger instead.

Usage:
    from longlist.utils.event_logging import log_pipeline_event

    log_pipeline_event(
        event_type="render_completed",
        deck_name="Candidate_Summary_Generated",
        source="templating",
        pages=2,
        records_truncated=0,
    )
"""

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from longlist.utils.timestamp import now_exact

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
PIPELINE_EVENTS_FILE = Path(
    os.getenv("PIPELINE_EVENTS_FILE", str(LOGS_PATH / "deck_pipeline_events.log"))
)


def log_pipeline_event(
    event_type: str,
    deck_name: str,
    source: str,
    events_file: Optional[Path] = None,
    **extra_fields,
) -> None:
    """
    Log an event to the master pipeline event log.

    Events are appended in JSON Lines format (one JSON object per line). This
    enables streaming processing and easy filtering by event_type, deck_name,
    or source.

    Args:
        event_type: Type of event (e.g., "render_completed", "render_failed")
        deck_name: Output deck identifier
        source: Event source (e.g., "templating", "intake", "cli")
        events_file: Override for the event log location
        **extra_fields: Additional event-specific fields
    """
    events_file = events_file or PIPELINE_EVENTS_FILE
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "deck_name": deck_name,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, default=str) + "\n")


def get_recent_events(
    n: int = 10,
    deck_name: Optional[str] = None,
    event_type: Optional[str] = None,
    events_file: Optional[Path] = None,
) -> list[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        deck_name: Filter to only events for this deck (optional)
        event_type: Filter to only events of this type (optional)
        events_file: Override for the event log location

    Returns:
        List of event dicts (most recent last)
    """
    events_file = events_file or PIPELINE_EVENTS_FILE
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if deck_name:
        events = [e for e in events if e.get("deck_name") == deck_name]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
