"""
Default values for LONGLIST deck generation.

Provides shared defaults used by:
- config_resolver.py (base layer under presets and overrides)
- slot_binder.py (slot key names)
- template_engine.py (output naming, part discovery)

The slot capacity and record ceiling match the stock candidate template: four
candidate rows per slide, five candidate slides.
"""

from typing import Any, Dict

DEFAULT_DECK_CONFIG: Dict[str, Any] = {
    "page_capacity": 4,
    "work_history_cap": 5,
    "education_cap": None,
    "max_records": 20,
    "template_parts": None,
    "workers": 1,
    "output_filename": "Candidate_Summary_Generated.pptx",
}

# Job titles containing this text are dropped from work history at intake
EXCLUDED_ROLE_KEYWORD = "board member"

# Slide parts of a presentation package, numbered from 1
SLIDE_PART_PATTERN = r"^ppt/slides/slide(\d+)\.xml$"

# Per-slot placeholder keys; {slot} is the 1-based slot index on the page
SLOT_KEYS = {
    "name": "NAME_{slot}",
    "work_history": "WORK_HISTORY_{slot}",
    "work_history_text": "WORK_HISTORY_TEXT_{slot}",
    "education": "EDUCATION_{slot}",
    "education_text": "EDUCATION_TEXT_{slot}",
}

# Item field keys inside loop blocks
WORK_HISTORY_ITEM_KEYS = ("JOB_TITLE", "COMPANY", "DATES")
EDUCATION_ITEM_KEYS = ("INSTITUTION", "DEGREE", "DATES")
