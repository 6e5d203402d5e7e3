"""
LONGLIST - Candidate longlist deck generator

A mail-merge engine for office documents: fills a fixed-slide presentation
template with structured candidate records while preserving the template's
run-level formatting.

Architecture:
- Intake Context: Candidate record collection from extracted CV text
- Templating Context: Placeholder grammar, slot binding, and deck orchestration
- Rendering Context: Zip package storage, slide registration, and part validation
"""

__version__ = "0.1.0"
