"""
Intake Context

Responsibilities:
- Runs each CV text of a bundle through an injected extractor
- Filters roles that never appear on the longlist (board memberships)
- Reports per-CV extraction failures without aborting the batch

Owns: Candidate record collection
Never: Splits PDFs or calls extraction models itself (both are injected)
"""
