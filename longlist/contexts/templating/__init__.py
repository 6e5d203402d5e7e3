"""
Templating Context

Responsibilities:
- Defines the placeholder grammar used in presentation templates
- Binds candidate records to page slots (pagination, caps, empty slots)
- Expands loops and conditionals, cleans residual placeholders
- Injects values into runs without losing their formatting
- Orchestrates deck generation (render_part, TemplateEngine, generate_deck)

Owns: Placeholder grammar, slot binding, run-preserving injection, deck orchestration
Never: Extracts candidate data from CVs or reads the package container directly
"""
