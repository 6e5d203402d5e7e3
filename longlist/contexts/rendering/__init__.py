"""
Rendering Context

Responsibilities:
- Reads and writes presentation packages (zip containers of XML parts)
- Keeps untouched parts byte-identical and preserves entry order
- Adds slides to a package when a deck needs more pages than the template has
- Validates that rendered parts are still well-formed XML

Owns: Package I/O, slide registration, part validation
Never: Interprets placeholder markup or candidate data
"""
