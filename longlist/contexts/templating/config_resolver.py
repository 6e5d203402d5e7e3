"""
Deck Configuration Resolution

Builds a DeckConfig from the built-in defaults, named presets, and explicit
overrides. Presets are composable: later presets override earlier ones, and
overrides win over every preset.

Examples:
    # Built-in defaults (4 slots per slide, 20 records)
    >>> config = resolve_deck_config()

    # Six slots per slide with short histories, capped at 30 records
    >>> config = resolve_deck_config(["layout_compact", "history_short"], {"max_records": 30})
"""

import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from longlist.contexts.templating.defaults import DEFAULT_DECK_CONFIG

load_dotenv()
DECK_CONFIG_PATH = Path(
    os.getenv("DECK_CONFIG_PATH", str(Path(__file__).resolve().parents[3] / "configs" / "deck_presets.yaml"))
)


@dataclass(frozen=True)
class DeckConfig:
    """
    Configuration of one deck render.

    Attributes:
        page_capacity: Slots per page/slide (K)
        work_history_cap: Maximum work history entries bound per record
        education_cap: Maximum education entries per record (None = unbounded)
        max_records: Records beyond this ceiling are not rendered
        template_parts: Explicit templated part names, in page order (None = auto-detect)
        workers: Threads used to render parts (1 = sequential)
        output_filename: Suggested output filename
    """

    page_capacity: int = DEFAULT_DECK_CONFIG["page_capacity"]
    work_history_cap: int = DEFAULT_DECK_CONFIG["work_history_cap"]
    education_cap: Optional[int] = DEFAULT_DECK_CONFIG["education_cap"]
    max_records: int = DEFAULT_DECK_CONFIG["max_records"]
    template_parts: Optional[tuple] = DEFAULT_DECK_CONFIG["template_parts"]
    workers: int = DEFAULT_DECK_CONFIG["workers"]
    output_filename: str = DEFAULT_DECK_CONFIG["output_filename"]

    def __post_init__(self):
        if self.page_capacity < 1:
            raise ValueError(f"page_capacity must be at least 1, got {self.page_capacity}")
        if self.work_history_cap < 0:
            raise ValueError(f"work_history_cap must be non-negative, got {self.work_history_cap}")
        if self.education_cap is not None and self.education_cap < 0:
            raise ValueError(f"education_cap must be non-negative, got {self.education_cap}")
        if self.max_records < 0:
            raise ValueError(f"max_records must be non-negative, got {self.max_records}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.template_parts is not None:
            # Frozen dataclass: normalize lists from YAML into a tuple
            object.__setattr__(self, "template_parts", tuple(self.template_parts))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_deck_presets(config_path: Path = None) -> Dict[str, Any]:
    """
    Load deck_presets.yaml and flatten it to a single-level dict.

    Collapses nested structure: layout.compact -> layout_compact

    Args:
        config_path: Optional path to config file (defaults to DECK_CONFIG_PATH)

    Returns:
        Flattened dict mapping preset names to configs
        Example: {"layout_compact": {...}, "history_short": {...}}
    """
    if config_path is None:
        config_path = DECK_CONFIG_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    flattened = {}
    for category, presets in nested.items():
        for name, config in presets.items():
            flattened[f"{category}_{name}"] = config

    return flattened


def resolve_deck_config(
    preset_names: List[str] = None,
    overrides: Dict[str, Any] = None,
    config_path: Path = None,
) -> DeckConfig:
    """
    Merge defaults, presets, and overrides into a validated DeckConfig.

    Args:
        preset_names: Preset names to apply in order (e.g., ["layout_compact"])
        overrides: Explicit values applied last (None values are ignored)
        config_path: Optional path to deck_presets.yaml (only read when presets are given)

    Returns:
        DeckConfig

    Raises:
        ValueError: If a preset is unknown, a key is not a DeckConfig field, or a
            value is out of range
    """
    layers = [OmegaConf.create(dict(DEFAULT_DECK_CONFIG))]

    if preset_names:
        presets = load_deck_presets(config_path)
        for preset_name in preset_names:
            if preset_name not in presets:
                available = list(presets.keys())
                raise ValueError(f"Preset '{preset_name}' not found. Available presets: {available}")
            layers.append(OmegaConf.create(presets[preset_name]))

    if overrides:
        layers.append(
            OmegaConf.create({key: value for key, value in overrides.items() if value is not None})
        )

    merged = OmegaConf.to_container(OmegaConf.merge(*layers), resolve=True)

    unknown = set(merged) - set(DEFAULT_DECK_CONFIG)
    if unknown:
        raise ValueError(f"Unknown deck config keys: {sorted(unknown)}")

    return DeckConfig(**merged)
