"""
Configuration management for Molecular Assay Explorer.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from loguru import logger

from utils.settings import get_settings

# Load environment variables
load_dotenv()


@dataclass(frozen=True)
class ProteinTarget:
    """One entry of the protein selector."""

    pdb_id: str
    name: str

    @property
    def label(self) -> str:
        return f"{self.pdb_id} - {self.name}"


DEFAULT_TARGETS: List[ProteinTarget] = [
    ProteinTarget("6LU7", "SARS-CoV-2 Main Protease"),
    ProteinTarget("1HSG", "HIV-1 Protease"),
    ProteinTarget("1M17", "EGFR Kinase Domain"),
]


@dataclass
class VisualizationConfig:
    """Configuration for visualization settings."""

    default_style: str = "cartoon"
    styles: List[str] = field(default_factory=lambda: ["cartoon", "stick", "sphere", "line"])
    background_color: str = "white"
    surface_opacity: float = 0.6
    ligand_color: str = "yellow"
    viewer_width: int = 640
    viewer_height: int = 500
    chart_height: int = 300


@dataclass
class DataConfig:
    """Where assay tables and structures come from."""

    # Local directory or http(s) URL; files are named <PROTEIN>_assay.csv
    assay_base: str = "data"
    pdb_base_url: str = "https://files.rcsb.org/download/"
    structure_format: str = "pdb"
    request_timeout: float = 30.0


@dataclass
class AppConfig:
    """Main application configuration."""

    app_name: str = "Molecular Assay Explorer"
    tagline: str = "Interactive visualization of compound assay data and molecular structures"
    version: str = "1.0.0"
    debug: bool = False

    # Directories
    base_dir: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent.parent)
    templates_dir: Path = field(init=False)

    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)
    data: DataConfig = field(default_factory=DataConfig)

    default_protein: str = "6LU7"
    targets: List[ProteinTarget] = field(default_factory=lambda: list(DEFAULT_TARGETS))

    def __post_init__(self):
        """Initialize computed fields after object creation."""
        self.templates_dir = self.base_dir / "templates"

        # Relative local assay bases resolve against the project root
        base = self.data.assay_base
        if not base.startswith(("http://", "https://")) and not Path(base).is_absolute():
            self.data.assay_base = str(self.base_dir / base)

        targets_path = self.templates_dir / "protein_targets.yaml"
        if targets_path.exists():
            try:
                with targets_path.open("r", encoding="utf-8") as fh:
                    data = yaml.safe_load(fh) or {}
                loaded = [
                    ProteinTarget(str(entry["pdb_id"]).upper(), str(entry["name"]))
                    for entry in data.get("targets", [])
                ]
                if loaded:
                    self.targets = loaded
                if data.get("default"):
                    self.default_protein = str(data["default"]).upper()
            except (OSError, yaml.YAMLError, KeyError, TypeError) as e:
                logger.warning(f"Failed loading protein targets from {targets_path}: {e}")

        if self.default_protein not in self.target_ids():
            logger.warning(
                f"Default protein {self.default_protein} not in catalog; using {self.targets[0].pdb_id}"
            )
            self.default_protein = self.targets[0].pdb_id

    def target_ids(self) -> List[str]:
        return [t.pdb_id for t in self.targets]

    def get_target(self, pdb_id: str) -> Optional[ProteinTarget]:
        if not pdb_id:
            return None
        key = pdb_id.strip().upper()
        for target in self.targets:
            if target.pdb_id == key:
                return target
        return None


def load_config(base_dir: Optional[Path] = None) -> AppConfig:
    """Load application configuration, applying environment settings."""
    settings = get_settings()
    data = DataConfig(request_timeout=settings.request_timeout)
    if settings.assay_base:
        data.assay_base = settings.assay_base
    if settings.pdb_base_url:
        data.pdb_base_url = settings.pdb_base_url
    kwargs = {"data": data, "debug": settings.log_level.upper() == "DEBUG"}
    if base_dir is not None:
        kwargs["base_dir"] = base_dir
    if settings.default_protein:
        kwargs["default_protein"] = settings.default_protein.upper()
    return AppConfig(**kwargs)
