"""Reference library loader for the PPA Deal Modeler.

Loads the sector taxonomy used for credit underwriting from JSON files.
Each library file carries metadata (name, version, source, notes) and a
list of Sector > Industry > Sub-Industry entries with a base credit score
(1-10, lower is better) and priority points (1-5, higher is better).
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


def _get_resource_path(relative_path: str) -> Path:
    """Get absolute path to a packaged resource."""
    return Path(__file__).resolve().parent.parent / relative_path


_DEFAULT_LIBRARY_DIR = _get_resource_path("resources/libraries")


@dataclass(frozen=True)
class TaxonomyEntry:
    """One sub-industry row of the sector taxonomy."""

    sector: str
    industry: str
    sub_industry: str
    score: int
    points: int

    def to_dict(self) -> dict:
        return {
            "sector": self.sector,
            "industry": self.industry,
            "sub_industry": self.sub_industry,
            "score": self.score,
            "points": self.points,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TaxonomyEntry":
        return cls(
            sector=data["sector"],
            industry=data["industry"],
            sub_industry=data["sub_industry"],
            score=int(data["score"]),
            points=int(data["points"]),
        )


class SectorTaxonomy:
    """Manages loading and querying sector taxonomy libraries.

    Scans a directory for JSON library files and merges their entries in
    file-name order. Lookups return the first matching entry.

    Args:
        library_dir: Path to directory containing library JSON files.
            Defaults to the packaged resources/libraries/.
    """

    def __init__(self, library_dir: str = ""):
        self.library_dir = Path(library_dir) if library_dir else _DEFAULT_LIBRARY_DIR
        self._libraries: Dict[str, dict] = {}
        self._entries: List[TaxonomyEntry] = []
        self._load_all()

    def _load_all(self) -> None:
        """Load all JSON files from the library directory."""
        if not self.library_dir.exists():
            logger.warning("Taxonomy directory %s does not exist", self.library_dir)
            return
        for path in sorted(self.library_dir.glob("*.json")):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                entries = [TaxonomyEntry.from_dict(e) for e in data.get("entries", [])]
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping taxonomy library %s: %s", path.name, exc)
                continue
            key = data.get("name", path.stem)
            self._libraries[key] = data
            self._entries.extend(entries)
            logger.debug("Loaded %d taxonomy entries from %s", len(entries), path.name)

    @property
    def entries(self) -> List[TaxonomyEntry]:
        return list(self._entries)

    def get_library_names(self) -> List[str]:
        """Return sorted list of loaded library names."""
        return sorted(self._libraries.keys())

    def get_library_metadata(self, name: str) -> Dict[str, str]:
        """Return metadata for a library (source, version, notes)."""
        lib = self._libraries.get(name, {})
        return {
            "source": lib.get("source", ""),
            "version": lib.get("version", ""),
            "notes": lib.get("notes", ""),
        }

    def get_sectors(self) -> List[str]:
        """Return the distinct sectors, sorted."""
        return sorted({e.sector for e in self._entries})

    def get_industries(self, sector: str) -> List[str]:
        """Return the distinct industries of a sector, sorted."""
        return sorted({e.industry for e in self._entries if e.sector == sector})

    def get_sub_industries(self, industry: str) -> List[TaxonomyEntry]:
        """Return the entries of an industry sorted by sub-industry name."""
        return sorted(
            (e for e in self._entries if e.industry == industry),
            key=lambda e: e.sub_industry,
        )

    def get_entry(self, sub_industry: str) -> Optional[TaxonomyEntry]:
        """Return the entry for a sub-industry, or None."""
        for entry in self._entries:
            if entry.sub_industry == sub_industry:
                return entry
        return None

    def find(
        self, sector: str = "", industry: str = "", sub_industry: str = ""
    ) -> Optional[TaxonomyEntry]:
        """Find the best entry for a classification.

        Tries the sub-industry, then the industry, then the sector; blank
        levels are skipped.
        """
        if sub_industry:
            entry = self.get_entry(sub_industry)
            if entry:
                return entry
        if industry:
            for entry in self._entries:
                if entry.industry == industry:
                    return entry
        if sector:
            for entry in self._entries:
                if entry.sector == sector:
                    return entry
        return None
