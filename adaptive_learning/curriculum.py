"""
Curriculum Configuration

Static knowledge the difficulty engine works from: which concept names belong
to each skill category, the order realms should be studied in, and the realm
catalog (display names and challenge counts). The defaults describe the
chemistry curriculum; a YAML or JSON file can replace them.
"""

import json
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from adaptive_learning.common.exceptions import ConfigurationError
from adaptive_learning.common.logger import app_logger

# Module logger
logger = app_logger.getChild("curriculum")


class ProgressionStage(BaseModel):
    """One realm in the recommended learning order."""
    realm_id: str
    skill_categories: List[str]
    concepts: List[str] = Field(default_factory=list)
    prerequisites: List[str] = Field(default_factory=list)


class RealmInfo(BaseModel):
    """Catalog entry for a realm."""
    name: str
    total_challenges: int = Field(ge=1)


DEFAULT_CATEGORY_CONCEPTS: Dict[str, List[str]] = {
    "equation_balance": ["Chemical Equations", "Stoichiometry"],
    "stoichiometry": ["Stoichiometry", "Molar Calculations"],
    "gas_test": ["Gas Tests", "Ion Identification"],
    "organic_naming": ["Organic Chemistry", "IUPAC Naming"],
    "memory_match": ["Gas Tests", "Flame Colors"],
    "lab_procedure": ["Lab Techniques", "Safety Procedures"],
}

DEFAULT_PROGRESSION: List[Dict] = [
    {
        "realm_id": "mathmage-trials",
        "skill_categories": ["equation_balance", "stoichiometry"],
        "concepts": ["Chemical Equations", "Stoichiometry"],
        "prerequisites": [],
    },
    {
        "realm_id": "memory-labyrinth",
        "skill_categories": ["memory_match", "gas_test"],
        "concepts": ["Gas Tests", "Ion Identification"],
        "prerequisites": ["Chemical Equations"],
    },
    {
        "realm_id": "virtual-apprentice",
        "skill_categories": ["lab_procedure"],
        "concepts": ["Lab Techniques"],
        "prerequisites": ["Gas Tests"],
    },
    {
        "realm_id": "forest-of-isomers",
        "skill_categories": ["organic_naming"],
        "concepts": ["Organic Chemistry"],
        "prerequisites": ["Chemical Equations", "Lab Techniques"],
    },
]

DEFAULT_REALMS: Dict[str, Dict] = {
    "mathmage-trials": {"name": "The Mathmage Trials", "total_challenges": 25},
    "memory-labyrinth": {"name": "The Memory Labyrinth", "total_challenges": 20},
    "virtual-apprentice": {"name": "Virtual Apprentice", "total_challenges": 15},
    "seers-challenge": {"name": "The Seer's Challenge", "total_challenges": 18},
    "cartographers-gauntlet": {"name": "The Cartographer's Gauntlet", "total_challenges": 12},
    "forest-of-isomers": {"name": "The Forest of Isomers", "total_challenges": 22},
}


class CurriculumConfig(BaseModel):
    """Curriculum knowledge used for concept matching and path construction."""
    category_concepts: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_CATEGORY_CONCEPTS.items()}
    )
    progression: List[ProgressionStage] = Field(
        default_factory=lambda: [ProgressionStage(**stage) for stage in DEFAULT_PROGRESSION]
    )
    realms: Dict[str, RealmInfo] = Field(
        default_factory=lambda: {k: RealmInfo(**v) for k, v in DEFAULT_REALMS.items()}
    )
    streak_category: str = "memory_match"
    fallback_category: str = "equation_balance"
    default_realm_size: int = Field(default=10, ge=1)

    def concepts_for(self, skill_category: str) -> List[str]:
        """Concept names mapped to a skill category (empty if unmapped)."""
        return list(self.category_concepts.get(skill_category, []))

    def resolve_category(self, challenge_type: str) -> str:
        """Map a challenge type tag to a known skill category."""
        if challenge_type in self.category_concepts:
            return challenge_type
        return self.fallback_category

    def realm_name(self, realm_id: str) -> str:
        """Display name of a realm, falling back to its id."""
        realm = self.realms.get(realm_id)
        return realm.name if realm else realm_id

    def realm_size(self, realm_id: str) -> int:
        """Number of challenges in a realm."""
        realm = self.realms.get(realm_id)
        return realm.total_challenges if realm else self.default_realm_size


def load_curriculum(path: Optional[Union[str, Path]] = None) -> CurriculumConfig:
    """
    Load a curriculum from a YAML or JSON file.

    Args:
        path: File to load; the built-in curriculum is returned when omitted

    Returns:
        Validated curriculum

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if path is None:
        return CurriculumConfig()

    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Curriculum file not found: {path}", config_key="curriculum_path")

    try:
        with open(path, 'r') as f:
            if path.suffix.lower() in ['.yaml', '.yml']:
                data = yaml.safe_load(f) or {}
            elif path.suffix.lower() == '.json':
                data = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported curriculum file format: {path.suffix}",
                    config_key="curriculum_path"
                )
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            f"Error reading curriculum file {path}: {e}",
            config_key="curriculum_path",
            original_exception=e
        )

    try:
        curriculum = CurriculumConfig(**data)
    except (PydanticValidationError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid curriculum in {path}: {e}",
            config_key="curriculum_path",
            original_exception=e
        )

    logger.info(
        f"Loaded curriculum from {path} with {len(curriculum.category_concepts)} categories "
        f"and {len(curriculum.progression)} realms in the progression"
    )
    return curriculum
