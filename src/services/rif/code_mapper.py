"""
Clinical-to-Billing Code Mapping Service.

Maps internal clinical codes (SNOMED CT, RxNorm, ...) to the external code
systems used on RIF records: ICD-10-CM, ICD-10-PCS, HCPCS, MS-DRG and
ICD-10-CM external cause codes.

Mapping tables are JSON objects keyed by source code::

    {
      "44054006": [
        {"code": "E11.9", "description": "Type 2 diabetes", "weight": 0.75},
        {"code": "E11.65", "description": "...", "weight": 0.25}
      ]
    }
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from src.services.rif.health_record import Code
from src.utils.errors import CodeMappingError
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.services.rif.health_record import Patient

logger = get_logger(__name__)


class CodeTarget(BaseModel):
    """One candidate target code for a source code."""

    code: str = Field(..., min_length=1)
    description: str = ""
    weight: float = Field(default=1.0, ge=0.0)


class CodeMapper:
    """
    Maps source codes to one of their weighted target codes.

    Without fallback the highest-weight target is returned. With fallback
    the target is drawn by weight from the patient's seeded generator, so
    the choice is reproducible for a given patient.
    """

    def __init__(self, name: str, mappings: Optional[dict[str, list[CodeTarget]]] = None):
        self.name = name
        self._mappings: dict[str, list[CodeTarget]] = {}
        for source, targets in (mappings or {}).items():
            if targets:
                self._mappings[source] = sorted(targets, key=lambda t: t.weight, reverse=True)

    @classmethod
    def from_dict(cls, name: str, data: dict[str, list[dict]]) -> "CodeMapper":
        try:
            mappings = {
                source: [CodeTarget.model_validate(t) for t in targets]
                for source, targets in data.items()
            }
        except (ValidationError, TypeError, AttributeError) as e:
            raise CodeMappingError(f"Invalid {name} mapping table: {e}") from e
        return cls(name, mappings)

    @classmethod
    def from_json(cls, name: str, path: Union[str, Path]) -> "CodeMapper":
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CodeMappingError(f"Malformed mapping file {path}: {e}") from e
        if not isinstance(data, dict):
            raise CodeMappingError(f"Mapping file {path} must contain a JSON object")
        mapper = cls.from_dict(name, data)
        logger.debug(f"Loaded {len(mapper)} {name} mappings from {path}")
        return mapper

    @staticmethod
    def _key(code: Union[Code, str]) -> str:
        return code.code if isinstance(code, Code) else code

    def can_map(self, code: Union[Code, str]) -> bool:
        return self._key(code) in self._mappings

    def map(
        self,
        code: Union[Code, str],
        patient: "Patient",
        allow_fallback: bool = False,
    ) -> str:
        """
        Map a source code to a target code.

        Args:
            code: Source code or its string value
            patient: Patient whose generator resolves weighted choices
            allow_fallback: Draw among all targets instead of taking the best

        Raises:
            CodeMappingError: if the code has no mapping
        """
        key = self._key(code)
        targets = self._mappings.get(key)
        if not targets:
            raise CodeMappingError(f"No {self.name} mapping for code {key}")
        if not allow_fallback or len(targets) == 1:
            return targets[0].code
        weights = [t.weight for t in targets]
        if sum(weights) <= 0:
            return patient.rng.choice(targets).code
        return patient.rng.choices(targets, weights=weights, k=1)[0].code

    def __len__(self) -> int:
        return len(self._mappings)


@dataclass
class CodeMappers:
    """The mapping tables used by the inpatient exporter."""

    condition: CodeMapper = field(default_factory=lambda: CodeMapper("condition"))
    procedure: CodeMapper = field(default_factory=lambda: CodeMapper("procedure"))
    hcpcs: CodeMapper = field(default_factory=lambda: CodeMapper("hcpcs"))
    drg: CodeMapper = field(default_factory=lambda: CodeMapper("drg"))
    external_cause: CodeMapper = field(default_factory=lambda: CodeMapper("external_cause"))

    FILE_NAMES = {
        "condition": "condition_code_map.json",
        "procedure": "procedure_code_map.json",
        "hcpcs": "hcpcs_code_map.json",
        "drg": "drg_code_map.json",
        "external_cause": "external_cause_code_map.json",
    }

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> "CodeMappers":
        """Load every mapping table found in ``directory``."""
        directory = Path(directory)
        mappers: dict[str, CodeMapper] = {}
        for name, file_name in cls.FILE_NAMES.items():
            path = directory / file_name
            if path.exists():
                mappers[name] = CodeMapper.from_json(name, path)
            else:
                logger.warning(f"No {name} mapping table at {path}; {name} codes will not be mapped")
        return cls(**mappers)
