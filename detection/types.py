"""
Detection Types
Variable and toggle definitions derived from a source document, and the
per-occurrence sentence-position records that drive smart casing.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class VariableOccurrence:
    """One placeholder occurrence as reported by the occurrence detector."""
    name: str
    occurrence_index: int
    is_at_sentence_start: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "occurrenceIndex": self.occurrence_index,
            "isAtSentenceStart": self.is_at_sentence_start,
        }


@dataclass(frozen=True)
class OccurrenceRecord:
    """Occurrence data stored on a variable definition."""
    index: int
    is_at_sentence_start: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "isAtSentenceStart": self.is_at_sentence_start}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OccurrenceRecord':
        return cls(
            index=int(data.get('index', 0)),
            is_at_sentence_start=bool(data.get('isAtSentenceStart', data.get('is_at_sentence_start', False)))
        )


@dataclass
class Variable:
    name: str
    description: str = ""
    example: str = ""
    required: bool = False
    occurrences: Optional[List[OccurrenceRecord]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "example": self.example,
            "required": self.required,
        }
        if self.occurrences is not None:
            data["occurrences"] = [occurrence.to_dict() for occurrence in self.occurrences]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Variable':
        raw_occurrences = data.get('occurrences')
        occurrences = None
        if isinstance(raw_occurrences, list):
            occurrences = [OccurrenceRecord.from_dict(item) for item in raw_occurrences
                           if isinstance(item, dict)]
        return cls(
            name=str(data.get('name', '')).strip(),
            description=data.get('description') or "",
            example=data.get('example') or "",
            required=bool(data.get('required', False)),
            occurrences=occurrences
        )


@dataclass
class Toggle:
    name: str
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Toggle':
        return cls(name=str(data.get('name', '')).strip(), description=data.get('description') or "")


def coerce_variables(variables: Optional[List[Any]]) -> List[Variable]:
    """Accept Variable objects or their dictionary form."""
    result = []
    for variable in variables or []:
        if isinstance(variable, Variable):
            result.append(variable)
        elif isinstance(variable, dict):
            result.append(Variable.from_dict(variable))
    return result


def coerce_toggles(toggles: Optional[List[Any]]) -> List[Toggle]:
    result = []
    for toggle in toggles or []:
        if isinstance(toggle, Toggle):
            result.append(toggle)
        elif isinstance(toggle, dict):
            result.append(Toggle.from_dict(toggle))
    return result


@dataclass
class OccurrenceIndex:
    """
    Lookup of recorded sentence positions: ``name -> {occurrence index -> is start}``.

    Built once per render from variable definitions and consulted with the
    index an OccurrenceTracker hands out during substitution.
    """
    positions: Dict[str, Dict[int, bool]] = field(default_factory=dict)

    @classmethod
    def from_variables(cls, variables: List[Variable]) -> 'OccurrenceIndex':
        positions: Dict[str, Dict[int, bool]] = {}
        for variable in variables:
            if variable.occurrences is None:
                continue
            positions[variable.name] = {
                record.index: record.is_at_sentence_start for record in variable.occurrences
            }
        return cls(positions=positions)

    @classmethod
    def from_occurrences(cls, occurrences: List[VariableOccurrence]) -> 'OccurrenceIndex':
        positions: Dict[str, Dict[int, bool]] = {}
        for occurrence in occurrences:
            positions.setdefault(occurrence.name, {})[occurrence.occurrence_index] = \
                occurrence.is_at_sentence_start
        return cls(positions=positions)

    def is_at_sentence_start(self, name: str, index: int) -> bool:
        return self.positions.get(name, {}).get(index, False)
