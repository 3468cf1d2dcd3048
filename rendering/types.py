"""
Rendering Types
Per-embed render configuration: variable values, toggle states, custom
insertions and internal notes, plus the variable definitions that carry
precomputed occurrence data.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from detection.types import Variable, coerce_variables
from document_model.errors import InvalidConfigurationError


def _validate_position(position: Any, where: str) -> int:
    # bool is an int subclass but never a meaningful position
    if isinstance(position, bool) or not isinstance(position, int) or position < 0:
        raise InvalidConfigurationError(
            f"{where}: position must be a non-negative integer, got {position!r}"
        )
    return position


def _validate_text(text: Any, where: str, field_name: str) -> str:
    if not isinstance(text, str) or not text.strip():
        raise InvalidConfigurationError(f"{where}: '{field_name}' must be a non-empty string")
    return text


@dataclass(frozen=True)
class CustomInsertion:
    """A plain paragraph inserted before the paragraph at ``position``."""
    position: int
    text: str

    def __post_init__(self):
        _validate_position(self.position, "Custom insertion")
        _validate_text(self.text, "Custom insertion", "text")

    def to_dict(self) -> Dict[str, Any]:
        return {"position": self.position, "text": self.text}

    @classmethod
    def from_dict(cls, data: Any) -> 'CustomInsertion':
        if not isinstance(data, dict):
            raise InvalidConfigurationError("Custom insertion must be an object")
        return cls(position=data.get('position'), text=data.get('text'))


@dataclass(frozen=True)
class InternalNote:
    """An internal-only annotation paragraph, styled with the note color."""
    position: int
    content: str

    def __post_init__(self):
        _validate_position(self.position, "Internal note")
        _validate_text(self.content, "Internal note", "content")

    def to_dict(self) -> Dict[str, Any]:
        return {"position": self.position, "content": self.content}

    @classmethod
    def from_dict(cls, data: Any) -> 'InternalNote':
        if not isinstance(data, dict):
            raise InvalidConfigurationError("Internal note must be an object")
        return cls(position=data.get('position'), content=data.get('content'))


def coerce_insertions(items: Optional[List[Any]]) -> List[CustomInsertion]:
    return [item if isinstance(item, CustomInsertion) else CustomInsertion.from_dict(item)
            for item in items or []]


def coerce_notes(items: Optional[List[Any]]) -> List[InternalNote]:
    return [item if isinstance(item, InternalNote) else InternalNote.from_dict(item)
            for item in items or []]


def _validate_mapping(value: Any, key: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidConfigurationError(f"'{key}' must be an object mapping names to values")
    return value


@dataclass
class RenderConfig:
    """Everything one render of an embed needs besides the source document."""
    variable_values: Dict[str, Optional[str]] = field(default_factory=dict)
    toggle_states: Dict[str, bool] = field(default_factory=dict)
    custom_insertions: List[CustomInsertion] = field(default_factory=list)
    internal_notes: List[InternalNote] = field(default_factory=list)
    variables: List[Variable] = field(default_factory=list)
    disable_smart_case: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RenderConfig':
        """Build a configuration from its camelCase JSON form."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidConfigurationError("Render configuration must be an object")

        values = _validate_mapping(data.get('variableValues'), 'variableValues')
        states = _validate_mapping(data.get('toggleStates'), 'toggleStates')

        return cls(
            variable_values={str(name).strip(): value for name, value in values.items()},
            toggle_states={str(name).strip(): bool(state) for name, state in states.items()},
            custom_insertions=coerce_insertions(data.get('customInsertions')),
            internal_notes=coerce_notes(data.get('internalNotes')),
            variables=coerce_variables(data.get('variables')),
            disable_smart_case=bool(data.get('disableSmartCase', False))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variableValues": dict(self.variable_values),
            "toggleStates": dict(self.toggle_states),
            "customInsertions": [item.to_dict() for item in self.custom_insertions],
            "internalNotes": [note.to_dict() for note in self.internal_notes],
            "variables": [variable.to_dict() for variable in self.variables],
            "disableSmartCase": self.disable_smart_case,
        }


def coerce_render_config(config: Any) -> RenderConfig:
    if isinstance(config, RenderConfig):
        return config
    return RenderConfig.from_dict(config)
