"""Pydantic models for form spec validation."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


PROPERTY_TYPES = ('string', 'boolean', 'integer', 'enum')


class PropertySpec(BaseModel):
    """
    A single question of a form.

    Each property writes one value into the wizard state, at the dotted
    path given by id.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="State path the answer is stored at (e.g., 'deploy.region')")
    type: str = Field(..., description="Property type: string, boolean, integer, enum")
    prompt: str = Field(..., description="Prompt text to display to user")
    default_value: Optional[Any] = Field(None, description="Default if the property is never asked")
    default_from: Optional[str] = Field(None, description="State path to read the default from")
    show_when: Optional[str] = Field(None, description="Condition (e.g., 'state.mode == advanced')")
    depends_on: List[str] = Field(default_factory=list, description="Properties that must be assigned first")
    require_parent: bool = Field(False, description="Only ask while the parent object is set")
    validator: Optional[str] = Field(None, description="Validator function name (e.g., 'network.validate_port')")
    options: Optional[List[Dict[str, Any]]] = Field(None, description="Options for enum type")
    order: int = Field(0, description="Relative order among properties")

    @field_validator('type')
    @classmethod
    def _known_type(cls, value: str) -> str:
        if value not in PROPERTY_TYPES:
            raise ValueError(f"Unknown property type: {value}")
        return value

    @model_validator(mode='after')
    def _enum_has_options(self) -> 'PropertySpec':
        if self.type == 'enum' and not self.options:
            raise ValueError(f"Enum property {self.id} needs at least one option")
        return self


class ExitSpec(BaseModel):
    """Confirmation asked when the user tries to leave the form."""

    model_config = ConfigDict(extra="allow")

    prompt: str = Field("Exit the wizard?", description="Yes/no question shown before exiting")


class FormSpec(BaseModel):
    """
    A declarative form: the questions a wizard may ask.

    Which questions are asked, and in which order, is decided at run time
    from show_when conditions and dependencies.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Form identifier (e.g., 'deploy')")
    version: str = Field(..., description="Form spec version")
    description: str = Field(..., description="Human-readable description")
    properties: List[PropertySpec] = Field(default_factory=list, description="Questions of the form")
    exit_confirmation: Optional[ExitSpec] = Field(None, description="Ask before exiting")

    @field_validator('version', mode='before')
    @classmethod
    def _version_as_string(cls, value: Any) -> Any:
        # YAML reads 1.0 as a float
        if isinstance(value, (int, float)):
            return str(value)
        return value
