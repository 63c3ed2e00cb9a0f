from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class SettingType(StrEnum):
    STRING = "STRING"
    PASSWORD = "PASSWORD"
    BOOLEAN = "BOOLEAN"
    INT = "INT"
    SELECT = "SELECT"


class NoValidation(BaseModel):
    kind: Literal["none"] = "none"


class PatternValidation(BaseModel):
    """Non-empty values must match ``pattern`` (``re.search``)."""

    kind: Literal["pattern"] = "pattern"
    pattern: str
    message: str


class PredicateValidation(BaseModel):
    """Non-empty values must satisfy the named predicate of the catalog."""

    kind: Literal["predicate"] = "predicate"
    predicate: str
    message: str


SettingValidation = Annotated[
    Union[NoValidation, PatternValidation, PredicateValidation],
    Field(discriminator="kind"),
]


class SettingOption(BaseModel):
    value: str
    label: str


class SettingDefinition(BaseModel):
    """Definition of one setting, as displayed by the settings page.

    ``value`` is only filled when definitions are populated with a project's
    stored values, and never for passwords.
    """

    code: str
    name: str
    type: SettingType
    required: bool = False
    default_value: str | None = None
    help: str | None = None
    options: list[SettingOption] = []
    validation: SettingValidation = Field(default_factory=NoValidation)
    value: str | None = None


class SettingGroup(BaseModel):
    name: str
    settings: list[SettingDefinition]


class SettingValueUpdate(BaseModel):
    value: str | None = None
