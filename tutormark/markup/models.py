from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

PALETTE: dict[str, str] = {
    "red": "#ef4444",
    "blue": "#3b82f6",
    "green": "#10b981",
    "purple": "#8b5cf6",
    "orange": "#f97316",
    "pink": "#ec4899",
    "yellow": "#eab308",
    "teal": "#14b8a6",
    "indigo": "#6366f1",
}


class NodeKind(str, Enum):
    TEXT = "text"
    FRACTION = "fraction"
    HIGHLIGHTED = "highlighted"
    ARROW = "arrow"
    ITALIC = "italic"
    IMAGE = "image"
    SUBSCRIPT = "subscript"
    SUPERSCRIPT = "superscript"


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
    )


class MarkupNode(_Record):
    kind: NodeKind
    content: str = ""
    numerator: Optional[str] = None
    denominator: Optional[str] = None
    color: Optional[str] = None
    url: Optional[str] = None
    is_handwritten: bool = False

    @model_validator(mode="after")
    def _check_fraction(self) -> "MarkupNode":
        if self.kind == NodeKind.FRACTION:
            if not self.numerator or not self.denominator:
                raise ValueError("fraction nodes need a non-empty numerator and denominator")
            if self.content != f"{self.numerator}/{self.denominator}":
                raise ValueError("fraction content must be 'numerator/denominator'")
        return self

    @classmethod
    def fraction(
        cls,
        numerator: str,
        denominator: str,
        *,
        color: Optional[str] = None,
        is_handwritten: bool = False,
    ) -> "MarkupNode":
        return cls(
            kind=NodeKind.FRACTION,
            content=f"{numerator}/{denominator}",
            numerator=numerator,
            denominator=denominator,
            color=color,
            is_handwritten=is_handwritten,
        )


class ContentBlock(_Record):
    label: Optional[str] = None
    content: str = ""


class Cluster(_Record):
    nodes: list[MarkupNode] = Field(min_length=1)
    can_break_after: bool = True


class TokenKind(str, Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    DELIMITER = "delimiter"
    WHITESPACE = "whitespace"
    TEXT = "text"


class MathToken(_Record):
    kind: TokenKind
    value: str
    sticky: bool = False  # binds to the neighbouring tokens


class TokenCluster(_Record):
    tokens: list[MathToken] = Field(min_length=1)
    can_break_after: bool = True

    @property
    def text(self) -> str:
        return "".join(t.value for t in self.tokens)
