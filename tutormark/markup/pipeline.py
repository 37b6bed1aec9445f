from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..config import Settings, get_settings
from ..errors import InputTooLargeError
from .clusterer import clusterize
from .models import Cluster, ContentBlock, MarkupNode
from .normalizer import normalize
from .parser import parse
from .segmenter import is_multi_part, segment
from .text_utils import ensure_text

logger = logging.getLogger(__name__)


class RenderedBlock(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    label: Optional[str] = None
    content: str = ""
    nodes: list[MarkupNode] = []
    clusters: list[Cluster] = []


class MarkupPipeline:
    def __init__(self, settings: Optional[Settings] = None, *, decimals: Optional[bool] = None):
        self.settings = settings or get_settings()
        self.decimals = self.settings.decimal_fractions if decimals is None else decimals

    def _checked(self, text: str, where: str) -> Optional[str]:
        text = ensure_text(text, where)
        if text is not None and len(text) > self.settings.max_input_chars:
            raise InputTooLargeError(len(text), self.settings.max_input_chars)
        return text

    def normalize(self, text: str) -> str:
        text = self._checked(text, "MarkupPipeline.normalize")
        if not text:
            return ""
        return normalize(text, decimals=self.decimals)

    def structure(self, text: str) -> list[MarkupNode]:
        """Nodes for a single-paragraph field (problem, step title, step content)."""
        return parse(self.normalize(text), max_depth=self.settings.max_depth)

    def blocks(self, text: str) -> list[ContentBlock]:
        return segment(self.normalize(text))

    def render(self, text: str) -> list[RenderedBlock]:
        """Normalize, segment, parse and cluster an answer; one entry per part."""
        out: list[RenderedBlock] = []
        for block in self.blocks(text):
            nodes = parse(block.content, max_depth=self.settings.max_depth)
            out.append(
                RenderedBlock(
                    label=block.label,
                    content=block.content,
                    nodes=nodes,
                    clusters=clusterize(nodes),
                )
            )
        logger.debug("Rendered %d block(s)", len(out))
        return out

    @staticmethod
    def is_multi_part(rendered: list[RenderedBlock]) -> bool:
        return is_multi_part([ContentBlock(label=b.label, content=b.content) for b in rendered])
