from .models import PALETTE, Cluster, ContentBlock, MarkupNode, MathToken, NodeKind, TokenCluster, TokenKind
from .normalizer import normalize
from .segmenter import is_multi_part, segment
from .parser import parse
from .clusterer import clusterize, clusterize_content, clusterize_tokens, is_non_breaking_segment, tokenize_math_text
from .pipeline import MarkupPipeline, RenderedBlock

__all__ = [
    "PALETTE",
    "Cluster",
    "ContentBlock",
    "MarkupNode",
    "MathToken",
    "NodeKind",
    "TokenCluster",
    "TokenKind",
    "normalize",
    "segment",
    "is_multi_part",
    "parse",
    "clusterize",
    "clusterize_content",
    "clusterize_tokens",
    "is_non_breaking_segment",
    "tokenize_math_text",
    "MarkupPipeline",
    "RenderedBlock",
]
