# -*- coding: utf-8 -*-
"""
Image Extractor - 생성 응답에서 inline 이미지 추출
===================================================

응답 형태는 계약으로 보장되지 않으므로 두 가지 전략을 순서대로 적용합니다.

1. Primary (typed path): ``candidates[0].content.parts`` 를 순서대로 순회
   - inline data 가 있는 part -> artifact
   - text 가 있는 part -> text (마지막 값이 이김, 누적하지 않음)
2. Fallback (generic scan): primary 가 0개를 찾은 경우에만 응답 전체를
   depth-first pre-order 로 순회하며 inline data 블록을 수집

두 전략 모두 예외를 던지지 않고 (비어 있을 수 있는) 리스트를 반환합니다.
Fallback 에서 문제가 있는 노드는 해당 서브트리만 건너뜁니다.
"""

import base64
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from nano_image.common.logging_utils import get_logger
from nano_image.models.image_models import DEFAULT_ARTIFACT_MIME_TYPE, GeneratedArtifact

logger = get_logger(__name__)

# SDK 가 alias 여부에 따라 camelCase / snake_case 로 덤프하므로 둘 다 인식
INLINE_DATA_KEYS = ("inlineData", "inline_data")
MIME_TYPE_KEYS = ("mimeType", "mime_type")


# ============================================================================
# Response shapes
# ============================================================================

@dataclass
class CandidatePartsResponse:
    """Known shape: the response exposes candidates[0].content.parts."""
    parts: List[Any]
    raw: Any = None


@dataclass
class UnknownResponse:
    """Anything else; only the generic scan applies."""
    raw: Any = None


ResponseShape = Union[CandidatePartsResponse, UnknownResponse]


@dataclass
class ExtractionResult:
    artifacts: List[GeneratedArtifact] = field(default_factory=list)
    text: Optional[str] = None
    used_fallback: bool = False


def _first_key(node: Mapping, keys: Tuple[str, ...]) -> Any:
    for key in keys:
        value = node.get(key)
        if value is not None:
            return value
    return None


def classify_response(response: Any) -> ResponseShape:
    """Tag the response as the known candidates/parts shape or unknown."""
    try:
        candidates = response.get("candidates") if isinstance(response, Mapping) else None
        if not isinstance(candidates, (list, tuple)) or not candidates:
            return UnknownResponse(raw=response)
        first = candidates[0]
        parts = first["content"]["parts"]
        if isinstance(parts, (list, tuple)):
            return CandidatePartsResponse(parts=list(parts), raw=response)
    except (KeyError, TypeError, AttributeError):
        pass
    return UnknownResponse(raw=response)


def artifact_from_node(node: Mapping) -> Optional[GeneratedArtifact]:
    """
    node 가 inline data 필드를 직접 가지고 있고 data 가 비어 있지 않으면 artifact 생성

    Raises:
        TypeError: inline data 의 data 가 문자열/바이트가 아닌 경우
    """
    inline = _first_key(node, INLINE_DATA_KEYS)
    if not isinstance(inline, Mapping):
        return None

    data = inline.get("data")
    if not data:
        return None
    if isinstance(data, (bytes, bytearray)):
        data = base64.b64encode(bytes(data)).decode("ascii")
    elif not isinstance(data, str):
        raise TypeError(f"inline data payload has unsupported type {type(data).__name__}")

    mime_type = _first_key(inline, MIME_TYPE_KEYS)
    if not isinstance(mime_type, str) or not mime_type:
        mime_type = DEFAULT_ARTIFACT_MIME_TYPE
    return GeneratedArtifact(data=data, mime_type=mime_type)


# ============================================================================
# Phase A: candidates[0].content.parts
# ============================================================================

def extract_from_parts(parts: List[Any]) -> Tuple[List[GeneratedArtifact], Optional[str]]:
    """
    Primary path over an ordered parts list.

    Returns (artifacts, text). Scalar parts carry neither inline data nor text
    and are skipped. A missing (None) part is a traversal failure: the whole
    primary path then reports zero artifacts; text captured before it is kept.
    """
    artifacts: List[GeneratedArtifact] = []
    text: Optional[str] = None
    try:
        for part in parts:
            if part is None:
                raise TypeError("part is None")
            if not isinstance(part, Mapping):
                continue
            artifact = artifact_from_node(part)
            if artifact is not None:
                artifacts.append(artifact)
                continue
            part_text = part.get("text")
            if isinstance(part_text, str) and part_text:
                text = part_text
    except Exception as e:
        logger.debug(f"Primary parts traversal failed, falling back to generic scan: {e}")
        return [], text
    return artifacts, text


# ============================================================================
# Phase B: 전체 트리 스캔
# ============================================================================

class _Exit:
    """Stack marker: the container is no longer on the current path."""

    __slots__ = ("node_id",)

    def __init__(self, node_id: int):
        self.node_id = node_id


def scan_inline_data(root: Any) -> List[GeneratedArtifact]:
    """
    Depth-first, pre-order scan of the whole value for inline data blocks.

    Mapping keys are visited in their natural order and list elements in
    sequence. A node that fails to visit is skipped together with its
    subtree; the scan itself never raises. Uses an explicit stack so nesting
    depth is not bounded by the interpreter recursion limit.

    A container referenced from several places is emitted once per
    occurrence; only a container that is already an ancestor on the current
    path (a cycle) is not entered again.
    """
    found: List[GeneratedArtifact] = []
    stack: List[Any] = [root]
    on_path = set()

    while stack:
        node = stack.pop()
        if isinstance(node, _Exit):
            on_path.discard(node.node_id)
            continue
        if not isinstance(node, (Mapping, list, tuple)):
            continue
        if id(node) in on_path:
            continue

        try:
            if isinstance(node, Mapping):
                artifact = artifact_from_node(node)
                children = list(node.values())
            else:
                artifact = None
                children = list(node)
        except Exception as e:
            logger.debug(f"Skipping malformed node during inline data scan: {e}")
            continue

        if artifact is not None:
            found.append(artifact)
        on_path.add(id(node))
        stack.append(_Exit(id(node)))
        # pre-order 유지: 역순으로 push
        stack.extend(reversed(children))

    return found


def extract_artifacts(response: Any) -> ExtractionResult:
    """Run the typed path first, then the generic scan if it found nothing."""
    shape = classify_response(response)

    artifacts: List[GeneratedArtifact] = []
    text: Optional[str] = None
    if isinstance(shape, CandidatePartsResponse):
        artifacts, text = extract_from_parts(shape.parts)

    if artifacts:
        return ExtractionResult(artifacts=artifacts, text=text)

    return ExtractionResult(
        artifacts=scan_inline_data(response),
        text=text,
        used_fallback=True,
    )
