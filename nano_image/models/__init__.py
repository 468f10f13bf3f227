# -*- coding: utf-8 -*-
"""
Models package.
Contains Pydantic models for image transform requests, results and classified errors.
"""

from .image_models import (
    DEFAULT_ARTIFACT_MIME_TYPE,
    NO_IMAGES_WARNING,
    ErrorKind,
    ClassifiedError,
    TransformRequest,
    GeneratedArtifact,
    TransformResult,
)

__all__ = [
    "DEFAULT_ARTIFACT_MIME_TYPE",
    "NO_IMAGES_WARNING",
    "ErrorKind",
    "ClassifiedError",
    "TransformRequest",
    "GeneratedArtifact",
    "TransformResult",
]
