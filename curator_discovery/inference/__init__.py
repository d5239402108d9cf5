"""Inference providers, key rotation and model resolution."""

from .client import InferenceClient
from .credentials import CredentialRotator
from .json_repair import parse_json
from .resolver import ModelResolver, ResolvedModel
from .types import CompletionOptions, CompletionResult

__all__ = [
    "InferenceClient",
    "CredentialRotator",
    "parse_json",
    "ModelResolver",
    "ResolvedModel",
    "CompletionOptions",
    "CompletionResult",
]
