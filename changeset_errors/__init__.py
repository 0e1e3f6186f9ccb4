"""Normalize nested validation errors and route them through matching rules."""

from changeset_errors.core.config import NormalizerSettings
from changeset_errors.core.errors import APIError
from changeset_errors.core.errors import ChangesetErrorsError
from changeset_errors.core.errors import InvalidErrorNodeError
from changeset_errors.core.errors import InvalidRuleError
from changeset_errors.core.errors import UnexpectedErrorsError
from changeset_errors.services.dispatcher import Rule
from changeset_errors.services.dispatcher import dispatch
from changeset_errors.services.normalizer import NormalizedError
from changeset_errors.services.normalizer import join_path
from changeset_errors.services.normalizer import normalize
from changeset_errors.services.processing import collect_unexpected
from changeset_errors.services.processing import match_key_value_equal
from changeset_errors.services.processing import match_message_pattern
from changeset_errors.services.processing import process_errors

__all__ = [
    "APIError",
    "ChangesetErrorsError",
    "InvalidErrorNodeError",
    "InvalidRuleError",
    "NormalizedError",
    "NormalizerSettings",
    "Rule",
    "UnexpectedErrorsError",
    "collect_unexpected",
    "dispatch",
    "join_path",
    "match_key_value_equal",
    "match_message_pattern",
    "normalize",
    "process_errors",
]
