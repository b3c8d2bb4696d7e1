"""Query translation: identifier naming, descriptor parsing, statement building."""

from .builder import CaseInsensitiveRules, CompiledQuery, ParameterSequence, StatementBuilder
from .descriptor import (
    And,
    Compare,
    Contains,
    Equals,
    InList,
    IsNull,
    Or,
    OrderTerm,
    QueryDescriptor,
    parse_descriptor,
    parse_order_by,
    parse_where,
)
from .naming import DEFAULT_ACRONYMS, IdentifierTranslator, to_column, to_field

__all__ = [
    "And",
    "CaseInsensitiveRules",
    "Compare",
    "CompiledQuery",
    "Contains",
    "DEFAULT_ACRONYMS",
    "Equals",
    "IdentifierTranslator",
    "InList",
    "IsNull",
    "Or",
    "OrderTerm",
    "ParameterSequence",
    "QueryDescriptor",
    "StatementBuilder",
    "parse_descriptor",
    "parse_order_by",
    "parse_where",
    "to_column",
    "to_field",
]
