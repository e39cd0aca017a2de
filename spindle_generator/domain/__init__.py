"""
Domain module for Spindle Generator.

This module contains the metadata-to-identifier derivation engine: entity
and column models, naming conventions, column ordering, the entity index and
primary-key projections. None of it depends on a database driver, a template
engine or the file system.
"""

from .models import (
    ColumnDescriptor,
    ComponentType,
    Entity,
    LookupAmbiguous,
    LookupFound,
    LookupNotFound,
    LookupResult,
    PropertyScope,
    StorageStructure,
)

from .naming import (
    capitalize,
    decapitalize,
    escape_reserved,
    pluralize,
    preserve_casing,
    split_words,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_sentence_case,
    to_snake_case,
    to_title_case,
)

from .ordering import ColumnOrderingPolicy, TypeAliasTable
from .entity_index import EntityMetadataIndex
from .primary_key import KeyColumn, PrimaryKeyProjector
from .declarations import DeclarationBuilder
from .collaborators import Database, OutputWriter, TemplateRenderer

__all__ = [
    # Core models
    'ColumnDescriptor',
    'ComponentType',
    'Entity',
    'LookupAmbiguous',
    'LookupFound',
    'LookupNotFound',
    'LookupResult',
    'PropertyScope',
    'StorageStructure',

    # Naming
    'capitalize',
    'decapitalize',
    'escape_reserved',
    'pluralize',
    'preserve_casing',
    'split_words',
    'to_camel_case',
    'to_kebab_case',
    'to_pascal_case',
    'to_sentence_case',
    'to_snake_case',
    'to_title_case',

    # Derivation
    'ColumnOrderingPolicy',
    'TypeAliasTable',
    'EntityMetadataIndex',
    'KeyColumn',
    'PrimaryKeyProjector',
    'DeclarationBuilder',

    # Collaborators
    'Database',
    'OutputWriter',
    'TemplateRenderer',
]
