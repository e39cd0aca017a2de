"""
Custom exception hierarchy for Spindle Generator.

Every error carries structured context and recovery suggestions so that a
failing (entity, artifact kind) unit can be reported precisely. None of the
core derivation errors are retried: given the same metadata they fail the
same way every time.
"""

import re
from typing import Dict, Any, Optional, List, Tuple


class SpindleGeneratorError(Exception):
    """
    Base exception for all Spindle Generator errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(SpindleGeneratorError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify all required fields are present",
                "Check the template and output folder paths",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class DatabaseConnectionError(SpindleGeneratorError):
    """Raised when the metadata database cannot be reached or queried."""

    def __init__(self, message: str, database_url: str = None, engine: str = None, **kwargs):
        context = kwargs.get('context', {})
        if database_url:
            context['database_url'] = self._mask_credentials(database_url)
        if engine:
            context['engine'] = engine

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check database server is running",
                "Verify connection credentials",
                "Ensure the metadata table exists and is readable",
                "Ensure database driver is installed"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="DATABASE_CONNECTION_ERROR"
        )

    @staticmethod
    def _mask_credentials(url: str) -> str:
        """Mask sensitive credentials in database URL."""
        return re.sub(r'://([^:]+):([^@]+)@', r'://\1:***@', url)


class MetadataInconsistencyError(SpindleGeneratorError):
    """
    Raised when entity metadata disagrees with itself or with the live schema.

    Typical causes are a storage key naming a column the table does not have,
    an empty storage key, or an unrecognized storage structure.
    """

    def __init__(
        self,
        message: str,
        entity: str = None,
        table: str = None,
        column: str = None,
        **kwargs
    ):
        context = kwargs.get('context', {})
        if entity:
            context['entity'] = entity
        if table:
            context['table'] = table
        if column:
            context['column'] = column

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Compare the entity's storage key with the table's columns",
                "Run the generator with --check-metadata for a full report",
                "Update the metadata table after schema changes",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="METADATA_INCONSISTENCY"
        )


class LookupNotFoundError(SpindleGeneratorError):
    """Raised when a (component, feature, entity) key matches no entity."""

    def __init__(self, key: Tuple[str, str, str], **kwargs):
        component, feature, entity = key
        self.key = key
        super().__init__(
            f"No entity found: entity '{entity}'; feature '{feature}'; component '{component}'.",
            context={'component': component, 'feature': feature, 'entity': entity},
            suggestions=kwargs.get('suggestions') or [
                "Check the spelling and casing of the lookup key",
                "Verify the entity is present in the metadata table",
            ],
            error_code="LOOKUP_NOT_FOUND"
        )


class LookupAmbiguousError(SpindleGeneratorError):
    """Raised when a (component, feature, entity) key matches several entities."""

    def __init__(self, key: Tuple[str, str, str], count: int, **kwargs):
        component, feature, entity = key
        self.key = key
        self.count = count
        super().__init__(
            f"Multiple entities found ({count}): entity '{entity}'; feature '{feature}'; component '{component}'.",
            context={'component': component, 'feature': feature, 'entity': entity, 'count': count},
            suggestions=kwargs.get('suggestions') or [
                "Remove the duplicate rows from the metadata table",
            ],
            error_code="LOOKUP_AMBIGUOUS"
        )


class UnsupportedTypeError(SpindleGeneratorError):
    """Raised when a column type has no alias, priority or native mapping."""

    def __init__(self, message: str, type_name: str = None, column: str = None, **kwargs):
        context = kwargs.get('context', {})
        if type_name:
            context['type'] = type_name
        if column:
            context['column'] = column

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check if the column type is supported",
                "Change the column to a supported type",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="UNSUPPORTED_TYPE"
        )


class MissingTemplateError(SpindleGeneratorError):
    """Raised when a template id cannot be resolved in the template folder."""

    def __init__(self, template_id: str, template_folder: str = None, **kwargs):
        context = {'template_id': template_id}
        if template_folder:
            context['template_folder'] = template_folder

        super().__init__(
            f"Template not found: {template_id}",
            context=context,
            suggestions=kwargs.get('suggestions') or [
                "Verify the template folder setting",
                "Check the template file name and extension",
            ],
            error_code="MISSING_TEMPLATE"
        )


class UnresolvedPlaceholderError(SpindleGeneratorError):
    """Raised in strict mode when a template keeps placeholders with no value."""

    def __init__(self, template_id: str, placeholders: List[str], **kwargs):
        self.placeholders = placeholders
        super().__init__(
            f"Template '{template_id}' has unresolved placeholders: {', '.join(placeholders)}",
            context={'template_id': template_id, 'placeholders': placeholders},
            suggestions=kwargs.get('suggestions') or [
                "Remove the placeholder from the template",
                "Disable strict_templates to pass placeholders through",
            ],
            error_code="UNRESOLVED_PLACEHOLDER"
        )


class OutputWriteError(SpindleGeneratorError):
    """Raised when rendered text cannot be written to the output folder."""

    def __init__(self, message: str, path: str = None, **kwargs):
        context = kwargs.get('context', {})
        if path:
            context['path'] = path

        super().__init__(
            message,
            context=context,
            suggestions=kwargs.get('suggestions') or [
                "Check the output folder exists and is writable",
                "Check available disk space",
            ],
            error_code="IO_FAILURE"
        )


class CodeGenerationError(SpindleGeneratorError):
    """Raised when one (entity, artifact kind) unit fails."""

    def __init__(self, message: str, kind: str = None, entity: str = None, **kwargs):
        context = kwargs.get('context', {})
        if kind:
            context['kind'] = kind
        if entity:
            context['entity'] = entity

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the entity metadata for this unit",
                "Try generating one artifact kind at a time",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CODE_GENERATION_ERROR"
        )


class ValidationError(SpindleGeneratorError):
    """Raised when a metadata health check fails."""

    def __init__(self, message: str, validator: str = None, **kwargs):
        context = kwargs.get('context', {})
        if validator:
            context['validator'] = validator

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Run the generator with --check-metadata for more details",
                "Fix the reported metadata rows",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="VALIDATION_ERROR"
        )


def raise_metadata_error(message: str, entity: str = None, column: str = None, **kwargs):
    """Convenience function to raise metadata inconsistency errors."""
    raise MetadataInconsistencyError(message, entity=entity, column=column, **kwargs)


def raise_unsupported_type(message: str, type_name: str = None, **kwargs):
    """Convenience function to raise unsupported type errors."""
    raise UnsupportedTypeError(message, type_name=type_name, **kwargs)
