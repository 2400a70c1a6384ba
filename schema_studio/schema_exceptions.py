"""
Custom exception classes for the schema studio engine.

This module provides the error types surfaced by the document text codec,
the declaration importer and the configuration loader. Every error carries
a message, a context dictionary and recovery suggestions for display.
"""

import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)


class SchemaStudioError(Exception):
    """
    Base exception for schema studio errors.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class DocumentSyntaxError(SchemaStudioError):
    """
    Exception raised when the schema document text is not well-formed.

    The field tree is never touched when this error occurs; the text stays
    exactly as typed so the user can keep editing.
    """

    def __init__(self, document_format: str, detail: str,
                 line: Optional[int] = None, column: Optional[int] = None,
                 message: Optional[str] = None):
        self.document_format = document_format
        self.detail = detail
        self.line = line
        self.column = column

        if message is None:
            location = f" (line {line}, column {column})" if line is not None else ""
            message = f"Invalid {document_format.upper()}{location}: {detail}"

        context = {
            'document_format': document_format,
            'line': line,
            'column': column,
            'detail': detail
        }

        recovery_suggestions = [
            "Check for missing commas, brackets or quotes",
            "Keep editing; the field tree is unchanged until the document parses"
        ]

        super().__init__(message, context, recovery_suggestions)


class ParseError(SchemaStudioError):
    """
    Exception raised when a declaration line cannot be imported.

    The whole import is aborted: no partial field list is produced.
    """

    def __init__(self, line_number: int, raw_text: str, message: Optional[str] = None):
        self.line_number = line_number
        self.raw_text = raw_text

        if message is None:
            message = f"Could not parse line {line_number}: {raw_text!r}"

        context = {
            'line_number': line_number,
            'raw_text': raw_text
        }

        recovery_suggestions = [
            "Use one declaration per line in the form name: type;",
            "Supported types: string, number, boolean, Date, object, array, any[]",
            'Enums are quoted literals separated by |, e.g. "A" | "B"',
            "Add | null to mark a field as nullable"
        ]

        super().__init__(message, context, recovery_suggestions)


class ConfigurationLoadError(SchemaStudioError):
    """
    Exception raised when configuration file loading fails.

    This includes YAML parsing errors, file not found, permission issues, etc.
    """

    def __init__(self, config_path: Path, original_error: Exception,
                 message: Optional[str] = None):
        self.config_path = config_path
        self.original_error = original_error

        if message is None:
            message = f"Failed to load configuration from {config_path}: {str(original_error)}"

        context = {
            'config_path': str(config_path),
            'original_error_type': type(original_error).__name__,
            'original_error_message': str(original_error)
        }

        recovery_suggestions = [
            "Check if config.yaml exists and is readable",
            "Verify YAML syntax is correct",
            "Application will use default configuration as fallback"
        ]

        super().__init__(message, context, recovery_suggestions)


def create_user_friendly_error_message(error: SchemaStudioError) -> Dict[str, Any]:
    """
    Create user-friendly error message for display in UI.

    Args:
        error: SchemaStudioError instance

    Returns:
        Dictionary with formatted error information for UI display
    """
    error_details = error.get_full_details()

    error_type_info = {
        'DocumentSyntaxError': {
            'title': 'Schema Document Error',
            'icon': '📋',
            'severity': 'error'
        },
        'ParseError': {
            'title': 'Field Import Error',
            'icon': '⚠️',
            'severity': 'error'
        },
        'ConfigurationLoadError': {
            'title': 'Configuration File Error',
            'icon': '📄',
            'severity': 'warning'
        }
    }

    error_type = error_details['error_type']
    type_info = error_type_info.get(error_type, {
        'title': 'Schema Studio Error',
        'icon': '❌',
        'severity': 'error'
    })

    return {
        'title': f"{type_info['icon']} {type_info['title']}",
        'message': error_details['message'],
        'severity': type_info['severity'],
        'context': error_details['context'],
        'recovery_suggestions': error_details['recovery_suggestions']
    }


def log_error_with_context(error: SchemaStudioError, operation: str) -> None:
    """
    Log error with full context information.

    Args:
        error: SchemaStudioError instance
        operation: Description of the operation that failed
    """
    logger.warning(f"Schema studio error during {operation}")
    logger.warning(f"Error type: {type(error).__name__}")
    logger.warning(f"Error message: {error.message}")

    if error.context:
        logger.debug("Error context:")
        for key, value in error.context.items():
            logger.debug(f"  {key}: {value}")
