"""
Exception classes for the order forms pipeline.

Validation problems are never raised; they travel as data in
ValidationResult. These exceptions cover the cases where a stage cannot
produce its output at all.
"""

from typing import Optional, Any


class OrderFormsError(Exception):
    """
    Base exception for all pipeline errors.

    Attributes:
        code: Error code (e.g., "TRANSFORM_FAILED")
        message: Human-readable message
        details: Additional context
    """

    code = "ORDER_FORMS_ERROR"

    def __init__(self, message: str, code: Optional[str] = None,
                 details: Optional[dict[str, Any]] = None):
        self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class TransformError(OrderFormsError):
    """A validated row is missing a field the line item cannot do without."""
    code = "TRANSFORM_FAILED"

    def __init__(self, row_number: int, message: str):
        super().__init__(f"Row {row_number}: {message}", details={"row": row_number})
        self.row_number = row_number


class DocumentAssemblyError(OrderFormsError):
    """Rendering, filling, or merging failed for a single vendor."""
    code = "DOCUMENT_ASSEMBLY_FAILED"

    def __init__(self, vendor: str, message: str):
        super().__init__(message, details={"vendor": vendor})
        self.vendor = vendor


class PurchaseFormConfigurationError(OrderFormsError):
    """The purchase-request template does not match the field table. Fatal."""
    code = "PURCHASE_FORM_MISCONFIGURED"


class TemplateUnavailableError(OrderFormsError):
    """The template resolver could not supply the purchase-request PDF."""
    code = "TEMPLATE_UNAVAILABLE"
