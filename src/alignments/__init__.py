"""AWS Lambda function package for alignment sessions.

This package provides functionality for listing and creating vehicle
alignment sessions stored in DynamoDB.
"""

__version__ = "0.1.0"

from .lambda_handler import (
    AlignmentStore,
    MethodNotAllowedError,
    ValidationError,
    create_alignment,
    get_alignments_handler,
    lambda_handler,
    list_alignments,
    post_alignment_handler,
)

__all__ = [
    "AlignmentStore",
    "MethodNotAllowedError",
    "ValidationError",
    "create_alignment",
    "get_alignments_handler",
    "lambda_handler",
    "list_alignments",
    "post_alignment_handler",
]
