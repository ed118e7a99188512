"""Vehicle alignment sessions Lambda package.

This package provides AWS Lambda functions for listing and creating
vehicle alignment session records via API Gateway.
"""

__version__ = "0.1.0"

from src.alignments import get_alignments_handler, lambda_handler, post_alignment_handler

__all__ = ["get_alignments_handler", "lambda_handler", "post_alignment_handler"]
