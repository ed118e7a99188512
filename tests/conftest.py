"""Shared test configuration."""

import os

# The handler module builds its DynamoDB resource at import time.
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
