"""boto3 client construction from ConfigAccessor credentials."""

from __future__ import annotations

from typing import Any

from polyvoice.core.config_accessor import ConfigAccessor


def create_aws_client(service_name: str, config: ConfigAccessor) -> Any:
    """Create a boto3 client using the (possibly encrypted) AWS keys."""
    import boto3

    return boto3.client(
        service_name,
        aws_access_key_id=config.get("AWS_ACCESS_KEY_ID").strip(),
        aws_secret_access_key=config.get("AWS_SECRET_ACCESS_KEY").strip(),
        region_name=config.get("AWS_REGION").strip(),
    )
