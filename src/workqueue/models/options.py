"""
Module: options.py
Description: Immutable client configuration models.

ClientOptions holds every default a QueueClient applies to its requests.
Instances are frozen; derived clients get a fresh, validated copy via
ClientOptions.derive().

Key Components:
- AwsCredentials: Key/secret/region used to build the transport
- ClientOptions: Queue target and pull/push defaults

Dependencies: pydantic, typing
"""

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AwsCredentials(BaseModel):
    """
    AWS credentials and region for the SQS transport.

    Accepts key/secret as well as the boto-style
    access_key_id/secret_access_key names.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("key", "access_key_id", "aws_access_key_id"),
        description="AWS access key id"
    )
    secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("secret", "secret_access_key", "aws_secret_access_key"),
        description="AWS secret access key"
    )
    region: Optional[str] = Field(default=None, description="AWS region")
    signature_version: str = Field(default="v4", description="AWS signature version")


class ClientOptions(BaseModel):
    """
    Per-client queue configuration.

    Attributes:
        url: Queue URL every request targets unless overridden per call
        params: Extra transport parameters merged into receive requests
        messages: Max messages per pull (1-10); 1 makes pull return one message
        wait: Long-poll wait seconds (0-20)
        visibility: Visibility timeout seconds applied on receive
        remove_invalid: Delete received messages that fail validation
        delay: Delay seconds applied to pushed messages
        logger: Name bound to every log line of the client
        aws: Transport credentials
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: Optional[str] = Field(default=None, description="Full queue URL")
    params: Dict[str, Any] = Field(
        default_factory=dict,
        description="Extra transport parameters for receive requests"
    )
    messages: int = Field(default=1, ge=1, le=10)
    wait: int = Field(default=20, ge=0, le=20)
    visibility: int = Field(default=30, ge=0, le=43200)
    remove_invalid: bool = Field(default=True)
    delay: int = Field(default=0, ge=0, le=900)
    logger: str = Field(default="queue", min_length=1)
    aws: AwsCredentials = Field(default_factory=AwsCredentials)

    def derive(self, **overrides: Any) -> "ClientOptions":
        """
        Return new options with overrides applied.

        Fields not named in overrides are inherited. params and aws merge
        key-wise with the override winning. self is left untouched.

        Raises:
            pydantic.ValidationError: If an override is out of range or unknown

        Example:
            >>> parent = ClientOptions(url="https://sqs/q", visibility=30)
            >>> child = parent.derive(visibility=60)
            >>> parent.visibility, child.visibility
            (30, 60)
        """
        data = self.model_dump(by_alias=False)

        params = overrides.pop("params", None)
        if params:
            data["params"] = {**data["params"], **params}

        aws = overrides.pop("aws", None)
        if aws:
            if isinstance(aws, AwsCredentials):
                aws = aws.model_dump(exclude_unset=True)
            merged = dict(data["aws"])
            merged.update(AwsCredentials.model_validate(aws).model_dump(exclude_unset=True))
            data["aws"] = merged

        data.update(overrides)
        return ClientOptions.model_validate(data)
