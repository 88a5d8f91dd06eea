import os
from typing import Mapping, Optional

from attrs import define, field
from attrs.validators import instance_of, min_len
from dotenv import load_dotenv

import common.constants as constants

ENV_LABELS = {
    constants.ENV_ACCOUNT_ID: "Account ID",
    constants.ENV_CERTIFICATE_ARN: "Certificate ARN",
    constants.ENV_GOOGLE_APP_ID: "Google App ID",
    constants.ENV_GOOGLE_APP_SECRET: "Google App Secret",
}


class MissingConfigurationError(ValueError):
    """Raised when a required deployment value is absent from the environment."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{ENV_LABELS.get(name, name)} not defined. Stop.")


def load_environment() -> bool:
    """Load a ``.env`` file from the working directory, keeping exported values."""
    return load_dotenv(override=False)


def require_env(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    environ = os.environ if environ is None else environ
    value = environ.get(name)
    if not value:
        raise MissingConfigurationError(name)
    return value


@define(slots=True, frozen=True, kw_only=True)
class KnowledgeBaseSettings:
    certificate_arn: str = field(
        validator=[instance_of(str), min_len(1)],
        metadata={"description": "ACM certificate ARN (us-east-1) for the CloudFront alias"},
    )
    google_app_id: str = field(
        validator=[instance_of(str), min_len(1)],
        metadata={"description": "Google OAuth application ID"},
    )
    google_app_secret: str = field(
        validator=[instance_of(str), min_len(1)],
        repr=False,
        metadata={"description": "Google OAuth application secret"},
    )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "KnowledgeBaseSettings":
        """Read the stack settings, failing on the first missing value.

        Order: certificate ARN, Google App ID, Google App Secret.
        """
        return cls(
            certificate_arn=require_env(constants.ENV_CERTIFICATE_ARN, environ),
            google_app_id=require_env(constants.ENV_GOOGLE_APP_ID, environ),
            google_app_secret=require_env(constants.ENV_GOOGLE_APP_SECRET, environ),
        )
