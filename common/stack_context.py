from attrs import define, field
from aws_cdk import Stack

import common.constants as constants


@define(slots=True, frozen=True)
class StackContext:
    scope: Stack
    stack_id: str = field(
        metadata={"description": "Construct id of the stack, used as resource id prefix"},
    )
    record_name: str = field(default=constants.RECORD_NAME)
    domain_name: str = field(default=constants.DOMAIN_NAME)

    # ---------- dns ----------
    @property
    def app_url(self) -> str:
        """Public host name of the application, e.g. kb.icssc.club."""
        return f"{self.record_name}.{self.domain_name}"

    @property
    def app_origin(self) -> str:
        return f"https://{self.app_url}"

    # ---------- naming ----------
    def build_resource_id(self, resource_type: str) -> str:
        """Build a construct id scoped to the stack.

        Examples:
            - vpc: icssc-knowledge-base-vpc
            - Security Group: icssc-knowledge-base-security-group
        """
        suffix = resource_type.strip().replace(" ", "-").replace("_", "-")
        return f"{self.stack_id}-{suffix}".lower()
