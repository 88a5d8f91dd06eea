from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from common import constants
from common.stack_context import StackContext


class KnowledgeBaseNetwork(Construct):
    """Single-AZ public VPC and the security group fronting the wiki instance."""

    def __init__(self, scope: Construct, construct_id: str, context: StackContext) -> None:
        super().__init__(scope, construct_id)
        self.context = context

        self.vpc = self.create_vpc()
        self.security_group = self.create_security_group(self.vpc)

    def create_vpc(self) -> ec2.Vpc:
        return ec2.Vpc(
            self,
            self.context.build_resource_id("vpc"),
            enable_dns_hostnames=True,
            enable_dns_support=True,
            max_azs=constants.MAX_AZS,
            nat_gateways=0,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name=self.context.build_resource_id("subnet-configuration"),
                    subnet_type=ec2.SubnetType.PUBLIC,
                ),
            ],
        )

    def create_security_group(self, vpc: ec2.IVpc) -> ec2.SecurityGroup:
        security_group = ec2.SecurityGroup(
            self,
            self.context.build_resource_id("security-group"),
            vpc=vpc,
            allow_all_outbound=True,
            description="Knowledge base instance access",
        )
        security_group.add_ingress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=ec2.Port.tcp(constants.SSH_PORT),
            description=f"Allow inbound SSH (TCP/{constants.SSH_PORT}) from {constants.ANY_IPV4_CIDR}",
        )
        security_group.add_ingress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=ec2.Port.tcp(constants.HTTP_PORT),
            description=f"Allow inbound HTTP (TCP/{constants.HTTP_PORT}) from {constants.ANY_IPV4_CIDR} for the CloudFront origin",
        )
        return security_group
