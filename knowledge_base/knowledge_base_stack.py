from pathlib import Path
from typing import Optional

from aws_cdk import (
    CfnOutput,
    Stack,
    aws_certificatemanager as acm,
    aws_cloudfront as cloudfront,
    aws_cloudfront_origins as origins,
    aws_ec2 as ec2,
    aws_route53 as route53,
    aws_s3_assets as s3_assets,
)
from constructs import Construct

import common.constants as constants
from common.settings import KnowledgeBaseSettings
from common.stack_context import StackContext
from networking.knowledge_base_network import KnowledgeBaseNetwork

SETUP_SCRIPT_PATH = (
    Path(__file__).resolve().parent.parent / constants.USER_DATA_DIR / constants.SETUP_SCRIPT_NAME
)


class KnowledgeBaseStack(Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        settings: Optional[KnowledgeBaseSettings] = None,
        **kwargs,
    ) -> None:
        # Fail before anything is added to the app
        settings = settings or KnowledgeBaseSettings.from_env()

        super().__init__(scope, construct_id, **kwargs)
        self.settings = settings
        self.context = StackContext(scope=self, stack_id=construct_id)

        # VPC and security group
        self.network = KnowledgeBaseNetwork(
            self, self.context.build_resource_id("network"), context=self.context
        )

        # Wiki host
        self.instance = self._build_instance(
            vpc=self.network.vpc, security_group=self.network.security_group
        )

        # Provisioning script, fetched and run at first boot
        self.setup_script = self._build_setup_script_asset()
        self._add_setup_user_data(self.instance, self.setup_script)

        # CDN in front of the instance
        self.distribution = self._build_distribution(self.instance)

        # DNS
        self.cname_record = self._build_cname_record(self.distribution)

        CfnOutput(self, "AppUrl", value=self.context.app_origin)
        CfnOutput(
            self,
            "DistributionDomainName",
            value=self.distribution.distribution_domain_name,
        )
        CfnOutput(
            self,
            "InstancePublicDnsName",
            value=self.instance.instance_public_dns_name,
        )

    # Resource creation

    def _build_instance(
        self, vpc: ec2.IVpc, security_group: ec2.ISecurityGroup
    ) -> ec2.Instance:
        return ec2.Instance(
            self,
            self.context.build_resource_id("instance"),
            vpc=vpc,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC),
            instance_type=ec2.InstanceType.of(
                constants.INSTANCE_CLASS, constants.INSTANCE_SIZE
            ),
            machine_image=ec2.MachineImage.latest_amazon_linux2023(
                cpu_type=constants.INSTANCE_CPU_TYPE
            ),
            associate_public_ip_address=True,
            security_group=security_group,
        )

    def _build_setup_script_asset(self) -> s3_assets.Asset:
        """Upload the BookStack setup script as an S3 asset."""
        return s3_assets.Asset(
            self,
            self.context.build_resource_id("setup-script"),
            path=str(SETUP_SCRIPT_PATH),
        )

    def _add_setup_user_data(
        self, instance: ec2.Instance, setup_script: s3_assets.Asset
    ) -> None:
        setup_script.grant_read(instance.role)
        file_path = instance.user_data.add_s3_download_command(
            bucket=setup_script.bucket,
            bucket_key=setup_script.s3_object_key,
        )
        instance.user_data.add_execute_file_command(
            file_path=file_path,
            arguments=self.build_setup_arguments(),
        )

    def build_setup_arguments(self) -> str:
        return (
            f"-a {self.context.app_origin} "
            f"-i {self.settings.google_app_id} "
            f"-s {self.settings.google_app_secret}"
        )

    def _build_distribution(self, instance: ec2.Instance) -> cloudfront.Distribution:
        """CloudFront distribution forwarding everything to the instance over HTTP."""
        return cloudfront.Distribution(
            self,
            self.context.build_resource_id("distribution"),
            default_behavior=cloudfront.BehaviorOptions(
                origin=origins.HttpOrigin(
                    instance.instance_public_dns_name,
                    protocol_policy=cloudfront.OriginProtocolPolicy.HTTP_ONLY,
                ),
                allowed_methods=cloudfront.AllowedMethods.ALLOW_ALL,
                cache_policy=cloudfront.CachePolicy.CACHING_DISABLED,
                response_headers_policy=cloudfront.ResponseHeadersPolicy.CORS_ALLOW_ALL_ORIGINS,
                origin_request_policy=cloudfront.OriginRequestPolicy.ALL_VIEWER,
            ),
            certificate=acm.Certificate.from_certificate_arn(
                self,
                self.context.build_resource_id("certificate"),
                self.settings.certificate_arn,
            ),
            domain_names=[self.context.app_url],
            price_class=cloudfront.PriceClass.PRICE_CLASS_100,
        )

    def _build_cname_record(
        self, distribution: cloudfront.Distribution
    ) -> route53.CnameRecord:
        return route53.CnameRecord(
            self,
            self.context.build_resource_id("cname"),
            record_name=self.context.record_name,
            zone=route53.HostedZone.from_lookup(
                self,
                self.context.build_resource_id("hosted-zone"),
                domain_name=self.context.domain_name,
            ),
            domain_name=distribution.distribution_domain_name,
        )
