from aws_cdk import aws_ec2 as ec2

STACK_NAME = "icssc-knowledge-base"
DEFAULT_REGION = "us-east-1"
SERVICE_NAME = "knowledge-base"  # Logger service name

# DNS
RECORD_NAME = "kb"
DOMAIN_NAME = "icssc.club"

# Compute
INSTANCE_CLASS = ec2.InstanceClass.T4G
INSTANCE_SIZE = ec2.InstanceSize.MICRO
INSTANCE_CPU_TYPE = ec2.AmazonLinuxCpuType.ARM_64
SETUP_SCRIPT_NAME = "bookstack_setup_al2023.sh"
USER_DATA_DIR = "user_data"

# Networking
ANY_IPV4_CIDR = "0.0.0.0/0"
SSH_PORT = 22
HTTP_PORT = 80
MAX_AZS = 1

# Stack idle waiter
STACK_WAIT_MAX_SECONDS = 1800
STACK_WAIT_DELAY_SECONDS = 30

# Environment variables
ENV_ACCOUNT_ID = "ACCOUNT_ID"
ENV_CERTIFICATE_ARN = "CERTIFICATE_ARN"
ENV_GOOGLE_APP_ID = "GOOGLE_APP_ID"
ENV_GOOGLE_APP_SECRET = "GOOGLE_APP_SECRET"
ENV_LOG_LEVEL = "LOG_LEVEL"
