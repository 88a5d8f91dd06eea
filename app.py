#!/usr/bin/env python3
"""AWS CDK entrypoint for provisioning the ICSSC knowledge base.

Before synthesizing, the entrypoint waits for any create/update/delete already
running on the stack so the new deployment does not collide with it. Required
values are read from the environment (or a local ``.env`` file): ACCOUNT_ID,
CERTIFICATE_ARN, GOOGLE_APP_ID and GOOGLE_APP_SECRET.
"""
import os

import aws_cdk as cdk
from aws_cdk import Environment
from aws_lambda_powertools.logging.logger import Logger

import common.constants as constants
from common.settings import load_environment, require_env
from deployment.stack_waiter import wait_for_stack_idle
from knowledge_base.knowledge_base_stack import KnowledgeBaseStack

logger: Logger = Logger(
    service=constants.SERVICE_NAME,
    level=os.getenv(constants.ENV_LOG_LEVEL, "INFO").upper(),
)


def main() -> cdk.App:
    load_environment()
    account = require_env(constants.ENV_ACCOUNT_ID)
    stack_name = constants.STACK_NAME

    outcome = wait_for_stack_idle(stack_name)
    logger.info("Pre-flight stack check finished", stack_name=stack_name, outcome=outcome.value)

    app = cdk.App()

    KnowledgeBaseStack(
        app,
        stack_name,
        stack_name=stack_name,
        env=Environment(account=account, region=constants.DEFAULT_REGION),
    )

    app.synth()
    return app


if __name__ == "__main__":
    main()
