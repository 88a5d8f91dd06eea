from unittest.mock import MagicMock

import pytest
from aws_cdk.assertions import Template
from botocore.exceptions import ClientError

import app as entrypoint
from common.settings import MissingConfigurationError
from deployment.stack_waiter import WaitOutcome
from stack_test_helpers import (
    TEST_ACCOUNT,
    TEST_CERTIFICATE_ARN,
    TEST_GOOGLE_APP_ID,
    TEST_GOOGLE_APP_SECRET,
)

STACK_NAME = "icssc-knowledge-base"


@pytest.fixture
def configured_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(entrypoint, "load_environment", lambda: False)
    monkeypatch.setenv("ACCOUNT_ID", TEST_ACCOUNT)
    monkeypatch.setenv("CERTIFICATE_ARN", TEST_CERTIFICATE_ARN)
    monkeypatch.setenv("GOOGLE_APP_ID", TEST_GOOGLE_APP_ID)
    monkeypatch.setenv("GOOGLE_APP_SECRET", TEST_GOOGLE_APP_SECRET)
    monkeypatch.delenv("CDK_OUTDIR", raising=False)
    return monkeypatch


def test_main_waits_before_building_stack(configured_env: pytest.MonkeyPatch):
    events = []
    real_stack = entrypoint.KnowledgeBaseStack

    def fake_wait(stack_name):
        events.append(("wait", stack_name))
        return WaitOutcome.IDLE

    def recording_stack(*args, **kwargs):
        events.append(("stack", args[1]))
        return real_stack(*args, **kwargs)

    configured_env.setattr(entrypoint, "wait_for_stack_idle", fake_wait)
    configured_env.setattr(entrypoint, "KnowledgeBaseStack", recording_stack)

    entrypoint.main()

    assert events == [("wait", STACK_NAME), ("stack", STACK_NAME)]


def test_main_builds_stack_for_account(configured_env: pytest.MonkeyPatch):
    configured_env.setattr(
        entrypoint, "wait_for_stack_idle", lambda stack_name: WaitOutcome.COMPLETE
    )

    cdk_app = entrypoint.main()

    stack = cdk_app.node.find_child(STACK_NAME)
    assert stack.stack_name == STACK_NAME
    assert stack.account == TEST_ACCOUNT
    assert stack.region == "us-east-1"
    Template.from_stack(stack).resource_count_is("AWS::EC2::Instance", 1)


def test_main_requires_account_before_waiting(configured_env: pytest.MonkeyPatch):
    configured_env.delenv("ACCOUNT_ID")
    waited = []
    configured_env.setattr(entrypoint, "wait_for_stack_idle", waited.append)

    with pytest.raises(MissingConfigurationError, match="Account ID not defined. Stop."):
        entrypoint.main()

    assert waited == []


def test_stack_settings_checked_after_waiting(configured_env: pytest.MonkeyPatch):
    configured_env.delenv("GOOGLE_APP_SECRET")
    waited = []

    def fake_wait(stack_name):
        waited.append(stack_name)
        return WaitOutcome.IDLE

    configured_env.setattr(entrypoint, "wait_for_stack_idle", fake_wait)

    with pytest.raises(MissingConfigurationError, match="Google App Secret not defined. Stop."):
        entrypoint.main()

    assert waited == [STACK_NAME]


def test_main_proceeds_when_stack_does_not_exist(configured_env: pytest.MonkeyPatch):
    client = MagicMock()
    client.describe_stacks.side_effect = ClientError(
        {"Error": {"Code": "ValidationError", "Message": f"Stack with id {STACK_NAME} does not exist"}},
        "DescribeStacks",
    )
    configured_env.setattr(
        "deployment.stack_waiter.boto3.client", lambda *args, **kwargs: client
    )

    cdk_app = entrypoint.main()

    assert cdk_app.node.try_find_child(STACK_NAME) is not None
    client.describe_stacks.assert_called_once_with(StackName=STACK_NAME)
    client.get_waiter.assert_not_called()
