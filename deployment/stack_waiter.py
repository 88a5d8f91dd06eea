"""Pre-flight guard that waits for a CloudFormation stack to settle.

Submitting a deployment while the same stack is still being created, updated
or deleted fails with a concurrent modification error. ``wait_for_stack_idle``
looks at the current stack status once and, if a mutation is in flight, blocks
on the matching boto3 waiter until it finishes or the maximum wait elapses.

Any failure (missing stack, denied or unreachable API, waiter timeout) is
logged and treated as "idle": the check is best effort and never stops a
deployment.
"""
import math
import os
from enum import Enum
from typing import Any, Optional

import boto3
from attrs import define, field
from attrs.validators import instance_of, optional
from aws_lambda_powertools.logging.logger import Logger
from botocore.exceptions import BotoCoreError, ClientError, WaiterError

import common.constants as constants

logger: Logger = Logger(
    service=constants.SERVICE_NAME,
    level=os.getenv(constants.ENV_LOG_LEVEL, "INFO").upper(),
)


class StackStatus(str, Enum):
    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"


class WaitOutcome(str, Enum):
    IDLE = "idle"
    COMPLETE = "complete"


# In-progress status -> boto3 waiter that resolves it
IN_PROGRESS_WAITERS = {
    StackStatus.CREATE_IN_PROGRESS.value: "stack_create_complete",
    StackStatus.UPDATE_IN_PROGRESS.value: "stack_update_complete",
    StackStatus.DELETE_IN_PROGRESS.value: "stack_delete_complete",
}


@define(slots=True, frozen=True)
class StackStatusSnapshot:
    stack_name: str = field(validator=instance_of(str))
    status: Optional[str] = field(default=None, validator=optional(instance_of(str)))

    @property
    def exists(self) -> bool:
        return self.status is not None

    @property
    def waiter_name(self) -> Optional[str]:
        if self.status is None:
            return None
        return IN_PROGRESS_WAITERS.get(self.status)

    @property
    def in_progress(self) -> bool:
        return self.waiter_name is not None


def build_waiter_config(
    max_wait_seconds: int = constants.STACK_WAIT_MAX_SECONDS,
    delay_seconds: int = constants.STACK_WAIT_DELAY_SECONDS,
) -> dict[str, int]:
    """Translate a maximum wait into boto3 ``WaiterConfig`` (Delay/MaxAttempts)."""
    if delay_seconds <= 0:
        raise ValueError("delay_seconds must be positive")
    max_attempts = max(1, math.ceil(max_wait_seconds / delay_seconds))
    return {"Delay": delay_seconds, "MaxAttempts": max_attempts}


def describe_stack_status(client: Any, stack_name: str) -> StackStatusSnapshot:
    """Fetch the current status of ``stack_name``. Client errors propagate."""
    response = client.describe_stacks(StackName=stack_name)
    stacks = response.get("Stacks") or []
    status = stacks[0].get("StackStatus") if stacks else None
    return StackStatusSnapshot(stack_name=stack_name, status=status)


def wait_for_stack_idle(
    stack_name: str,
    cloudformation_client: Optional[Any] = None,
    max_wait_seconds: int = constants.STACK_WAIT_MAX_SECONDS,
    delay_seconds: int = constants.STACK_WAIT_DELAY_SECONDS,
) -> WaitOutcome:
    """Wait for an existing stack to leave any create/update/delete in progress.

    Returns ``WaitOutcome.COMPLETE`` when an in-flight mutation was awaited to
    its terminal state, ``WaitOutcome.IDLE`` otherwise. Never raises.
    """
    try:
        client = cloudformation_client
        if client is None:
            client = boto3.client("cloudformation", region_name=constants.DEFAULT_REGION)
        snapshot = describe_stack_status(client, stack_name)

        if not snapshot.exists:
            logger.info("Stack has no status, nothing to wait for", stack_name=stack_name)
            return WaitOutcome.IDLE

        if not snapshot.in_progress:
            logger.info(
                "Stack is idle", stack_name=stack_name, stack_status=snapshot.status
            )
            return WaitOutcome.IDLE

        waiter_config = build_waiter_config(max_wait_seconds, delay_seconds)
        logger.info(
            "Waiting for in-flight stack operation",
            stack_name=stack_name,
            stack_status=snapshot.status,
            waiter=snapshot.waiter_name,
            waiter_config=waiter_config,
        )
        waiter = client.get_waiter(snapshot.waiter_name)
        waiter.wait(StackName=stack_name, WaiterConfig=waiter_config)
        logger.info("Stack operation finished", stack_name=stack_name)
        return WaitOutcome.COMPLETE

    # Absent stacks and failed queries are indistinguishable here; both mean
    # nothing is blocking the next deployment.
    except WaiterError as e:
        logger.warning(
            "Stack waiter did not reach a success state, proceeding",
            stack_name=stack_name,
            reason=e.kwargs.get("reason"),
        )
        return WaitOutcome.IDLE
    except ClientError as e:
        error_info = e.response.get("Error", {})
        logger.info(
            "Stack status unavailable, proceeding",
            stack_name=stack_name,
            error_code=error_info.get("Code", "Unknown"),
            error_message=error_info.get("Message", "Unknown"),
        )
        return WaitOutcome.IDLE
    except BotoCoreError:
        logger.warning("Could not reach CloudFormation, proceeding", stack_name=stack_name)
        return WaitOutcome.IDLE
    except Exception:
        logger.exception("Unexpected error while checking stack status", stack_name=stack_name)
        return WaitOutcome.IDLE
