"""SQS publisher for notification messages."""

import json
import logging
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import PublishFailure
from .models import NotificationMessage

logger = logging.getLogger(__name__)


class SqsQueueClient:
    """Publishes notification messages to a named SQS queue."""

    def __init__(self, queue_name: str, sqs=None):
        self.queue_name = queue_name
        self.sqs = sqs or boto3.client('sqs')
        self._queue_url: Optional[str] = None

    @property
    def queue_url(self) -> str:
        if self._queue_url is None:
            self._queue_url = self.sqs.get_queue_url(QueueName=self.queue_name)['QueueUrl']
        return self._queue_url

    def send_data_extension_to_queue(self, message: NotificationMessage, account_id: str) -> Dict[str, Any]:
        """
        Send one message to the queue, without retrying.

        Raises:
            PublishFailure: If SQS rejects the message or cannot be reached.
        """
        try:
            response = self.sqs.send_message(
                QueueUrl=self.queue_url,
                MessageBody=json.dumps(message.to_dict()),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Could not enqueue message for account: {account_id}: {e}")
            raise PublishFailure(account_id) from e
        logger.info(f"Message queued successfully for account: {account_id} ({response.get('MessageId')})")
        return response
