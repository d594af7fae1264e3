"""
AWS Secrets Manager access for database and Cognito credentials.
"""
import json
import boto3
from botocore.exceptions import ClientError
import logging

logger = logging.getLogger(__name__)


def get_secret(secret_name: str, region_name: str = "ap-south-1") -> dict:
    """
    Fetch a JSON secret and parse it.

    Raises:
        ClientError: secret missing or not readable
    """
    client = boto3.session.Session().client(
        service_name="secretsmanager",
        region_name=region_name,
    )
    try:
        response = client.get_secret_value(SecretId=secret_name)
    except ClientError as e:
        logger.error("Could not read secret %s: %s", secret_name, e.response["Error"]["Message"])
        raise
    logger.info("Secret %s retrieved.", secret_name)
    return json.loads(response["SecretString"])
