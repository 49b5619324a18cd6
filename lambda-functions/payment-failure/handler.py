"""
Lambda function to queue failed payment emails.
Triggered by API Gateway when Zuora posts a payment failure callout.
"""

from payment_failure.handler import lambda_handler

__all__ = ['lambda_handler']
