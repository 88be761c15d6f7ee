"""Invoice formatting for transactions."""

import json
from typing import Any, Dict

from paylite.models.transactions import TransactionModel


DEFAULT_MERCHANT_NAME = "PayLite+Loans"


def invoice_number(transaction_id: str) -> str:
    """Return `INV-` plus the last 8 characters of the id, upper-cased."""
    return "INV-{0}".format(transaction_id[-8:].upper())


def build_invoice_data(transaction: TransactionModel, merchant_fallback: str = DEFAULT_MERCHANT_NAME) -> Dict[str, Any]:
    """Return a JSON-safe invoice payload for one transaction."""
    return {
        "invoice_number": invoice_number(transaction.id),
        "transaction_id": transaction.id,
        "date": transaction.created_at.date().isoformat(),
        "amount": transaction.amount,
        "status": transaction.status.value,
        "channel": transaction.channel.value,
        "channel_ref": transaction.channel_ref,
        "description": transaction.description,
        "merchant_name": transaction.merchant_name or merchant_fallback,
    }


def render_invoice_json(transaction: TransactionModel, merchant_fallback: str = DEFAULT_MERCHANT_NAME) -> str:
    """Return the invoice as pretty-printed JSON."""
    return json.dumps(build_invoice_data(transaction, merchant_fallback), indent=2)
