"""Translation of verified transactions into outbound messages."""

from commerce_bridge.bridge.models import TransactionMessage
from commerce_bridge.store.models import Transaction


def translate_transaction(
    transaction: Transaction,
    receipt: str | None = None,
    restoring: bool = False,
) -> TransactionMessage:
    """Convert a verified transaction into the normalized outbound message.

    Args:
        transaction: Verified store transaction.
        receipt: Signed receipt payload, if the caller has one.
        restoring: Whether the message is delivered by a restore.

    Returns:
        TransactionMessage for the application.
    """
    return TransactionMessage(
        id=transaction.id,
        original_id=transaction.original_id,
        product_id=transaction.product_id,
        purchase_date=transaction.purchase_date.isoformat(),
        expiration_date=(
            transaction.expiration_date.isoformat()
            if transaction.expiration_date
            else None
        ),
        purchased_quantity=transaction.purchased_quantity,
        app_account_token=(
            str(transaction.app_account_token)
            if transaction.app_account_token
            else None
        ),
        restoring=restoring,
        receipt_data=receipt,
        json_representation=transaction.json_representation or None,
    )
