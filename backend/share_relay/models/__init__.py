from share_relay.models.share_record import ShareRecord

__all__ = [
    "ShareRecord",
]
