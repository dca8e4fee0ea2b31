"""Repository for stored Shopify sessions."""

from typing import Any

from sqlalchemy.orm import Session

from shopify_app.db.models import ShopifySessionRecord


class SessionRepository:
    """Data access for the shopify_sessions table.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, id: str) -> ShopifySessionRecord | None:
        """Get a session record by id."""
        return self.db.get(ShopifySessionRecord, id)

    def list_by_shop(self, shop: str) -> list[ShopifySessionRecord]:
        """List all session records for a shop."""
        return (
            self.db.query(ShopifySessionRecord)
            .filter(ShopifySessionRecord.shop == shop)
            .order_by(ShopifySessionRecord.id)
            .all()
        )

    def upsert(self, data: dict[str, Any]) -> ShopifySessionRecord:
        """Insert a session record or overwrite the one with the same id."""
        record = self.get_by_id(data["id"])
        if record is None:
            record = ShopifySessionRecord(**data)
            self.db.add(record)
        else:
            for key, value in data.items():
                setattr(record, key, value)
        self.db.flush()
        return record

    def delete_by_id(self, id: str) -> int:
        """Delete a session record. Returns the number of rows removed."""
        return (
            self.db.query(ShopifySessionRecord)
            .filter(ShopifySessionRecord.id == id)
            .delete(synchronize_session=False)
        )

    def delete_by_ids(self, ids: list[str]) -> int:
        """Delete several session records. Returns the number of rows removed."""
        if not ids:
            return 0
        return (
            self.db.query(ShopifySessionRecord)
            .filter(ShopifySessionRecord.id.in_(ids))
            .delete(synchronize_session=False)
        )
