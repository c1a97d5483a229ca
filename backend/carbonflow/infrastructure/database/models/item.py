"""SQLAlchemy ORM model for the single-table item store."""

from sqlalchemy import Index, Integer, JSON, String, text
from sqlalchemy.orm import Mapped, mapped_column

from carbonflow.infrastructure.database.base import Base


class ItemModel(Base):
    """ORM model: maps to the shared 'items' table.

    Every entity type lives here. ``pk``/``sk`` address the canonical item;
    the ``gsiN`` pairs are secondary-index projections written alongside the
    attributes, and ``entity_type`` doubles as the partition of the type index.
    """

    __tablename__ = "items"

    pk: Mapped[str] = mapped_column(String(255), primary_key=True)
    sk: Mapped[str] = mapped_column(String(255), primary_key=True)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)

    gsi1pk: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gsi1sk: Mapped[str | None] = mapped_column(String(512), nullable=True)
    gsi2pk: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gsi2sk: Mapped[str | None] = mapped_column(String(512), nullable=True)
    gsi3pk: Mapped[str | None] = mapped_column(String(255), nullable=True)
    gsi3sk: Mapped[str | None] = mapped_column(String(512), nullable=True)

    attributes: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    dependent_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=text("1")
    )
    # Fixed-width UTC strings so they sort correctly inside index keys.
    created_at: Mapped[str] = mapped_column(String(32), nullable=False)
    updated_at: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (
        Index("ix_items_type", "entity_type", "pk"),
        Index("ix_items_gsi1", "gsi1pk", "gsi1sk"),
        Index("ix_items_gsi2", "gsi2pk", "gsi2sk"),
        Index("ix_items_gsi3", "gsi3pk", "gsi3sk"),
    )

    def __repr__(self) -> str:
        return f"<ItemModel(pk='{self.pk}', sk='{self.sk}', type='{self.entity_type}')>"
