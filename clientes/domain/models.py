from datetime import datetime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, DateTime, func

class Base(DeclarativeBase):
    pass

class Cliente(Base):
    __tablename__ = "clientes"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Column names follow the existing Portuguese schema
    name: Mapped[str] = mapped_column("nome", String(100))
    tax_id: Mapped[str] = mapped_column("cpf", String(14), unique=True)
    address: Mapped[str] = mapped_column("endereco", String(200))
    email: Mapped[str] = mapped_column(String(100), unique=True)
    # Stored as plain text
    password: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
