"""
Column types shared across models.

PostgreSQL is the production target. The variants let the same metadata run
on SQLite, where JSONB and TEXT[] are stored as JSON and INET as text.
"""
from sqlalchemy import JSON, TIMESTAMP, String, Text
from sqlalchemy.dialects.postgresql import ARRAY, INET, JSONB

JSONBType = JSONB().with_variant(JSON(), "sqlite")

TextArray = ARRAY(Text()).with_variant(JSON(), "sqlite")

IPAddress = INET().with_variant(String(45), "sqlite")

# Plain TIMESTAMP (without time zone); values are naive UTC
Timestamp = TIMESTAMP(timezone=False)
