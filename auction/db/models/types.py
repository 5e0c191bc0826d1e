"""
Column types shared by the models.
"""

from sqlalchemy import BigInteger, Integer

# BIGSERIAL on PostgreSQL; SQLite only autoincrements INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")
