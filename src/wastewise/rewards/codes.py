"""Redemption code generation.

Codes are ``WW`` followed by 10 characters of A-Z0-9, generated server-side
with a cryptographic random source.
"""

from __future__ import annotations

import secrets
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wastewise.db.models import Redemption

CODE_PREFIX = "WW"
CODE_CHARSET = string.ascii_uppercase + string.digits
CODE_LENGTH = 10


def generate_redemption_code() -> str:
    """Generate a random redemption code."""
    return CODE_PREFIX + "".join(secrets.choice(CODE_CHARSET) for _ in range(CODE_LENGTH))


def normalize_redemption_code(code: str) -> str:
    """Normalize a code for case-insensitive lookup."""
    return code.strip().upper()


async def generate_unique_redemption_code(db: AsyncSession) -> str:
    """Generate a code that doesn't already exist in the database."""
    for _ in range(10):
        code = generate_redemption_code()
        existing = await db.execute(
            select(Redemption.id).where(Redemption.redemption_code == code)
        )
        if existing.scalar_one_or_none() is None:
            return code
    raise RuntimeError("Failed to generate unique redemption code after 10 attempts")
