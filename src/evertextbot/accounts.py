# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""JSON account database."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from evertextbot.crypto import decrypt_code
from evertextbot.logging import get_logger
from evertextbot.models import Account, AccountDatabase

logger = get_logger(__name__)


class AccountStoreError(RuntimeError):
    """Raised when the account database cannot be read."""


class AccountStore:
    """File-backed account database: ``{"accounts": [...], "settings": {...}}``."""

    def __init__(self, path: str | Path = "db.json") -> None:
        self.path = Path(path)

    def load(self) -> AccountDatabase:
        if not self.path.exists():
            raise AccountStoreError(f"account database not found: {self.path}")
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return AccountDatabase.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise AccountStoreError(f"invalid account database {self.path}: {e}") from e

    def save(self, db: AccountDatabase) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".tmp")
        payload = db.model_dump(mode="json", by_alias=True, exclude_none=True)
        tmp.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def get(self, name: str) -> Account:
        for account in self.load().accounts:
            if account.name == name:
                return account
        raise KeyError(name)


def migrate_database(src: str | Path, dst: str | Path, passphrase: str) -> AccountDatabase:
    """Decrypt every ``encryptedCode`` into a plain ``code`` and write ``dst``.

    Accounts whose code cannot be decrypted keep an empty code.
    """
    db = AccountStore(src).load()
    logger.info("migrate_loaded", accounts=len(db.accounts), src=str(src))

    migrated: list[Account] = []
    for account in db.accounts:
        plain = decrypt_code(account.encrypted_code, passphrase) if account.encrypted_code else None
        if not plain:
            logger.warning("migrate_decrypt_failed", account=account.name)
            plain = ""
        migrated.append(account.model_copy(update={"code": plain, "encrypted_code": None, "ping_enabled": False}))

    result = AccountDatabase(accounts=migrated, settings=db.settings)
    AccountStore(dst).save(result)
    logger.info("migrate_saved", dst=str(dst))
    return result
