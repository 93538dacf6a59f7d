"""
Per-User Partition Repository

Owns the key layout and the encoding of everything the store persists:

    budgets.<user_id>       list of named budgets with their expenses
    misc_budget.<user_id>   the miscellaneous budget
    assets.<user_id>        list of assets with their detail payloads
    current_user            the single local user record (global)
    session                 id of the signed-in user, removed on logout (global)

DESIGN DECISION: Values are pydantic JSON, indented so the files stay
readable. Each save encodes the whole collection and hands it to the
backend as one atomic replace; there are no partial or append writes.

Backend failures and undecodable data surface as PersistenceError. What
to do about them (log, fall back to empty) is the caller's decision.
"""

import json
from typing import Optional

from pydantic import BaseModel, TypeAdapter

from pocketledger.errors import PersistenceError
from pocketledger.models.asset import Asset
from pocketledger.models.budget import Budget
from pocketledger.models.user import User
from pocketledger.services.storage.interface import KeyValueStorage, StorageError


BUDGETS = "budgets"
MISC_BUDGET = "misc_budget"
ASSETS = "assets"
CURRENT_USER_KEY = "current_user"
SESSION_KEY = "session"

_budget_list = TypeAdapter(list[Budget])
_asset_list = TypeAdapter(list[Asset])


def partition_key(partition: str, user_id: str) -> str:
    """Namespace a partition by user id."""
    if not user_id:
        raise ValueError("user_id is required for per-user partitions")
    return f"{partition}.{user_id}"


def encode_budgets(budgets: list[Budget]) -> bytes:
    return _budget_list.dump_json(budgets, indent=2)


def decode_budgets(data: bytes) -> list[Budget]:
    return _budget_list.validate_json(data)


def encode_assets(assets: list[Asset]) -> bytes:
    return _asset_list.dump_json(assets, indent=2)


def decode_assets(data: bytes) -> list[Asset]:
    return _asset_list.validate_json(data)


def encode_record(record: BaseModel) -> bytes:
    return record.model_dump_json(indent=2).encode("utf-8")


class PartitionRepository:
    """Reads and writes the store's collections through a KeyValueStorage."""

    def __init__(self, storage: KeyValueStorage):
        self._storage = storage

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage

    # -------------------------------------------------------------------------
    # Low-level helpers
    # -------------------------------------------------------------------------

    def _read(self, key: str, decode, partition: str):
        try:
            data = self._storage.load(key)
        except StorageError as e:
            raise PersistenceError(str(e), partition=partition) from e
        if data is None:
            return None
        try:
            return decode(data)
        except (ValueError, AttributeError) as e:
            raise PersistenceError(
                f"Stored {partition} could not be decoded: {e}",
                partition=partition,
            ) from e

    def _write(self, key: str, data: bytes, partition: str) -> None:
        try:
            self._storage.save(key, data)
        except StorageError as e:
            raise PersistenceError(str(e), partition=partition) from e

    # -------------------------------------------------------------------------
    # Per-user partitions
    # -------------------------------------------------------------------------

    def load_budgets(self, user_id: str) -> list[Budget]:
        budgets = self._read(partition_key(BUDGETS, user_id), decode_budgets, BUDGETS)
        return budgets or []

    def save_budgets(self, user_id: str, budgets: list[Budget]) -> None:
        self._write(partition_key(BUDGETS, user_id), encode_budgets(budgets), BUDGETS)

    def load_misc_budget(self, user_id: str) -> Optional[Budget]:
        budget = self._read(
            partition_key(MISC_BUDGET, user_id),
            Budget.model_validate_json,
            MISC_BUDGET,
        )
        if budget is not None and not budget.is_miscellaneous:
            budget = budget.model_copy(update={"is_miscellaneous": True})
        return budget

    def save_misc_budget(self, user_id: str, budget: Budget) -> None:
        self._write(partition_key(MISC_BUDGET, user_id), encode_record(budget), MISC_BUDGET)

    def load_assets(self, user_id: str) -> list[Asset]:
        assets = self._read(partition_key(ASSETS, user_id), decode_assets, ASSETS)
        return assets or []

    def save_assets(self, user_id: str, assets: list[Asset]) -> None:
        self._write(partition_key(ASSETS, user_id), encode_assets(assets), ASSETS)

    # -------------------------------------------------------------------------
    # Global records
    # -------------------------------------------------------------------------

    def load_current_user(self) -> Optional[User]:
        return self._read(CURRENT_USER_KEY, User.model_validate_json, CURRENT_USER_KEY)

    def save_current_user(self, user: User) -> None:
        self._write(CURRENT_USER_KEY, encode_record(user), CURRENT_USER_KEY)

    def load_session_user_id(self) -> Optional[str]:
        def decode(data: bytes) -> Optional[str]:
            return json.loads(data).get("user_id")

        return self._read(SESSION_KEY, decode, SESSION_KEY)

    def save_session(self, user_id: str) -> None:
        self._write(SESSION_KEY, json.dumps({"user_id": user_id}).encode("utf-8"), SESSION_KEY)

    def clear_session(self) -> None:
        try:
            self._storage.delete(SESSION_KEY)
        except StorageError as e:
            raise PersistenceError(str(e), partition=SESSION_KEY) from e
