"""In-memory stand-in for the Supabase client used by the services.

Implements the PostgREST query-builder calls the services make
(select/insert/upsert/update, eq/is_/in_, order/limit, execute) plus the
link_partners and unlink_partners RPCs. Unique constraints mirror the
database so conflicts surface as postgrest APIError with code 23505.
"""

import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from postgrest.exceptions import APIError as PostgrestAPIError

UNIQUE_CONSTRAINTS: dict[str, list[tuple[str, ...]]] = {
    "profiles": [("id",)],
    "couples": [("id",), ("invite_code",)],
    "profile_couples": [("profile_id", "couple_id")],
    "couple_invitations": [("id",)],
}

TABLES_WITH_ID = {"profiles", "couples", "couple_invitations"}

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


class FakeResponse:
    """Mimics postgrest's APIResponse."""

    def __init__(self, data: list[dict[str, Any]]) -> None:
        self.data = data
        self.count = len(data)


class FakeQuery:
    """Single-use query builder bound to one table."""

    def __init__(self, store: "FakeSupabaseStore", table: str) -> None:
        self.store = store
        self.table_name = table
        self.operation = "select"
        self.columns = "*"
        self.payload: dict[str, Any] | None = None
        self.on_conflict = ""
        self.ignore_duplicates = False
        self.filters: list[tuple[str, str, Any]] = []
        self.order_by: tuple[str, bool] | None = None
        self.row_limit: int | None = None

    def select(self, columns: str = "*") -> "FakeQuery":
        self.columns = columns
        return self

    def insert(self, payload: dict[str, Any]) -> "FakeQuery":
        self.operation = "insert"
        self.payload = dict(payload)
        return self

    def upsert(
        self, payload: dict[str, Any], on_conflict: str = "", ignore_duplicates: bool = False, **_: Any
    ) -> "FakeQuery":
        self.operation = "upsert"
        self.payload = dict(payload)
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def update(self, payload: dict[str, Any]) -> "FakeQuery":
        self.operation = "update"
        self.payload = dict(payload)
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(("eq", column, value))
        return self

    def is_(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(("is", column, value))
        return self

    def in_(self, column: str, values: list[Any]) -> "FakeQuery":
        self.filters.append(("in", column, [str(v) for v in values]))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.row_limit = size
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        for kind, column, value in self.filters:
            current = row.get(column)
            if kind == "eq" and (current is None or str(current) != str(value)):
                return False
            if kind == "is" and value in (None, "null") and current is not None:
                return False
            if kind == "in" and str(current) not in value:
                return False
        return True

    def _project(self, row: dict[str, Any]) -> dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [name.strip() for name in self.columns.split(",") if name.strip()]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def execute(self) -> FakeResponse:
        self.store.raise_if_failing(self.table_name, self.operation)
        rows = self.store.tables.setdefault(self.table_name, [])

        if self.operation == "select":
            selected = [row for row in rows if self._matches(row)]
            if self.order_by:
                column, desc = self.order_by
                selected.sort(key=lambda r: (r.get(column) is None, str(r.get(column))), reverse=desc)
            if self.row_limit is not None:
                selected = selected[: self.row_limit]
            return FakeResponse([self._project(row) for row in selected])

        self.store.writes.append((self.table_name, self.operation))

        if self.operation == "insert":
            return FakeResponse([self.store.insert_row(self.table_name, self.payload or {})])

        if self.operation == "upsert":
            keys = [k.strip() for k in self.on_conflict.split(",") if k.strip()] or ["id"]
            payload = self.payload or {}
            for row in rows:
                if all(str(row.get(k)) == str(payload.get(k)) for k in keys):
                    if self.ignore_duplicates:
                        return FakeResponse([])
                    row.update(payload)
                    return FakeResponse([copy.deepcopy(row)])
            return FakeResponse([self.store.insert_row(self.table_name, payload)])

        updated = []
        for row in rows:
            if self._matches(row):
                row.update(self.payload or {})
                updated.append(copy.deepcopy(row))
        return FakeResponse(updated)


class FakeRpc:
    """Deferred RPC call."""

    def __init__(self, store: "FakeSupabaseStore", name: str, params: dict[str, Any]) -> None:
        self.store = store
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        self.store.raise_if_failing("rpc", self.name)
        self.store.writes.append(("rpc", self.name))

        if self.name == "link_partners":
            inviter, invitee = self.params["inviter_id"], self.params["invitee_id"]
            self.store.get_row("profiles", inviter)["partner_id"] = invitee
            self.store.get_row("profiles", invitee)["partner_id"] = inviter
            self.store.get_row("couple_invitations", self.params["p_invitation_id"])["status"] = "accepted"
            return FakeResponse([])

        if self.name == "unlink_partners":
            for user_id in (self.params["user_id_1"], self.params["user_id_2"]):
                self.store.get_row("profiles", user_id)["partner_id"] = None
            return FakeResponse([])

        raise PostgrestAPIError({"message": f"function {self.name} does not exist", "code": "42883"})


class FakeSupabaseStore:
    """Supabase client replacement holding every table in memory."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {name: [] for name in UNIQUE_CONSTRAINTS}
        self.writes: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], PostgrestAPIError] = {}
        self._clock = itertools.count()

    # Supabase client surface

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict[str, Any] | None = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})

    # Test helpers

    def fail(self, table: str, operation: str, code: str = "XX000", message: str = "boom") -> None:
        """Make the next matching call raise a postgrest APIError."""
        self.failures[(table, operation)] = PostgrestAPIError({"message": message, "code": code})

    def raise_if_failing(self, table: str, operation: str) -> None:
        error = self.failures.pop((table, operation), None)
        if error is not None:
            raise error

    def next_timestamp(self) -> str:
        return (_EPOCH + timedelta(seconds=next(self._clock))).isoformat()

    def insert_row(self, table: str, payload: dict[str, Any]) -> dict[str, Any]:
        row = dict(payload)
        if table in TABLES_WITH_ID:
            row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self.next_timestamp())

        for constraint in UNIQUE_CONSTRAINTS.get(table, []):
            if any(row.get(col) is None for col in constraint):
                continue
            for existing in self.tables[table]:
                if all(str(existing.get(col)) == str(row.get(col)) for col in constraint):
                    raise PostgrestAPIError(
                        {
                            "message": f"duplicate key value violates unique constraint on {table}",
                            "code": "23505",
                        }
                    )

        self.tables[table].append(row)
        return copy.deepcopy(row)

    def get_row(self, table: str, row_id: str) -> dict[str, Any]:
        for row in self.tables[table]:
            if str(row.get("id")) == str(row_id):
                return row
        raise PostgrestAPIError({"message": f"{table} row {row_id} not found", "code": "P0002"})

    def add_profile(self, profile_id: str, display_name: str = "Test User", **fields: Any) -> dict[str, Any]:
        defaults = {
            "avatar_url": None,
            "theme": None,
            "first_name": None,
            "last_name": None,
            "nickname": None,
            "age": None,
            "email": None,
            "partner_id": None,
            "confirmed_at": None,
        }
        defaults.update(fields)
        return self.insert_row("profiles", {"id": profile_id, "display_name": display_name, **defaults})

    def add_couple(self, name: str | None = "Test Couple", invite_code: str | None = "ABCD2345") -> dict[str, Any]:
        return self.insert_row("couples", {"name": name, "invite_code": invite_code})

    def add_membership(
        self,
        profile_id: str,
        couple_id: str,
        status: str = "accepted",
        role: str | None = "member",
    ) -> dict[str, Any]:
        return self.insert_row(
            "profile_couples",
            {"profile_id": profile_id, "couple_id": couple_id, "status": status, "role": role},
        )

    def memberships_for(self, profile_id: str) -> list[dict[str, Any]]:
        return [row for row in self.tables["profile_couples"] if str(row["profile_id"]) == str(profile_id)]
