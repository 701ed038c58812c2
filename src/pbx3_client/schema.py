"""Field mutability metadata from ``GET /schemas``.

The PBX3 API publishes, for every resource, which fields are read-only, which
may be updated and what a new record defaults to::

    {"extensions": {"read_only": ["id"], "updateable": ["desc"], "defaults": {"cluster": "default"}}}

``SchemaCache`` fetches this once per session. Concurrent callers share one
request; a failed fetch is re-raised to everyone waiting on it and the next
call tries again.

Example:
    ```python
    schemas = SchemaCache(api, session=session)
    await schemas.ensure_loaded()

    ext = schemas.get_schema("extensions")
    if ext and ext.is_read_only("pkey"):
        ...
    schemas.apply_defaults("extensions", form, fields=["cluster", "active"])
    ```
"""

import asyncio
import logging
from collections.abc import Iterable, Mapping, MutableMapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pbx3_client.client import ApiClient

logger = logging.getLogger(__name__)

SCHEMAS_PATH = "schemas"

EMPTY = "empty"
FETCHING = "fetching"
READY = "ready"


@dataclass(frozen=True)
class ResourceSchema:
    """Mutability rules and defaults for one resource."""

    read_only_fields: frozenset[str] = frozenset()
    updateable_fields: frozenset[str] = frozenset()
    defaults: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ResourceSchema":
        read_only = payload.get("read_only") or []
        updateable = payload.get("updateable") or []
        defaults = payload.get("defaults") or {}
        if not isinstance(defaults, Mapping):
            defaults = {}
        return cls(
            read_only_fields=frozenset(str(name) for name in read_only),
            updateable_fields=frozenset(str(name) for name in updateable),
            defaults=MappingProxyType(dict(defaults)),
        )

    def is_read_only(self, field_name: str) -> bool:
        return field_name in self.read_only_fields

    def is_updateable(self, field_name: str) -> bool:
        return field_name in self.updateable_fields


SchemaMap = Mapping[str, ResourceSchema]


def parse_schema_map(payload: Any) -> SchemaMap:
    """Build an immutable Schema Map from the ``/schemas`` response body."""
    if not isinstance(payload, Mapping):
        logger.warning(f"Unexpected /schemas payload of type {type(payload).__name__}; using empty schema")
        return MappingProxyType({})

    schemas = {}
    for name, entry in payload.items():
        if not isinstance(entry, Mapping):
            logger.warning(f"Skipping malformed schema entry for {name!r}")
            continue
        schemas[name] = ResourceSchema.from_payload(entry)
    return MappingProxyType(schemas)


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _consume_exception(task: asyncio.Task) -> None:
    # Every waiter may have been cancelled before the fetch failed.
    if not task.cancelled():
        task.exception()


class SchemaCache:
    """Single-flight, session-scoped cache of resource schemas.

    States: ``empty`` (nothing loaded), ``fetching`` (one request outstanding)
    and ``ready``. A failed fetch records ``last_error`` and returns to
    ``empty``.

    Args:
        client: API client used for ``GET /schemas``.
        session: Optional session exposing ``subscribe``; the cache resets on
            every login or logout it reports.
    """

    def __init__(self, client: "ApiClient", *, session: Any = None) -> None:
        self._client = client
        self._schemas: SchemaMap | None = None
        self._inflight: asyncio.Task | None = None
        self._generation = 0
        self.last_error: BaseException | None = None

        subscribe = getattr(session, "subscribe", None)
        self._unsubscribe = subscribe(lambda _session: self.reset()) if callable(subscribe) else None

    @property
    def state(self) -> str:
        if self._schemas is not None:
            return READY
        if self._inflight is not None:
            return FETCHING
        return EMPTY

    @property
    def loading(self) -> bool:
        return self._inflight is not None

    @property
    def schemas(self) -> SchemaMap | None:
        return self._schemas

    async def ensure_loaded(self) -> SchemaMap:
        """Load the Schema Map unless it already is, and return it.

        Raises:
            APIError: The fetch failed. Every caller awaiting that fetch gets
                the same exception.
        """
        if self._schemas is not None:
            return self._schemas
        if self._inflight is None:
            self.last_error = None
            self._inflight = asyncio.ensure_future(self._fetch(self._generation))
            self._inflight.add_done_callback(_consume_exception)
        # Shielded so a cancelled caller does not cancel the shared fetch.
        return await asyncio.shield(self._inflight)

    async def _fetch(self, generation: int) -> SchemaMap:
        try:
            payload = await self._client.get(SCHEMAS_PATH)
            schemas = parse_schema_map(payload)
        except Exception as e:
            if generation == self._generation:
                self.last_error = e
                logger.warning(f"Schema fetch failed: {e}")
            raise
        else:
            if generation == self._generation:
                self._schemas = schemas
                logger.debug(f"Loaded schemas for {len(schemas)} resources")
            return schemas
        finally:
            # A reset() during the fetch already handed the slot to a new session.
            if generation == self._generation:
                self._inflight = None

    def get_schema(self, resource: str) -> ResourceSchema | None:
        """Schema for ``resource``, or None if not loaded or unknown. Never fetches."""
        if self._schemas is None:
            return None
        return self._schemas.get(resource)

    def apply_defaults(
        self,
        resource: str,
        target: MutableMapping[str, Any],
        fields: Iterable[str] | None = None,
    ) -> list[str]:
        """Preset form values in ``target`` from the resource's defaults.

        Args:
            resource: Resource name, e.g. ``"extensions"``.
            target: Mutable form state keyed by field name.
            fields: Fields to preset; defaults to the keys already in ``target``.

        Returns:
            The field names that were set. Defaults that are None, missing or
            ``""`` are skipped; every other default is stored as a string, with
            booleans as ``"true"``/``"false"``.
        """
        schema = self.get_schema(resource)
        if schema is None:
            return []

        applied = []
        for key in list(target.keys() if fields is None else fields):
            value = schema.defaults.get(key)
            if value is None or value == "":
                continue
            target[key] = _form_value(value)
            applied.append(key)
        return applied

    def reset(self) -> None:
        """Forget the loaded schema; a fetch already in flight is detached."""
        self._generation += 1
        self._schemas = None
        self._inflight = None
        self.last_error = None

    def close(self) -> None:
        """Stop following session changes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
