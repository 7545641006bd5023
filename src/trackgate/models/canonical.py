from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

ParameterMap = dict[str, str]


class SchemaRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    vendor: str
    name: str
    format: str = "jsonschema"
    version: str = "1-0-0"

    @property
    def uri(self) -> str:
        return f"iglu:{self.vendor}/{self.name}/{self.format}/{self.version}"

    @classmethod
    def parse(cls, uri: str) -> SchemaRef:
        if not uri.startswith("iglu:"):
            raise ValueError(f"Schema URI {uri!r} does not start with 'iglu:'")
        parts = uri[len("iglu:"):].split("/")
        if len(parts) != 4 or not all(parts):
            raise ValueError(f"Schema URI {uri!r} is not of the form iglu:vendor/name/format/version")
        vendor, name, schema_format, version = parts
        return cls(vendor=vendor, name=name, format=schema_format, version=version)

    def __str__(self) -> str:
        return self.uri


class CollectorApi(BaseModel):
    model_config = ConfigDict(frozen=True)

    vendor: str
    version: str


class PayloadSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    encoding: str = "UTF-8"
    hostname: str | None = None


class PayloadContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime | None = None
    ip_address: str | None = None
    useragent: str | None = None
    referer_uri: str | None = None
    headers: tuple[str, ...] = ()
    user_id: str | None = None


class PayloadEnvelope(BaseModel):
    """One inbound request exactly as the transport received it."""

    model_config = ConfigDict(frozen=True)

    api: CollectorApi
    querystring: tuple[tuple[str, str], ...] = ()
    content_type: str | None = None
    body: str | None = None
    source: PayloadSource
    context: PayloadContext = Field(default_factory=PayloadContext)


class RawEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    api: CollectorApi
    parameters: ParameterMap
    content_type: str | None = None
    source: PayloadSource
    context: PayloadContext


def to_map(querystring: tuple[tuple[str, str], ...]) -> ParameterMap:
    """Flatten querystring pairs; a repeated key keeps its last value."""
    return {key: value for key, value in querystring}
