from __future__ import annotations

from typing import Any

from trackgate.models.canonical import SchemaRef

PAYLOAD_DATA = SchemaRef(
    vendor="com.snowplowanalytics.snowplow",
    name="payload_data",
    version="1-0-4",
)

UNSTRUCT_EVENT = SchemaRef(
    vendor="com.snowplowanalytics.snowplow",
    name="unstruct_event",
    version="1-0-0",
)

CALLRAIL_CALL_COMPLETE = SchemaRef(
    vendor="com.callrail",
    name="call_complete",
    version="1-0-2",
)

_TRACKER_FIELDS = (
    "tna", "aid", "p", "dtm", "stm", "tz", "e", "tid", "eid", "tv", "duid", "nuid",
    "uid", "vid", "sid", "ip", "res", "url", "ua", "page", "refr", "fp", "ctype",
    "cookie", "lang", "f_pdf", "f_qt", "f_realp", "f_wma", "f_dir", "f_fla",
    "f_java", "f_gears", "f_ag", "cd", "ds", "cs", "vp", "mac", "pp_mix", "pp_max",
    "pp_miy", "pp_may", "ad_ba", "ad_ca", "ad_ad", "ad_uid", "tr_id", "tr_af",
    "tr_tt", "tr_tx", "tr_sh", "tr_ci", "tr_st", "tr_co", "tr_cu", "ti_id",
    "ti_sk", "ti_nm", "ti_na", "ti_ca", "ti_pr", "ti_qu", "ti_cu", "co", "cx",
    "ue_na", "ue_pr", "ue_px", "se_ca", "se_ac", "se_la", "se_pr", "se_va", "ttm",
)

PAYLOAD_DATA_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-04/schema#",
    "description": "Schema for a batch of tracker protocol events sent in a request body",
    "self": {
        "vendor": PAYLOAD_DATA.vendor,
        "name": PAYLOAD_DATA.name,
        "format": PAYLOAD_DATA.format,
        "version": PAYLOAD_DATA.version,
    },
    "type": "array",
    "items": {
        "type": "object",
        "properties": {field: {"type": "string"} for field in _TRACKER_FIELDS},
        "required": ["tv", "p", "e"],
        "additionalProperties": False,
    },
    "minItems": 1,
}

BUILTIN_SCHEMAS: dict[SchemaRef, dict[str, Any]] = {
    PAYLOAD_DATA: PAYLOAD_DATA_SCHEMA,
}
