"""
KeyValueStore metadata snapshot returned by `meta()`.
"""

from datetime import datetime

from pydantic import Field

from edgefn.models.wire import WireModel


class KvsMetadata(WireModel):
    creation_date_time: datetime
    last_updated_date_time: datetime  # last sync from source, excludes edge propagation
    key_count: int = Field(ge=0)

    model_config = {"frozen": True}
