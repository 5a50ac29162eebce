"""
Origin override merge.

Every field the override supplies replaces the base field wholesale, with one exception.
Origin Shield, origin access control and the custom origin config are swapped as whole
objects. `timeouts` is the exception: it is merged per setting, so an override of
`{"timeouts": {"readTimeout": 30}}` keeps the assigned origin's keep-alive and connection
timeouts. Unspecified origin settings are inherited from the assigned origin, and the
individual timeouts are settings in their own right. Replacing the whole timeouts object
would silently reset them to host defaults.
"""

import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError

from edgefn.errors import InvalidOriginOverrideError
from edgefn.models.origin import Origin, OriginOverride

logger = logging.getLogger(__name__)

# Nested objects merged setting-by-setting instead of replaced.
MERGED_PER_FIELD = {"timeouts"}


def _field_path(err: ValidationError) -> tuple[str, str]:
    first = err.errors(include_url=False)[0]
    path = ".".join(str(part) for part in first["loc"]) or "override"
    return path, first["msg"]


def parse_override(override: Union[OriginOverride, Mapping[str, Any]]) -> OriginOverride:
    """Validate a literal override. Raises InvalidOriginOverrideError naming the bad field."""
    if isinstance(override, OriginOverride):
        return override
    try:
        return OriginOverride.model_validate(override)
    except ValidationError as e:
        field, msg = _field_path(e)
        raise InvalidOriginOverrideError(field, msg) from e


def merge(
    base: Union[Origin, Mapping[str, Any]],
    override: Union[OriginOverride, Mapping[str, Any]],
) -> Origin:
    """Combine `base` with a partial `override` into a new effective origin.

    `base` is never mutated. An explicit null in the override counts as absent, while an
    empty `customHeaders` mapping clears every custom header.
    """
    base_origin = base if isinstance(base, Origin) else Origin.model_validate(base)
    patch = parse_override(override)

    merged = base_origin.model_dump(exclude_none=True)
    for name, value in patch.model_dump(exclude_unset=True, exclude_none=True).items():
        if name in MERGED_PER_FIELD and name in merged:
            merged[name] = {**merged[name], **value}
        else:
            merged[name] = value

    try:
        effective = Origin.model_validate(merged)
    except ValidationError as e:
        field, msg = _field_path(e)
        raise InvalidOriginOverrideError(field, msg) from e
    logger.debug("Merged origin override for %s -> %s", base_origin.domain_name, effective.domain_name)
    return effective
