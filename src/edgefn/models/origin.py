"""
Origin configuration models: the base origin assigned to a request and the partial
override a viewer-request handler may apply to it.
"""

from typing import Any, Literal, Optional

from pydantic import Field, field_validator, model_validator

from edgefn.models.wire import WireModel

SigningBehavior = Literal["always", "never", "no-override"]
SigningProtocol = Literal["sigv4"]
OriginType = Literal["s3", "lambda", "mediastore", "mediapackagev2"]
OriginProtocol = Literal["http", "https"]
SslProtocol = Literal["SSLv3", "TLSv1", "TLSv1.1", "TLSv1.2"]

MAX_ORIGIN_PATH = 255


class _OriginModel(WireModel):
    model_config = {"extra": "forbid"}

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class OriginShield(_OriginModel):
    enabled: bool
    region: Optional[str] = None

    @model_validator(mode="after")
    def _check_variant(self) -> "OriginShield":
        if self.enabled and not self.region:
            raise ValueError("region is required when enabled is true")
        if not self.enabled and self.region is not None:
            raise ValueError("region is only allowed when enabled is true")
        return self


class OriginAccessControlConfig(_OriginModel):
    enabled: bool
    signing_behavior: Optional[SigningBehavior] = None
    signing_protocol: Optional[SigningProtocol] = None
    origin_type: Optional[OriginType] = None

    @model_validator(mode="after")
    def _check_variant(self) -> "OriginAccessControlConfig":
        settings = {
            "signingBehavior": self.signing_behavior,
            "signingProtocol": self.signing_protocol,
            "originType": self.origin_type,
        }
        if self.enabled:
            missing = [name for name, value in settings.items() if value is None]
            if missing:
                raise ValueError(f"{', '.join(missing)} required when enabled is true")
        else:
            given = [name for name, value in settings.items() if value is not None]
            if given:
                raise ValueError(f"{', '.join(given)} only allowed when enabled is true")
        return self


class Timeouts(_OriginModel):
    """All values are seconds."""
    read_timeout: Optional[int] = Field(default=None, ge=1, le=60)
    keep_alive_timeout: Optional[int] = Field(default=None, ge=1, le=60)
    connection_timeout: Optional[int] = Field(default=None, ge=1, le=10)


class CustomOriginConfig(_OriginModel):
    port: int = Field(ge=1, le=65535)
    protocol: OriginProtocol
    ssl_protocols: list[SslProtocol] = Field(min_length=1)


class OriginOverride(_OriginModel):
    domain_name: Optional[str] = None
    origin_path: Optional[str] = None
    custom_headers: Optional[dict[str, str]] = None
    connection_attempts: Optional[int] = Field(default=None, ge=1, le=3)
    origin_shield: Optional[OriginShield] = None
    origin_access_control_config: Optional[OriginAccessControlConfig] = None
    timeouts: Optional[Timeouts] = None
    custom_origin_config: Optional[CustomOriginConfig] = None

    @field_validator("domain_name")
    @classmethod
    def _domain_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("domainName must not be empty")
        return value

    @field_validator("origin_path")
    @classmethod
    def _origin_path_shape(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not value.startswith("/"):
            raise ValueError("originPath must start with '/'")
        if value.endswith("/"):
            raise ValueError("originPath must not end with '/'")
        if len(value) > MAX_ORIGIN_PATH:
            raise ValueError(f"originPath is longer than {MAX_ORIGIN_PATH} characters")
        return value

    @field_validator("custom_headers")
    @classmethod
    def _header_names_lower(cls, value: Optional[dict[str, str]]) -> Optional[dict[str, str]]:
        for name in value or {}:
            if name != name.lower():
                raise ValueError(f"header name {name!r} must be lower case")
        return value


class Origin(OriginOverride):
    """Effective origin: every override field plus a mandatory domain name."""
    domain_name: str
