from typing import Any, Dict, List, Optional, Union
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated, Literal


class WireModel(BaseModel):
    """Base for every model exchanged with the generation service or the dashboard.

    Fields are snake_case in Python and camelCase on the wire.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Target & Result Kinds ---


class TargetKind(str, Enum):
    """The kinds of text subject a search can be run against."""

    DOMAIN = "DOMAIN"
    IP = "IP"
    EMAIL = "EMAIL"


class ResultKind(str, Enum):
    WHOIS = "WHOIS"
    NETWORK = "NETWORK"
    EMAIL = "EMAIL"
    METADATA = "METADATA"


# --- WHOIS Models ---


class Registrant(WireModel):
    name: Optional[str] = None
    organization: Optional[str] = None


class WhoisRecord(WireModel):
    """A WHOIS record. Dates are kept as the opaque strings the service returns."""

    domain_name: str
    registrar: str
    creation_date: str
    expiry_date: str
    updated_date: str
    name_servers: List[str]
    registrant: Optional[Registrant] = None


# --- Network (NAY) Models ---


class Location(WireModel):
    city: str
    country: str


class Hosting(WireModel):
    provider: str
    asn: str


class OpenPort(WireModel):
    port: int
    service: str


class SslCertificate(WireModel):
    issuer: Optional[str] = None
    subject: Optional[str] = None
    valid_from: Optional[str] = None
    valid_to: Optional[str] = None


class DnsRecords(WireModel):
    a: List[str] = Field(default_factory=list, alias="A")
    aaaa: List[str] = Field(default_factory=list, alias="AAAA")
    mx: List[str] = Field(default_factory=list, alias="MX")


class NetworkRecord(WireModel):
    """Network posture of an IP or domain.

    ``ssl_certificate`` is required but nullable: ``None`` means no certificate
    was observed, as opposed to the field being left out.
    """

    target: str
    location: Location
    hosting: Hosting
    open_ports: List[OpenPort]
    ssl_certificate: Optional[SslCertificate]
    technologies: List[str]
    dns_records: DnsRecords


# --- Email Models ---


class Breach(WireModel):
    source: str
    date: str


class SocialProfile(WireModel):
    platform: str
    url: str


class EmailRecord(WireModel):
    """Email address intelligence. ``None`` lists mean "explicitly none found"."""

    email: str
    is_valid_syntax: bool
    domain: str
    has_mx_records: bool
    breaches: Optional[List[Breach]]
    social_profiles: Optional[List[SocialProfile]]


# --- Image Metadata (BEDA) Models ---


class TagDescriptor(WireModel):
    description: str


class GpsCoordinates(WireModel):
    """GPS block of an image. Keys other than the coordinates are kept as-is."""

    model_config = ConfigDict(extra="allow")

    latitude: Optional[float] = Field(None, alias="Latitude")
    longitude: Optional[float] = Field(None, alias="Longitude")

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class MetadataRecord(WireModel):
    file_name: str
    file_size: str
    image: Dict[str, TagDescriptor] = Field(default_factory=dict)
    exif: Dict[str, TagDescriptor] = Field(default_factory=dict)
    gps: Optional[GpsCoordinates] = None


# --- Reliability (FIRA) Models ---


class ReliabilityLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# The service may answer in either dashboard language.
RELIABILITY_WIRE_VALUES: Dict[str, ReliabilityLevel] = {
    "High": ReliabilityLevel.HIGH,
    "Medium": ReliabilityLevel.MEDIUM,
    "Low": ReliabilityLevel.LOW,
    "Élevée": ReliabilityLevel.HIGH,
    "Moyenne": ReliabilityLevel.MEDIUM,
    "Faible": ReliabilityLevel.LOW,
}


class FindingStatus(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    WARNING = "warning"


class Finding(WireModel):
    description: str
    status: FindingStatus


class ReliabilityReview(WireModel):
    """Second-stage critique of a settled analysis result."""

    reliability: ReliabilityLevel = Field(
        ...,
        description="Overall reliability score",
        json_schema_extra={"wire_enum": list(RELIABILITY_WIRE_VALUES)},
    )
    summary: str = Field(
        ..., description="A brief summary of the reliability analysis."
    )
    findings: List[Finding]

    @field_validator("reliability", mode="before")
    @classmethod
    def accept_localized_level(cls, value: Any) -> Any:
        if isinstance(value, str) and value in RELIABILITY_WIRE_VALUES:
            return RELIABILITY_WIRE_VALUES[value]
        return value


# --- Discriminated Analysis Result ---


class WhoisResult(WireModel):
    kind: Literal["WHOIS"] = "WHOIS"
    data: WhoisRecord


class NetworkResult(WireModel):
    kind: Literal["NETWORK"] = "NETWORK"
    data: NetworkRecord


class EmailResult(WireModel):
    kind: Literal["EMAIL"] = "EMAIL"
    data: EmailRecord


class MetadataResult(WireModel):
    kind: Literal["METADATA"] = "METADATA"
    data: MetadataRecord


AnalysisResult = Annotated[
    Union[WhoisResult, NetworkResult, EmailResult, MetadataResult],
    Field(discriminator="kind"),
]

# Results eligible for the reliability pass.
ReviewableResult = Union[WhoisResult, NetworkResult, EmailResult]


# --- Application Configuration Models ---


class GeminiConfig(BaseModel):
    model: str = "gemini-2.5-flash"


class DashboardConfig(BaseModel):
    default_language: Literal["fr", "en"] = "fr"
    default_target: TargetKind = TargetKind.DOMAIN


class LoggingConfig(BaseModel):
    level: str = "INFO"


class AppConfig(BaseModel):
    app_name: str = "Argus Intel"
    version: str = "1.0.0"
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
