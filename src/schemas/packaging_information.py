"""Packaging Information schemas.

The Packaging Information describes the content of a SIP. It is written to
the SIP as ``eas_sip.xml`` once the PDI is complete, so that it can embed
the number of domain objects (AIUs) in the SIP and the hash of the PDI.

Prototypes are usually loaded from JSON:

    {
      "dss": {
        "holding": "PhoneCalls",
        "id": "dss-2026-01-15",
        "pdi_schema": "urn:eas-samples:en:xsd:phonecalls.1.0",
        "production_date": "2026-01-15T00:00:00Z",
        "producer": "CC",
        "entity": "PhoneCalls",
        "application": "PhoneCalls"
      }
    }
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .hashing import EncodedHash


class DataSubmissionSession(BaseModel):
    """A Data Submission Session (DSS): the batch a SIP belongs to.

    Attributes:
        holding: Holding the SIP is ingested into
        id: DSS identifier
        pdi_schema: Name of the schema the PDI conforms to
        pdi_schema_version: Version of the PDI schema
        production_date: When the DSS was produced
        base_retention_date: Date retention periods are calculated from
        producer: Organization or system that produced the data
        entity: Business entity the data belongs to
        priority: Ingestion priority
        application: Application the data is archived for
    """

    holding: str | None = None
    id: str | None = None
    pdi_schema: str | None = None
    pdi_schema_version: str | None = None
    production_date: datetime | None = None
    base_retention_date: datetime | None = None
    producer: str | None = None
    entity: str | None = None
    priority: int = 0
    application: str | None = None


class PackagingInformation(BaseModel):
    """Package-level descriptor of a SIP.

    Attributes:
        dss: Data Submission Session the SIP belongs to
        production_date: When the SIP was produced
        seqno: Sequence number of the SIP within its DSS (1-based)
        is_last: Whether this is the last SIP of its DSS
        aiu_count: Number of domain objects (AIUs) in the PDI
        page_count: Number of pages (unused by most archives)
        pdi_hash: Hash of the PDI, when PDI hashing is enabled
    """

    dss: DataSubmissionSession = Field(default_factory=DataSubmissionSession)
    production_date: datetime | None = None
    seqno: int = 1
    is_last: bool = True
    aiu_count: int = 0
    page_count: int = 0
    pdi_hash: EncodedHash | None = None
