from .nonmem_dataset import (
    NONMEM_SCHEMA,
    Compartment,
    EventType,
    NonmemDatasetSchema,
    NonmemVariable,
)
from .pk_parameters import PKParameters
from .source_domains import (
    DM_DOMAIN,
    EX_DOMAIN,
    PC_DOMAIN,
    SourceDomainSpec,
    get_source_domain,
)

__all__ = [
    "DM_DOMAIN",
    "EX_DOMAIN",
    "NONMEM_SCHEMA",
    "PC_DOMAIN",
    "Compartment",
    "EventType",
    "NonmemDatasetSchema",
    "NonmemVariable",
    "PKParameters",
    "SourceDomainSpec",
    "get_source_domain",
]
