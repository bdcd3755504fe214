"""Site document model and its interchange codec.

This subpackage defines the typed tree edited by the builder
(:class:`Site` -> :class:`Page` -> :class:`Section`, plus the site-wide
:class:`GlobalConfig`) and converts it to and from the nested mapping used for
import, export and persistence. The model is plain data; all edits go through
:class:`sitecraft.mutations.MutationEngine`.

Examples
--------
>>> from sitecraft.document import default_site, dumps_document
>>> site = default_site()  # doctest: +SKIP
>>> dumps_document(site, fmt="yaml").startswith("site:")  # doctest: +SKIP
True
"""

from .defaults import DEFAULT_DOCUMENT_PATH, blank_site, default_site
from .helpers import check_property_map, check_structured, utc_now
from .loader import (
    DocumentFormat,
    dumps_document,
    export_document,
    format_for_path,
    import_document,
    loads_document,
    site_from_mapping,
    site_to_mapping,
)
from .models import (
    DocumentError,
    GlobalConfig,
    JsonValue,
    LayoutConfig,
    LayoutSlot,
    Page,
    PageMetadata,
    PropertyMap,
    SeoConfig,
    Section,
    Site,
    StructuredDataError,
    Theme,
    UnknownFieldError,
)

__all__ = [
    "DEFAULT_DOCUMENT_PATH",
    "DocumentError",
    "DocumentFormat",
    "GlobalConfig",
    "JsonValue",
    "LayoutConfig",
    "LayoutSlot",
    "Page",
    "PageMetadata",
    "PropertyMap",
    "SeoConfig",
    "Section",
    "Site",
    "StructuredDataError",
    "Theme",
    "UnknownFieldError",
    "blank_site",
    "check_property_map",
    "check_structured",
    "default_site",
    "dumps_document",
    "export_document",
    "format_for_path",
    "import_document",
    "loads_document",
    "site_from_mapping",
    "site_to_mapping",
    "utc_now",
]
