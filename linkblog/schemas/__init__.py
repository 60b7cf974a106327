from linkblog.schemas.link import LinkMetadata, LinkPayload, LinkRead, parse_form

__all__ = [
    "LinkMetadata",
    "LinkPayload",
    "LinkRead",
    "parse_form",
]
