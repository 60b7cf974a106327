import re
from typing import Optional
from urllib.parse import parse_qsl

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from linkblog.errors import InvalidPayload

_BAD_ESCAPE = re.compile(rb"%(?![0-9A-Fa-f]{2})")


def parse_form(body: bytes) -> dict[str, str]:
    """Decode an ``application/x-www-form-urlencoded`` body.

    Only the first value of a repeated key is kept. Bytes that are not valid
    UTF-8, raw or percent-encoded, and broken percent escapes raise
    ``InvalidPayload``.
    """
    if not body:
        return {}
    if _BAD_ESCAPE.search(body):
        raise InvalidPayload()
    try:
        pairs = parse_qsl(
            body.decode("utf-8"), keep_blank_values=True, errors="strict"
        )
    except ValueError as exc:
        raise InvalidPayload() from exc

    form: dict[str, str] = {}
    for key, value in pairs:
        form.setdefault(key, value)
    return form


class LinkPayload(BaseModel):
    url: str = Field(min_length=1)
    commentary: str = Field(min_length=1)

    @classmethod
    def from_form(cls, form: dict[str, str]) -> "LinkPayload":
        try:
            return cls.model_validate(
                {"url": form.get("url", ""), "commentary": form.get("commentary", "")}
            )
        except ValidationError as exc:
            raise InvalidPayload() from exc


class LinkMetadata(BaseModel):
    title: Optional[str] = None
    image_url: Optional[str] = None


class LinkRead(BaseModel):
    id: int
    url: str
    commentary: str
    title: Optional[str] = None
    image_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
