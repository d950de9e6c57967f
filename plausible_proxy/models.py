from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class PayloadModifiers(BaseModel):
    """Additions returned by the event callback.

    Only ``props`` is recognised; anything else the callback returns is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    props: Optional[Dict[str, Any]] = None


class InboundEvent(BaseModel):
    """Event as posted by the Plausible tracking script.

    Values are passed through verbatim, so every field accepts any JSON type.
    """

    model_config = ConfigDict(extra="allow")

    n: Any = None
    u: Any = None
    d: Any = None
    r: Any = None


class OutboundEventBody(BaseModel):
    name: Any = None
    url: Any = None
    domain: Any = None
    referrer: Any = None
    props: Optional[Dict[str, Any]] = None

    @classmethod
    def from_event(
        cls, event: InboundEvent, modifiers: PayloadModifiers
    ) -> "OutboundEventBody":
        return cls(
            name=event.n,
            url=event.u,
            domain=event.d,
            referrer=event.r,
            props=modifiers.props,
        )

    def to_payload(self) -> Dict[str, Any]:
        body = self.model_dump(mode="json")
        if self.props is None:
            body.pop("props")
        return body
