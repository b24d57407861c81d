"""Convert raw DTEK payloads into OutageState."""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from ..errors import MissingDataError
from .models import HouseOutage, OutageState


logger = logging.getLogger("outagepulse.provider")


def _blank_to_none(value: str) -> Optional[str]:
    return value or None


def normalize(raw: Any, house: str) -> OutageState:
    """Derive the outage state of one house from a provider payload.

    A payload without a ``data`` collection is a fetch failure. A payload
    whose ``data`` has no entry for ``house`` means no outage.

    Args:
        raw: Decoded JSON returned by the provider
        house: House number key inside ``data``

    Returns:
        OutageState for the house

    Raises:
        MissingDataError: If the payload lacks the data collection
    """
    if not isinstance(raw, Mapping):
        raise MissingDataError("Power outage info missed: payload is not an object")

    data = raw.get("data")
    if data is None:
        raise MissingDataError("Power outage info missed: no data in payload")

    # PHP encodes an empty map as []
    if isinstance(data, list) and not data:
        data = {}
    if not isinstance(data, Mapping):
        raise MissingDataError(
            f"Power outage info missed: data is {type(data).__name__}"
        )

    observed_at = raw.get("updateTimestamp")
    if observed_at is not None:
        observed_at = str(observed_at)

    entry = data.get(house)
    if entry is None:
        logger.info("No power outage: house not listed", extra={
            'extra_fields': {'house': house}
        })
        return OutageState.inactive(observed_at)

    try:
        slot = HouseOutage.model_validate(entry)
    except ValidationError as e:
        raise MissingDataError(f"Power outage info malformed for house {house}: {e}")

    if not slot.has_outage:
        logger.info("No power outage")
        return OutageState.inactive(observed_at)

    logger.info("Power outage detected", extra={
        'extra_fields': {
            'house': house,
            'reason': slot.sub_type,
            'start': slot.start_date,
            'end': slot.end_date,
        }
    })
    return OutageState(
        active=True,
        reason=_blank_to_none(slot.sub_type),
        start_time=_blank_to_none(slot.start_date),
        end_time=_blank_to_none(slot.end_date),
        observed_at=observed_at,
    )
