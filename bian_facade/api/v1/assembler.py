"""Success payload assembly for facility retrieval"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from bian_facade.schemas.facility import TOTAL_COUNT_HEADER, RetrieveCreditCardFacilitiesResponse
from bian_facade.domain.models import FacilityCollection


@dataclass(frozen=True)
class AssembledResponse:
    body: Dict[str, Any]
    total_count: str

    @property
    def headers(self) -> Dict[str, str]:
        return {TOTAL_COUNT_HEADER: self.total_count}


def assemble_response(collection: FacilityCollection, upstream_count: Optional[str] = None) -> AssembledResponse:
    """
    Serialize a facility collection and work out the Total-Count header.

    An upstream-supplied count is passed through verbatim (it may describe more
    items than this page carries); otherwise the count is the collection size.
    """
    body = RetrieveCreditCardFacilitiesResponse.from_domain(collection).to_wire()
    total_count = upstream_count if upstream_count is not None else str(len(collection))
    return AssembledResponse(body=body, total_count=total_count)
