from decimal import Decimal
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import AspectSource


class CategoryResolution(BaseModel):
    category_id: str
    category_name: str
    match_type: str
    is_leaf: bool = True

    model_config = ConfigDict(frozen=True)


class ResolvedAspect(BaseModel):
    name: str
    value: str
    source: AspectSource

    model_config = ConfigDict(frozen=True)


class AspectResolution(BaseModel):
    resolved: Dict[str, ResolvedAspect] = Field(default_factory=dict)
    unresolved: List[str] = Field(default_factory=list)

    def values(self) -> Dict[str, str]:
        return {name: aspect.value for name, aspect in self.resolved.items()}


class ListingPolicies(BaseModel):
    fulfillment_policy_id: str
    payment_policy_id: str
    return_policy_id: str

    def to_ebay(self) -> Dict[str, str]:
        return {
            "fulfillmentPolicyId": self.fulfillment_policy_id,
            "paymentPolicyId": self.payment_policy_id,
            "returnPolicyId": self.return_policy_id,
        }


class PublishRequest(BaseModel):
    asin: str
    price: Decimal
    quantity: int = 1
    condition: str = "NEW"
    publish: bool = True


class PublicationResult(BaseModel):
    sku: str
    asin: str
    title: str
    category_id: str
    category_name: str
    match_type: str
    offer_id: str
    listing_id: Optional[str] = None
    listing_url: Optional[str] = None
    published: bool
    unresolved_aspects: List[str] = Field(default_factory=list)
