"""
API Routers - subscription plans (public).
"""

from fastapi import APIRouter

from pos_admin.application.dto.pos_dto import PricingPlanDTO
from pos_admin.domain.value_objects import SubscriptionPlan

router = APIRouter(prefix="/api/v1/pricing", tags=["Pricing"])

PLANS: list[PricingPlanDTO] = [
    PricingPlanDTO(
        code=SubscriptionPlan.FREE.value,
        name="Free",
        price="Rp0",
        features=[
            "Basic POS system",
            "Up to 1 outlet",
            "Maximum 10 products",
            "Basic sales report (30 days)",
            "Email support",
            "Mobile app access",
        ],
    ),
    PricingPlanDTO(
        code=SubscriptionPlan.PRO.value,
        name="Pro",
        price="Rp1.577",
        is_popular=True,
        features=[
            "Everything in Free",
            "Unlimited employees",
            "Sales trends & filtering",
            "Product export features",
            "Discount & tax per product",
            "Multiple outlets (additional charge)",
            "Priority support",
            "Advanced analytics",
        ],
    ),
    PricingPlanDTO(
        code=SubscriptionPlan.PRO_PLUS.value,
        name="Pro Plus",
        price="Rp3.450",
        features=[
            "Everything in Pro",
            "Employee attendance system",
            "Kitchen ticket printing",
            "Bundling & bulk pricing",
            "Inventory expiry alerts",
            "Custom branding on receipts",
            "API access",
            "24/7 phone support",
            "Custom integrations",
        ],
    ),
]


@router.get("/plans", response_model=list[PricingPlanDTO])
def list_plans():
    return PLANS
