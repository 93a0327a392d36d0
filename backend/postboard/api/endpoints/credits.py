from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from postboard.core.database import get_db
from postboard.core.security import CurrentUser, get_current_user
from postboard.schemas.credits import BalanceResponse, CreditPurchaseResponse, PurchaseCreditsRequest
from postboard.services.credits_engine import get_balance, get_credit_history, purchase_credits


router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/credits/balance", response_model=BalanceResponse)
async def balance(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return BalanceResponse(balance=get_balance(db, current_user.id))


@router.get("/credits/history", response_model=List[CreditPurchaseResponse])
async def history(db: Session = Depends(get_db), current_user: CurrentUser = Depends(get_current_user)):
    return get_credit_history(db, current_user.id)


@router.post("/credits/purchase", response_model=CreditPurchaseResponse, status_code=201)
async def purchase(
    body: PurchaseCreditsRequest,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return purchase_credits(
        db,
        user_id=current_user.id,
        credits=body.credits,
        payment_method=body.payment_method,
        payment_details=body.payment_details,
    )
