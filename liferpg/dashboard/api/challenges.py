from fastapi import APIRouter, Depends, Query
from typing import Any, Dict, Optional

from liferpg.core.challenges import challenge_summary, is_claimable, is_streak_broken
from liferpg.core.database import StateStore
from ..dependencies import checked_date, get_store
from ..schemas import ChallengeAction

router = APIRouter(prefix="/api/challenges", tags=["challenges"])

def _challenge_view(challenge, store: StateStore, as_of: Optional[str]) -> Dict[str, Any]:
    data = challenge.to_dict()
    data.update({
        "progressPercent": challenge.progress_percent,
        "claimable": is_claimable(challenge, store.logs, as_of),
        "broken": is_streak_broken(challenge, store.logs, as_of)
    })
    return data

@router.get("", response_model=Dict[str, Any])
async def list_challenges(
    as_of: Optional[str] = Query(None, alias="date", description="Дата отсчета YYYY-MM-DD"),
    store: StateStore = Depends(get_store)
):
    """Испытания с пересчитанным прогрессом и журнал подвигов"""
    as_of = checked_date(as_of)
    challenges = store.challenges_view(as_of)
    return {
        "challenges": [_challenge_view(c, store, as_of) for c in challenges],
        "summary": challenge_summary(challenges)
    }

@router.post("/{challenge_id}/accept", response_model=Dict[str, Any])
async def accept(challenge_id: str, payload: Optional[ChallengeAction] = None,
                 store: StateStore = Depends(get_store)):
    on_date = payload.date if payload else None
    challenge = store.accept_challenge(challenge_id, on_date)
    return _challenge_view(challenge, store, on_date)

@router.post("/{challenge_id}/claim", response_model=Dict[str, Any])
async def claim(challenge_id: str, payload: Optional[ChallengeAction] = None,
                store: StateStore = Depends(get_store)):
    as_of = payload.date if payload else None
    challenge = store.claim_challenge(challenge_id, as_of)
    return _challenge_view(challenge, store, as_of)
